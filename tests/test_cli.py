import json

import httpx
import pytest
from click.testing import CliRunner

from gtm_alpha import __version__
from gtm_alpha import cli as cli_module
from gtm_alpha.cli import cli
from gtm_alpha.client import GTMAlphaClient

from conftest import SEED_SAAS


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_consult_from_flags(runner):
    result = runner.invoke(cli, [
        "consult",
        "--company", "Acme Analytics",
        "--industry", "SaaS",
        "--stage", "venture-seed",
        "--challenge", "We need better product-led growth and onboarding",
    ])
    assert result.exit_code == 0, result.output
    body = json.loads(result.output)
    assert body["epic_scores"] == {"E": 39, "P": 59, "I": 30, "C": 22}
    assert body["primary_focus"] == "P"


def test_consult_from_stdin_is_deterministic(runner):
    first = runner.invoke(cli, ["consult"], input=json.dumps(SEED_SAAS))
    second = runner.invoke(cli, ["consult"], input=json.dumps(SEED_SAAS))
    assert first.exit_code == 0, first.output
    assert first.output == second.output


def test_consult_from_file_with_flag_override(runner, tmp_path):
    path = tmp_path / "business.json"
    path.write_text(json.dumps({"company": "Tiny", "team_size": 40, "budget": "100000"}))
    result = runner.invoke(cli, ["consult", "--input", str(path), "--team-size", "2", "--budget", "500"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["roadmap"]["capacity"] == "constrained"


def test_consult_rejects_malformed_json(runner):
    result = runner.invoke(cli, ["consult"], input="{not json")
    assert result.exit_code != 0
    assert "not valid JSON" in result.output


def test_consult_rejects_non_object_json(runner):
    result = runner.invoke(cli, ["consult"], input="[1, 2]")
    assert result.exit_code != 0
    assert "must be a JSON object" in result.output


def test_consult_through_api(runner, monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"consultation_id": "GTM-ACM-12345678", "cached": True})

    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(
        cli_module,
        "GTMAlphaClient",
        lambda url, timeout: GTMAlphaClient(url, timeout=timeout, transport=transport),
    )

    result = runner.invoke(cli, ["consult", "--company", "Acme", "--api-url", "http://gtm.test"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["cached"] is True
    assert seen["body"] == {"company_name": "Acme"}


def test_consult_api_error_exits_nonzero(runner, monkeypatch):
    transport = httpx.MockTransport(lambda request: httpx.Response(503, json={"error": "Consultation store unavailable"}))
    monkeypatch.setattr(
        cli_module,
        "GTMAlphaClient",
        lambda url, timeout: GTMAlphaClient(url, timeout=timeout, transport=transport),
    )

    result = runner.invoke(cli, ["consult", "--company", "Acme", "--api-url", "http://gtm.test"])
    assert result.exit_code == 1
    assert "Consultation store unavailable" in result.output


def test_report_writes_html(runner, tmp_path):
    out = tmp_path / "report.html"
    result = runner.invoke(cli, ["report", "--company", "Acme", "--challenge", "community events", "-o", str(out)])
    assert result.exit_code == 0, result.output
    html = out.read_text()
    assert html.startswith("<!DOCTYPE html>")
    assert "GTM Alpha Consultation: Acme" in html


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert __version__ in result.output
