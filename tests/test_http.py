from gtm_alpha import server
from gtm_alpha.store import ConsultationStore

from conftest import SEED_SAAS, sqlite_url


def test_health(http):
    response = http.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["service"] == "gtm-alpha"


def test_analyze_then_cached(http):
    first = http.post("/api/analyze", json=SEED_SAAS)
    assert first.status_code == 200
    body = first.json()
    assert body["cached"] is False
    assert body["epic_scores"] == {"E": 39, "P": 59, "I": 30, "C": 22}
    assert body["primary_focus"] == "P"
    assert body["consultation_id"].startswith("GTM-ACM-")
    assert "report_html" not in body

    second = http.post("/api/analyze", json=SEED_SAAS).json()
    assert second["cached"] is True
    assert second["consultation_id"] == body["consultation_id"]


def test_analyze_accepts_legacy_field_names(http):
    body = http.post("/api/analyze", json={
        "company": "Acme Analytics",
        "market": "SaaS",
        "stage": "venture-seed",
        "gtm_challenge": "We need better product-led growth and onboarding",
    }).json()
    assert body["epic_scores"] == {"E": 39, "P": 59, "I": 30, "C": 22}


def test_analyze_with_report(http):
    body = http.post("/api/analyze", json={**SEED_SAAS, "include_report": True}).json()
    assert body["report_html"].startswith("<!DOCTYPE html>")
    assert "Acme Analytics" in body["report_html"]


def test_empty_object_is_a_valid_request(http):
    body = http.post("/api/analyze", json={}).json()
    assert body["primary_focus"] == "P"
    assert body["secondary_focus"] == "E"
    assert len(body["recommendations"]) == 5


def test_malformed_bodies_are_rejected(http):
    assert http.post("/api/analyze", content=b"{not json", headers={"content-type": "application/json"}).status_code == 400
    assert http.post("/api/analyze", json=["company", "Acme"]).status_code == 400
    assert http.post("/api/roadmap", content=b"\xff\xfe", headers={"content-type": "application/json"}).status_code == 400


def test_wrong_method(http):
    assert http.get("/api/analyze").status_code == 405


def test_epic_scores_post_and_lookup(http):
    posted = http.post("/api/epic-scores", json=SEED_SAAS).json()
    assert posted["epic_scores"] == {"E": 39, "P": 59, "I": 30, "C": 22}
    assert posted["primary_focus_name"] == "Product-Led Growth Acceleration"
    assert "recommendations" not in posted

    looked_up = http.get("/api/epic-scores", params={"consultation_id": posted["consultation_id"]})
    assert looked_up.status_code == 200
    assert looked_up.json()["epic_scores"] == posted["epic_scores"]


def test_epic_scores_lookup_errors(http):
    assert http.get("/api/epic-scores").status_code == 400
    assert http.get("/api/epic-scores", params={"consultation_id": "GTM-NOPE-00000000"}).status_code == 404


def test_roadmap_with_focus_override_and_timeframe(http):
    body = http.post("/api/roadmap", json={"primary_focus": "c", "timeframe": "60-day", "team_size": 2, "budget": "500"}).json()
    assert body["primary_focus"] == "C"
    assert body["secondary_focus"] == "P"
    assert list(body["phases"]) == ["days_30", "days_60"]
    assert body["capacity"] == "constrained"
    assert len(body["phases"]["days_30"]) == 3
    assert len(body["risks"]) == 6


def test_roadmap_rejects_unknown_focus(http):
    response = http.post("/api/roadmap", json={"primary_focus": "Z"})
    assert response.status_code == 400
    assert "expected one of" in response.json()["error"]


def test_report_is_html_with_escaped_input(http):
    response = http.post("/api/report", json={"company_name": "<script>alert(1)</script>"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<script>alert(1)</script>" not in response.text
    assert "&lt;script&gt;" in response.text


def test_openai_schema(http):
    schema = http.get("/api/schemas/openai").json()
    assert schema["openapi"] == "3.1.0"
    assert schema["servers"] == [{"url": "http://testserver"}]
    assert set(schema["paths"]) == {"/api/analyze", "/api/epic-scores", "/api/roadmap"}


def test_gemini_functions(http):
    functions = http.get("/api/schemas/gemini").json()["functions"]
    assert [f["name"] for f in functions] == ["gtm_consultation", "gtm_roadmap"]
    assert functions[0]["parameters"]["required"] == ["company_name", "challenge_text"]


def test_store_failure_is_503(tmp_path, monkeypatch):
    from starlette.testclient import TestClient

    broken = ConsultationStore(url=sqlite_url(tmp_path / "missing" / "x.db"))
    monkeypatch.setattr(server, "store", broken)
    with TestClient(server.mcp.sse_app()) as client:
        response = client.post("/api/analyze", json=SEED_SAAS)
    assert response.status_code == 503
    assert response.json() == {"error": "Consultation store unavailable"}


def test_roadmap_from_priorities_and_annual_budget_range(http):
    body = http.post("/api/roadmap", json={
        "priorities": "customer retention, lead generation",
        "timeframe": "90-day",
        "budget_range": "250k-500k",
        "team_size": "20+",
    }).json()
    assert body["primary_focus"] == "P"
    assert body["secondary_focus"] == "I"
    assert body["capacity"] == "strong"
    assert body["success_metrics"]["lead_generation"]["target"] == 300
    assert list(body["phases"]) == ["days_30", "days_60", "first_quarter"]
