"""gtm-alpha command line.

    gtm-alpha consult --company Acme --industry SaaS --challenge "..."
    gtm-alpha consult --input business.json --api-url http://localhost:8000
    gtm-alpha report --input business.json --output report.html
    gtm-alpha serve --transport sse --port 8000
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional, TextIO

import click

from . import __version__
from .client import APIError, GTMAlphaClient
from .core.consultation import compute_consultation
from .report import render_report
from .wire import canonical_fields, context_from_wire

logger = logging.getLogger(__name__)


def _read_payload(input_file: Optional[TextIO], flags: dict) -> dict:
    """JSON object from --input (or piped stdin), overlaid with any flags given."""
    payload: dict = {}
    source = input_file
    if source is None and not sys.stdin.isatty() and not any(flags.values()):
        source = click.get_text_stream("stdin")
    if source is not None:
        text = source.read()
        if text.strip():
            try:
                payload = json.loads(text)
            except json.JSONDecodeError as exc:
                raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--input") from exc
            if not isinstance(payload, dict):
                raise click.BadParameter("must be a JSON object", param_hint="--input")
    payload.update({k: v for k, v in flags.items() if v not in (None, "")})
    return payload


def _business_options(func):
    options = [
        click.option("--input", "input_file", type=click.File("r"), help="JSON file with the business description ('-' for stdin)."),
        click.option("--company", "company_name", help="Company name."),
        click.option("--industry", help="Industry, e.g. SaaS, Healthcare, Finance."),
        click.option("--stage", "business_stage", help="Business stage, e.g. venture-seed."),
        click.option("--challenge", "challenge_text", help="The go-to-market challenge."),
        click.option("--description", "company_description", help="What the company does."),
        click.option("--team-size", type=int, help="GTM team headcount."),
        click.option("--budget", "monthly_budget", help="Monthly GTM budget."),
        click.option("--website", "website_url", help="Company website."),
        click.option("--linkedin", "linkedin_url", help="Company LinkedIn page."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level.")
@click.version_option(version=__version__)
def cli(verbose: bool):
    """EPIC go-to-market consultations."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@cli.command()
@_business_options
@click.option("--api-url", help="Send the request to a running server instead of computing locally.")
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Request timeout in seconds.")
def consult(input_file, api_url: Optional[str], timeout: float, **flags):
    """Run a consultation and print it as JSON."""
    payload = _read_payload(input_file, flags)

    if api_url:
        client = GTMAlphaClient(api_url, timeout=timeout)
        try:
            body = asyncio.run(client.analyze(canonical_fields(payload)))
        except APIError as exc:
            raise click.ClickException(str(exc)) from exc
    else:
        body = compute_consultation(context_from_wire(payload)).model_dump(mode="json")

    click.echo(json.dumps(body, indent=2))


@cli.command()
@_business_options
@click.option("--output", "-o", type=click.File("w"), default="-", help="Where to write the HTML (default stdout).")
def report(input_file, output, **flags):
    """Render a consultation as a standalone HTML report."""
    context = context_from_wire(_read_payload(input_file, flags))
    output.write(render_report(context, compute_consultation(context)))


@cli.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    show_default=True,
)
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=8000, show_default=True)
def serve(transport: str, host: str, port: int):
    """Run the MCP server. HTTP transports also serve the /api routes."""
    from .server import mcp

    root = logging.getLogger()
    if root.level > logging.INFO:
        root.setLevel(logging.INFO)
    mcp.settings.host = host
    mcp.settings.port = port
    mcp.run(transport=transport)


def main():
    cli()


if __name__ == "__main__":
    main()
