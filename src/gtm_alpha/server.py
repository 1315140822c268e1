"""GTM Alpha MCP Server.

FastMCP server with 4 tools, an HTML report resource, and JSON HTTP routes
for the SSE / streamable-HTTP transports.
Run: gtm-alpha-mcp
"""

from __future__ import annotations

import functools
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, Response

from . import __version__
from .core.audit import audit_scores, parse_focus_areas
from .core.consultation import compute_consultation
from .core.digital import assess_digital_presence
from .core.models import StoredConsultation
from .core.roadmap import (
    build_roadmap,
    focus_from_priorities,
    identify_risks,
    parse_priorities,
    phases_for_timeframe,
    plan_resources,
    success_metrics,
)
from .core.scoring import KEYWORDS, matched_keywords, parse_letter, rank_letters, resolve_focus, score_epic
from .report import render_report
from .scheduler import PurgeScheduler
from .schemas import gemini_functions, openai_actions_schema
from .service import ConsultationOutcome, consult, track_progress
from .store import ConsultationStore, StoreError
from .wire import canonical_fields, context_from_wire

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
PERSISTS = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=False)

store = ConsultationStore()
scheduler = PurgeScheduler(store)
_active_sessions = 0


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Open the consultation store and start the purge scheduler for the first session."""
    global _active_sessions
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    await store.open()
    await scheduler.start()
    _active_sessions += 1
    try:
        yield
    finally:
        _active_sessions -= 1
        if _active_sessions == 0:
            await scheduler.stop()
            await store.close()


mcp = FastMCP(
    "GTM Alpha",
    instructions=(
        "Go-to-market strategy consultations using the EPIC framework: Ecosystem & ABM, "
        "Product-led growth, Inbound & outbound demand, Community-led growth. "
        "Consultations are cached per business for 30 days and can be compared over time."
    ),
    lifespan=lifespan,
)


async def _get_store() -> ConsultationStore:
    """The shared store, opened on first use (HTTP routes run outside MCP sessions)."""
    if not store.is_open:
        await store.open()
    return store


def _context_fields(**kwargs: Any) -> dict:
    return {k: v for k, v in kwargs.items() if v not in (None, "")}


def _consultation_payload(outcome: ConsultationOutcome) -> dict:
    consultation = outcome.consultation
    result = consultation.result
    scores = result.epic_scores
    if outcome.cached:
        source = f"Cached consultation from {outcome.days_old} day(s) ago."
    else:
        source = "New consultation."
    summary = (
        f"{consultation.context.company_name}: primary focus {result.primary_focus_name} "
        f"({result.primary_focus.value} {scores.get(result.primary_focus)}), secondary "
        f"{result.secondary_focus_name}. {len(result.recommendations)} recommendations and a "
        f"{result.roadmap.capacity.value}-capacity roadmap. {source}"
    )
    return {
        "title": "GTM Alpha Consultation",
        "consultation_id": consultation.consultation_id,
        "business_key": consultation.business_key,
        "created_at": consultation.created_at.isoformat(),
        "cached": outcome.cached,
        "days_old": outcome.days_old,
        "context": consultation.context.model_dump(mode="json"),
        **result.model_dump(mode="json"),
        "progress": outcome.progress.model_dump(mode="json") if outcome.progress else None,
        "summary": summary,
    }


def _audit_payload(fields: dict, focus_areas: Any = None) -> dict:
    context = context_from_wire(fields)
    scores = score_epic(context)
    ranked = rank_letters(scores)
    areas = parse_focus_areas(focus_areas)
    audit = audit_scores(scores, areas)
    text = context.match_text
    digital = assess_digital_presence(context)
    return {
        "title": "EPIC Audit",
        "epic_scores": scores.model_dump(mode="json"),
        "ranking": [letter.value for letter in ranked],
        "primary_focus": ranked[0].value,
        "secondary_focus": ranked[1].value,
        **audit.model_dump(mode="json"),
        "keyword_matches": {letter.value: matched_keywords(text, letter) for letter in KEYWORDS if letter in areas},
        "digital_presence": digital.model_dump(mode="json") if digital else None,
        "summary": " | ".join(f"{letter.value}: {scores.get(letter)}" for letter in ranked),
    }


def _roadmap_payload(
    fields: dict,
    primary_focus: Optional[str] = None,
    secondary_focus: Optional[str] = None,
    timeframe: str = "180-day",
    priorities: Any = None,
) -> dict:
    """Roadmap for the context. Explicit focus letters win over priorities,
    and priorities win over the score ranking."""
    context = context_from_wire(fields)
    wanted = parse_priorities(priorities)
    primary, secondary = focus_from_priorities(wanted, parse_letter(primary_focus))
    focus = resolve_focus(score_epic(context), primary, parse_letter(secondary_focus) or secondary)
    roadmap = build_roadmap(focus, context)
    phases = phases_for_timeframe(timeframe)
    task_count = sum(len(getattr(roadmap, phase)) for phase in phases)
    return {
        "title": "GTM Roadmap",
        "timeframe": timeframe,
        "priorities": wanted,
        "success_metrics": {
            key: metric.model_dump(mode="json") for key, metric in success_metrics(wanted, timeframe).items()
        },
        "primary_focus": focus.primary.value,
        "primary_focus_name": focus.primary.display_name,
        "secondary_focus": focus.secondary.value,
        "secondary_focus_name": focus.secondary.display_name,
        "capacity": roadmap.capacity.value,
        "phases": {phase: [t.model_dump(mode="json") for t in getattr(roadmap, phase)] for phase in phases},
        "risks": [r.model_dump(mode="json") for r in identify_risks(roadmap.capacity)],
        "resources": plan_resources(context).model_dump(mode="json"),
        "summary": (
            f"{len(phases)} phase(s), {task_count} tasks led by {focus.primary.display_name} "
            f"with support from {focus.secondary.display_name} ({roadmap.capacity.value} capacity)."
        ),
    }


# ─── Tool 1: Consultation ────────────────────────────────────────────────────


@mcp.tool(annotations=PERSISTS)
async def gtm_consultation(
    company_name: str,
    challenge: str,
    industry: str = "",
    business_stage: str = "",
    company_description: str = "",
    client_name: str = "",
    team_size: Optional[int] = None,
    monthly_budget: str = "",
    website_url: str = "",
    linkedin_url: str = "",
    twitter_url: str = "",
) -> dict:
    """Full EPIC go-to-market consultation: scores, focus, recommendations, roadmap and risks.

    Results are cached per business (company + industry + stage) for 30 days,
    so asking again returns the same consultation.

    Args:
        company_name: Company name.
        challenge: The go-to-market challenge in plain words.
        industry: e.g. 'SaaS', 'Healthcare', 'Finance', 'Technology'.
        business_stage: e.g. 'bootstrapped-pmf', 'venture-seed', 'venture-series-a', 'growth', 'enterprise'.
        company_description: What the company does.
        client_name: Person receiving the consultation.
        team_size: GTM team headcount.
        monthly_budget: Monthly GTM budget, e.g. '5000' or '$5,000'.
        website_url: Company website (enables digital presence assessment).
        linkedin_url: Company LinkedIn page.
        twitter_url: Company Twitter/X profile.
    """
    fields = _context_fields(
        company_name=company_name,
        challenge_text=challenge,
        industry=industry,
        business_stage=business_stage,
        company_description=company_description,
        client_name=client_name,
        team_size=team_size,
        monthly_budget=monthly_budget,
        website_url=website_url,
        linkedin_url=linkedin_url,
        twitter_url=twitter_url,
    )
    outcome = await consult(context_from_wire(fields), await _get_store())
    return _consultation_payload(outcome)


# ─── Tool 2: EPIC Audit ──────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def epic_audit(
    challenge: str,
    industry: str = "",
    business_stage: str = "",
    company_description: str = "",
    website_url: str = "",
    linkedin_url: str = "",
    twitter_url: str = "",
    focus_areas: Optional[list[str]] = None,
) -> dict:
    """EPIC score breakdown with overall maturity, gaps, next steps and the keywords behind each score.

    Nothing is stored.

    Args:
        challenge: The go-to-market challenge in plain words.
        industry: Industry sector.
        business_stage: Business development stage.
        company_description: What the company does.
        website_url: Company website.
        linkedin_url: Company LinkedIn page.
        twitter_url: Company Twitter/X profile.
        focus_areas: Limit gaps and keyword matches to these areas:
            'ecosystem', 'product_led', 'inbound', 'community' (or E/P/I/C). Default all four.
    """
    fields = _context_fields(
        challenge_text=challenge,
        industry=industry,
        business_stage=business_stage,
        company_description=company_description,
        website_url=website_url,
        linkedin_url=linkedin_url,
        twitter_url=twitter_url,
    )
    return _audit_payload(fields, focus_areas)


# ─── Tool 3: Roadmap ─────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def generate_roadmap(
    challenge: str = "",
    industry: str = "",
    business_stage: str = "",
    primary_focus: str = "",
    secondary_focus: str = "",
    team_size: Optional[int] = None,
    monthly_budget: str = "",
    timeframe: str = "180-day",
    priorities: Optional[list[str]] = None,
) -> dict:
    """Phased GTM roadmap with owners, deadlines and success metrics, sized to team capacity.

    Args:
        challenge: The go-to-market challenge; used to pick the focus when none is given.
        industry: Industry sector.
        business_stage: Business development stage.
        primary_focus: Force the primary focus: 'E', 'P', 'I' or 'C'.
        secondary_focus: Force the secondary focus: 'E', 'P', 'I' or 'C'.
        team_size: GTM team headcount.
        monthly_budget: Monthly GTM budget, e.g. '5000' or '$5k'.
        timeframe: '30-day', '60-day', '90-day' or '180-day'. Default '180-day'.
        priorities: Business priorities such as 'lead generation', 'customer retention'
            or 'product adoption'. They pick the focus when no letter is forced and
            set the KPI targets.
    """
    fields = _context_fields(
        challenge_text=challenge,
        industry=industry,
        business_stage=business_stage,
        team_size=team_size,
        monthly_budget=monthly_budget,
    )
    return _roadmap_payload(fields, primary_focus, secondary_focus, timeframe, priorities)


# ─── Tool 4: Progress Tracker (Stateful) ─────────────────────────────────────


@mcp.tool(annotations=PERSISTS)
async def epic_progress_tracker(
    company_name: str,
    industry: str = "",
    business_stage: str = "",
    progress_update: str = "",
    new_challenges: str = "",
) -> dict:
    """How a business's EPIC scores moved since its last consultation.

    Needs an earlier gtm_consultation for the same company, industry and stage,
    and at least 14 days between checks.

    Args:
        company_name: Company name, as used in the earlier consultation.
        industry: Industry, as used in the earlier consultation.
        business_stage: Business stage, as used in the earlier consultation.
        progress_update: What changed since the last consultation.
        new_challenges: Current go-to-market challenges.
    """
    fields = _context_fields(company_name=company_name, industry=industry, business_stage=business_stage)
    check = await track_progress(
        context_from_wire(fields),
        await _get_store(),
        progress_update=progress_update,
        new_challenges=new_challenges,
    )

    if check.status == "no_baseline":
        summary = f"No earlier consultation found for {company_name}. Run gtm_consultation first to set a baseline."
    elif check.status == "too_early":
        summary = (
            f"Last consultation was {check.days_since_last} day(s) ago. "
            f"Check again in {check.days_until_next_check} day(s)."
        )
    else:
        report = check.report
        summary = (
            f"{report.overall_improvement:+d}% overall over {report.timespan_days} days "
            f"({report.momentum}). {report.assessment}"
        )

    return {
        "title": "EPIC Progress",
        **check.model_dump(mode="json"),
        "summary": summary,
    }


# ─── Resource: HTML report ───────────────────────────────────────────────────


@mcp.resource("report://{business_key}", mime_type="text/html")
async def consultation_report(business_key: str) -> str:
    """HTML report of the most recent consultation stored for a business key."""
    history = await (await _get_store()).history(business_key)
    if not history:
        raise ValueError(f"No consultation stored for {business_key}")
    latest: StoredConsultation = history[-1]
    return render_report(latest.context, latest.result, latest.consultation_id, latest.created_at)


# ─── HTTP routes ─────────────────────────────────────────────────────────────


class BadRequest(Exception):
    pass


async def _json_object(request: Request) -> dict:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise BadRequest("Request body must be valid JSON") from exc
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object")
    return payload


def _api(handler):
    """Map transport errors to HTTP status codes."""

    @functools.wraps(handler)
    async def wrapper(request: Request) -> Response:
        try:
            return await handler(request)
        except BadRequest as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        except StoreError as exc:
            logger.error("Consultation store unavailable: %s", exc)
            return JSONResponse({"error": "Consultation store unavailable"}, status_code=503)

    return wrapper


@mcp.custom_route("/api/health", methods=["GET"])
@_api
async def api_health(request: Request) -> Response:
    return JSONResponse({
        "status": "ok",
        "service": "gtm-alpha",
        "version": __version__,
        "store_open": store.is_open,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@mcp.custom_route("/api/analyze", methods=["POST"])
@_api
async def api_analyze(request: Request) -> Response:
    payload = await _json_object(request)
    outcome = await consult(context_from_wire(payload), await _get_store())
    body = _consultation_payload(outcome)
    if payload.get("include_report"):
        consultation = outcome.consultation
        body["report_html"] = render_report(
            consultation.context, consultation.result, consultation.consultation_id, consultation.created_at
        )
    return JSONResponse(body)


def _scores_payload(consultation: StoredConsultation, cached: bool) -> dict:
    result = consultation.result
    return {
        "consultation_id": consultation.consultation_id,
        "business_key": consultation.business_key,
        "company_name": consultation.context.company_name,
        "epic_scores": result.epic_scores.model_dump(mode="json"),
        "primary_focus": result.primary_focus.value,
        "primary_focus_name": result.primary_focus_name,
        "secondary_focus": result.secondary_focus.value,
        "secondary_focus_name": result.secondary_focus_name,
        "created_at": consultation.created_at.isoformat(),
        "cached": cached,
    }


@mcp.custom_route("/api/epic-scores", methods=["GET", "POST"])
@_api
async def api_epic_scores(request: Request) -> Response:
    if request.method == "GET":
        consultation_id = request.query_params.get("consultation_id", "").strip()
        if not consultation_id:
            raise BadRequest("consultation_id query parameter is required")
        consultation = await (await _get_store()).get_by_id(consultation_id)
        if consultation is None:
            return JSONResponse({"error": f"Consultation {consultation_id} not found"}, status_code=404)
        return JSONResponse(_scores_payload(consultation, cached=True))

    payload = await _json_object(request)
    outcome = await consult(context_from_wire(payload), await _get_store())
    return JSONResponse(_scores_payload(outcome.consultation, cached=outcome.cached))


@mcp.custom_route("/api/roadmap", methods=["POST"])
@_api
async def api_roadmap(request: Request) -> Response:
    payload = await _json_object(request)
    try:
        body = _roadmap_payload(
            canonical_fields(payload),
            payload.get("primary_focus"),
            payload.get("secondary_focus"),
            str(payload.get("timeframe") or "180-day"),
            payload.get("priorities"),
        )
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc
    return JSONResponse(body)


@mcp.custom_route("/api/report", methods=["POST"])
@_api
async def api_report(request: Request) -> Response:
    payload = await _json_object(request)
    context = context_from_wire(payload)
    return HTMLResponse(render_report(context, compute_consultation(context)))


@mcp.custom_route("/api/schemas/openai", methods=["GET"])
@_api
async def api_openai_schema(request: Request) -> Response:
    return JSONResponse(openai_actions_schema(str(request.base_url)))


@mcp.custom_route("/api/schemas/gemini", methods=["GET"])
@_api
async def api_gemini_functions(request: Request) -> Response:
    return JSONResponse({"functions": gemini_functions()})


def main():
    """Entry point for the gtm-alpha-mcp command (stdio transport)."""
    mcp.run()


if __name__ == "__main__":
    main()
