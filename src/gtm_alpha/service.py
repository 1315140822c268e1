"""Consultation service — cache-aside consultations and progress tracking.

The scoring core stays pure; this module wraps it with the consultation
store: check the store, compute on a miss, write the result back. The
check-compute-write sequence runs under the store's per-key lock so two
identical concurrent requests produce a single stored consultation.
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from .core.consultation import compute_consultation
from .core.models import BusinessContext, ProgressReport, StoredConsultation
from .core.normalizer import normalize
from .core.progress import MIN_DAYS_BETWEEN_CHECKS, compare_progress, trend
from .store import ConsultationStore, business_key, utcnow

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_CHALLENGE = "Progress review and strategic optimization assessment"
DEFAULT_PROGRESS_UPDATE = "Ongoing GTM optimization"


class ConsultationOutcome(BaseModel):
    """A consultation plus where it came from."""

    consultation: StoredConsultation
    cached: bool
    days_old: int = 0
    progress: Optional[ProgressReport] = None


class ProgressCheck(BaseModel):
    """Result of a progress check.

    status is one of:
      - no_baseline: nothing stored for this business yet
      - too_early: the last consultation is younger than MIN_DAYS_BETWEEN_CHECKS
      - updated: a new consultation was stored and compared to the last one
    """

    status: str
    business_key: str
    history_count: int = 0
    days_since_last: Optional[int] = None
    days_until_next_check: Optional[int] = None
    baseline: Optional[StoredConsultation] = None
    consultation: Optional[StoredConsultation] = None
    report: Optional[ProgressReport] = None
    trend: Optional[dict] = None


def new_consultation_id(context: BusinessContext) -> str:
    """GTM-<first three letters of the company>-<random hex>."""
    prefix = re.sub(r"[^A-Za-z0-9]", "", context.company_name)[:3].upper() or "UNK"
    return f"GTM-{prefix}-{uuid.uuid4().hex[:8]}"


async def consult(
    raw: Optional[Mapping[str, Any] | BusinessContext],
    store: ConsultationStore,
    now: Optional[datetime] = None,
) -> ConsultationOutcome:
    """Return the cached consultation for this business, or compute and store a new one."""
    context = normalize(raw)
    now = now or utcnow()
    key = business_key(context)

    async with store.lock(key):
        cached = await store.get(key, now=now)
        if cached is not None:
            days_old = max(0, (now - cached.created_at).days)
            logger.info("Cache hit for %s (%s, %d days old)", key, cached.consultation_id, days_old)
            return ConsultationOutcome(consultation=cached, cached=True, days_old=days_old)

        history = await store.history(key)
        stored = StoredConsultation(
            consultation_id=new_consultation_id(context),
            business_key=key,
            context=context,
            result=compute_consultation(context),
            created_at=now,
        )
        await store.set(key, stored)

    progress = compare_progress(history[-1], stored) if history else None
    return ConsultationOutcome(consultation=stored, cached=False, progress=progress)


async def track_progress(
    raw: Optional[Mapping[str, Any] | BusinessContext],
    store: ConsultationStore,
    progress_update: str = "",
    new_challenges: str = "",
    now: Optional[datetime] = None,
) -> ProgressCheck:
    """Re-run the consultation for a business and compare it to its last one.

    The re-run uses the new challenges (or a generic review prompt) as the
    challenge text and the progress update as the company description.
    """
    context = normalize(raw)
    now = now or utcnow()
    key = business_key(context)

    async with store.lock(key):
        history = await store.history(key)
        if not history:
            return ProgressCheck(status="no_baseline", business_key=key)

        latest = history[-1]
        days_since = max(0, (now - latest.created_at).days)
        if days_since < MIN_DAYS_BETWEEN_CHECKS:
            return ProgressCheck(
                status="too_early",
                business_key=key,
                history_count=len(history),
                days_since_last=days_since,
                days_until_next_check=MIN_DAYS_BETWEEN_CHECKS - days_since,
                baseline=latest,
            )

        progress_context = context.model_copy(update={
            "challenge_text": new_challenges.strip() or DEFAULT_PROGRESS_CHALLENGE,
            "company_description": (
                f"Progress review for {context.company_name} - "
                f"{progress_update.strip() or DEFAULT_PROGRESS_UPDATE}"
            ),
        })
        stored = StoredConsultation(
            consultation_id=new_consultation_id(context),
            business_key=key,
            context=progress_context,
            result=compute_consultation(progress_context),
            created_at=now,
        )
        await store.set(key, stored)

    report = compare_progress(latest, stored)
    logger.info("Progress for %s: %+d%% over %d days", key, report.overall_improvement, report.timespan_days)
    return ProgressCheck(
        status="updated",
        business_key=key,
        history_count=min(len(history) + 1, store.history_limit),
        days_since_last=days_since,
        baseline=latest,
        consultation=stored,
        report=report,
        trend=trend([h.result.epic_scores for h in history] + [stored.result.epic_scores]),
    )
