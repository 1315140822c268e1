from __future__ import annotations

from datetime import datetime

import pytest
from starlette.testclient import TestClient

from gtm_alpha import server
from gtm_alpha.core.consultation import compute_consultation
from gtm_alpha.core.models import StoredConsultation
from gtm_alpha.core.normalizer import normalize
from gtm_alpha.store import ConsultationStore, business_key

SEED_SAAS = {
    "company_name": "Acme Analytics",
    "industry": "SaaS",
    "business_stage": "venture-seed",
    "challenge_text": "We need better product-led growth and onboarding",
}

SERIES_A_ENTERPRISE = {
    "company_name": "Globex",
    "business_stage": "venture-series-a",
    "challenge_text": "enterprise partnership and ABM for our B2B sales motion",
}


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


def make_stored(
    fields: dict,
    created_at: datetime,
    consultation_id: str = "GTM-TST-00000000",
) -> StoredConsultation:
    context = normalize(fields)
    return StoredConsultation(
        consultation_id=consultation_id,
        business_key=business_key(context),
        context=context,
        result=compute_consultation(context),
        created_at=created_at,
    )


@pytest.fixture
async def store(tmp_path):
    store = ConsultationStore(url=sqlite_url(tmp_path / "consultations.db"), ttl_days=30)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def server_store(tmp_path, monkeypatch) -> ConsultationStore:
    """An unopened store swapped in for the server's module-level store."""
    store = ConsultationStore(url=sqlite_url(tmp_path / "server.db"), ttl_days=30)
    monkeypatch.setattr(server, "store", store)
    return store


@pytest.fixture
def http(server_store):
    with TestClient(server.mcp.sse_app()) as client:
        yield client


@pytest.fixture
def t0() -> datetime:
    return datetime(2025, 3, 1, 9, 0, 0)
