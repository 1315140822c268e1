import pytest

from gtm_alpha import server


async def test_tools_are_registered():
    names = {tool.name for tool in await server.mcp.list_tools()}
    assert names == {"gtm_consultation", "epic_audit", "generate_roadmap", "epic_progress_tracker"}


async def test_read_only_annotations():
    tools = {tool.name: tool for tool in await server.mcp.list_tools()}
    assert tools["epic_audit"].annotations.readOnlyHint is True
    assert tools["generate_roadmap"].annotations.readOnlyHint is True
    assert tools["gtm_consultation"].annotations.readOnlyHint is False
    assert tools["epic_progress_tracker"].annotations.readOnlyHint is False


async def test_gtm_consultation_tool(server_store):
    result = await server.gtm_consultation(
        company_name="Acme Analytics",
        challenge="We need better product-led growth and onboarding",
        industry="SaaS",
        business_stage="venture-seed",
    )
    assert result["title"] == "GTM Alpha Consultation"
    assert result["epic_scores"] == {"E": 39, "P": 59, "I": 30, "C": 22}
    assert result["cached"] is False
    assert "Product-Led Growth Acceleration" in result["summary"]

    again = await server.gtm_consultation(
        company_name="Acme Analytics",
        challenge="something else entirely",
        industry="SaaS",
        business_stage="venture-seed",
    )
    assert again["cached"] is True
    assert again["consultation_id"] == result["consultation_id"]
    await server_store.close()


async def test_epic_audit_tool_explains_scores(server_store):
    result = await server.epic_audit(
        challenge="We need better product-led growth and onboarding",
        industry="SaaS",
        business_stage="venture-seed",
        website_url="https://acme.example",
    )
    assert result["ranking"] == ["P", "E", "I", "C"]
    assert result["keyword_matches"]["P"] == ["product-led", "onboarding"]
    assert result["digital_presence"]["digital_maturity_score"] == 70
    assert result["summary"] == "P: 59 | E: 39 | I: 30 | C: 22"
    assert not server_store.is_open


async def test_generate_roadmap_tool():
    result = await server.generate_roadmap(primary_focus="e", timeframe="30-day")
    assert result["primary_focus"] == "E"
    assert result["secondary_focus"] == "P"
    assert list(result["phases"]) == ["days_30"]
    assert len(result["phases"]["days_30"]) == 5


async def test_generate_roadmap_tool_rejects_unknown_focus():
    with pytest.raises(ValueError):
        await server.generate_roadmap(primary_focus="Q")


async def test_progress_tracker_without_baseline(server_store):
    result = await server.epic_progress_tracker(company_name="Nobody Inc")
    assert result["status"] == "no_baseline"
    assert "gtm_consultation" in result["summary"]
    await server_store.close()


async def test_progress_tracker_too_early(server_store):
    await server.gtm_consultation(company_name="Acme", challenge="churn")
    result = await server.epic_progress_tracker(company_name="Acme")
    assert result["status"] == "too_early"
    assert result["days_until_next_check"] == 14
    await server_store.close()


async def test_report_resource(server_store):
    consultation = await server.gtm_consultation(company_name="Acme", challenge="community events")
    html = await server.consultation_report(consultation["business_key"])
    assert "GTM Alpha Consultation: Acme" in html

    with pytest.raises(ValueError):
        await server.consultation_report("nobody-general-unspecified")
    await server_store.close()


async def test_lifespan_opens_once_and_closes_with_last_session(server_store, monkeypatch):
    scheduler = server.PurgeScheduler(server_store)
    monkeypatch.setattr(server, "scheduler", scheduler)

    async with server.lifespan(server.mcp):
        async with server.lifespan(server.mcp):
            assert server_store.is_open
            assert scheduler.running
        assert server_store.is_open
    assert not server_store.is_open
    assert not scheduler.running


async def test_epic_audit_reports_maturity_and_next_steps(server_store):
    result = await server.epic_audit(
        challenge="We need better product-led growth and onboarding",
        industry="SaaS",
        business_stage="venture-seed",
    )
    assert result["overall_score"] == 38
    assert result["maturity_level"] == "Foundational"
    assert [gap["letter"] for gap in result["gaps"]] == ["E", "I", "C"]
    assert result["next_steps"][-1] == "Schedule follow-up EPIC assessment in 90 days to measure progress"


async def test_epic_audit_focus_areas(server_store):
    result = await server.epic_audit(
        challenge="We need better product-led growth and onboarding",
        industry="SaaS",
        business_stage="venture-seed",
        focus_areas=["community", "product_led"],
    )
    assert result["focus_areas"] == ["C", "P"]
    assert [gap["letter"] for gap in result["gaps"]] == ["C"]
    assert set(result["keyword_matches"]) == {"P", "C"}
    assert result["epic_scores"] == {"E": 39, "P": 59, "I": 30, "C": 22}

    with pytest.raises(ValueError):
        await server.epic_audit(challenge="growth", focus_areas=["telepathy"])


async def test_generate_roadmap_from_priorities():
    result = await server.generate_roadmap(priorities=["community building"], timeframe="30-day")
    assert (result["primary_focus"], result["secondary_focus"]) == ("C", "P")
    assert result["priorities"] == ["community building"]
    assert result["success_metrics"] == {
        "overall_growth": {"metric": "Overall GTM performance index", "baseline": 100.0, "target": 120.0},
    }


async def test_forced_focus_wins_over_priorities():
    result = await server.generate_roadmap(primary_focus="E", priorities=["customer retention", "lead generation"])
    assert (result["primary_focus"], result["secondary_focus"]) == ("E", "P")
    assert result["success_metrics"]["lead_generation"]["target"] == 500
