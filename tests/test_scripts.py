import uuid

import httpx
import pytest

from yoga_builder.core.config import settings
from yoga_builder.core.llm_client import LLMConfig
from yoga_builder.schemas.pose import PoseCreate, VariationUpdate
from yoga_builder.scripts import generate_transitional_cues as cue_script
from yoga_builder.services import poses


REPLY = '["Root your feet", "Brace your core", "Reach your arms"]'


def transport():
    return httpx.MockTransport(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": REPLY}}]})
    )


async def seed(session):
    tree = await poses.create_pose(session, PoseCreate(name="Tree"))
    boat = await poses.create_pose(session, PoseCreate(name="Boat"))
    done = (await poses.list_variations(session, boat.id))[0]
    await poses.update_variation(
        session,
        done.id,
        VariationUpdate(transitional_cues=["Ground your feet", "Engage your core", "Lift your arms"]),
        user_id=uuid.uuid4(),
        is_admin=True,
    )
    return tree


async def test_only_variations_without_cues_are_processed(session):
    tree = await seed(session)
    config = LLMConfig(provider="openai", api_key="sk-test")

    summary = await cue_script.process(session, config, delay=0, transport=transport())

    assert (summary.total, summary.updated, summary.skipped, summary.failed) == (1, 1, 0, 0)
    variation = (await poses.list_variations(session, tree.id))[0]
    assert variation.transitional_cues == ["Root your feet", "Brace your core", "Reach your arms"]


async def test_dry_run_saves_nothing(session):
    tree = await seed(session)
    config = LLMConfig(provider="openai", api_key="sk-test")

    summary = await cue_script.process(session, config, dry_run=True, delay=0, transport=transport())

    assert summary.updated == 1
    session.expunge_all()
    variation = (await poses.list_variations(session, tree.id))[0]
    assert variation.transitional_cues == []


def test_config_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "LLM_PROVIDER", "anthropic")
    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", "ak")
    monkeypatch.setattr(settings, "LLM_MODEL", None)
    config = cue_script.config_from_settings()
    assert (config.provider, config.api_key, config.model_name) == ("anthropic", "ak", "claude-3-haiku-20240307")

    monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", None)
    with pytest.raises(ValueError):
        cue_script.config_from_settings()

    monkeypatch.setattr(settings, "LLM_PROVIDER", "llama")
    with pytest.raises(ValueError):
        cue_script.config_from_settings()
