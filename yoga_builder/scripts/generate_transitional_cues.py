"""Generate transitional cues for every pose variation that has none.

    LLM_PROVIDER=openai OPENAI_API_KEY=... python -m yoga_builder.scripts.generate_transitional_cues
    LLM_PROVIDER=anthropic ANTHROPIC_API_KEY=... python -m yoga_builder.scripts.generate_transitional_cues --dry-run
"""
import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.core.config import settings
from yoga_builder.core.db import dispose_engine, get_sessionmaker
from yoga_builder.core.llm_client import LLMConfig
from yoga_builder.core.logging_config import setup_logging
from yoga_builder.models.pose import Pose, PoseVariation
from yoga_builder.services.cues import full_pose_name, generate_transitional_cues


logger = logging.getLogger(__name__)


@dataclass
class CueRunSummary:
    total: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0


def config_from_settings() -> LLMConfig:
    provider = settings.LLM_PROVIDER.lower()
    if provider == "openai":
        key = settings.OPENAI_API_KEY
    elif provider == "anthropic":
        key = settings.ANTHROPIC_API_KEY
    else:
        raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")
    if not key:
        raise ValueError(f"API key for {provider} is not set")
    return LLMConfig(provider=provider, api_key=key, model=settings.LLM_MODEL)


async def variations_without_cues(session: AsyncSession) -> list[tuple[PoseVariation, str]]:
    rows = await session.execute(
        select(PoseVariation, Pose.name)
        .join(Pose, Pose.id == PoseVariation.pose_id)
        .order_by(Pose.name, PoseVariation.name)
    )
    return [(v, pose_name) for v, pose_name in rows.all() if not v.transitional_cues]


async def process(
    session: AsyncSession,
    config: LLMConfig,
    *,
    dry_run: bool = False,
    delay: float = 0.5,
    transport=None,
) -> CueRunSummary:
    todo = await variations_without_cues(session)
    summary = CueRunSummary(total=len(todo))
    logger.info("Found %d variations without cues", len(todo))

    for i, (variation, pose_name) in enumerate(todo, start=1):
        name = full_pose_name(pose_name, variation.name)
        cues = await generate_transitional_cues(pose_name, variation.name, config, transport=transport)
        if len(cues) != 3:
            logger.warning("[%d/%d] %s: invalid cues %r, skipped", i, len(todo), name, cues)
            summary.skipped += 1
            continue

        logger.info("[%d/%d] %s: %s", i, len(todo), name, ", ".join(cues))
        if not dry_run:
            try:
                variation.transitional_cues = cues
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error("Failed to save cues for %s: %s", name, e)
                summary.failed += 1
                continue
        summary.updated += 1

        if delay and i < len(todo):
            await asyncio.sleep(delay)

    return summary


async def run(dry_run: bool) -> CueRunSummary:
    config = config_from_settings()
    logger.info("Using %s (%s)%s", config.provider, config.model_name, " [dry run]" if dry_run else "")
    try:
        async with get_sessionmaker()() as session:
            return await process(session, config, dry_run=dry_run)
    finally:
        await dispose_engine()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate transitional cues with an LLM")
    parser.add_argument("--dry-run", action="store_true", help="generate but do not save")
    args = parser.parse_args(argv)

    setup_logging()
    try:
        summary = asyncio.run(run(args.dry_run))
    except ValueError as e:
        logger.error("%s", e)
        return 1

    logger.info(
        "Done: %d total, %d updated, %d skipped, %d failed",
        summary.total,
        summary.updated,
        summary.skipped,
        summary.failed,
    )
    return 0 if summary.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
