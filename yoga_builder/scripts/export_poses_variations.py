"""Export all poses and variations to CSV or JSON.

    python -m yoga_builder.scripts.export_poses_variations --format csv
    python -m yoga_builder.scripts.export_poses_variations --format json --output-dir ./exports
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from yoga_builder.core.db import dispose_engine, get_sessionmaker
from yoga_builder.core.logging_config import setup_logging
from yoga_builder.services.export import export_summary, fetch_export_rows, to_csv, to_json


logger = logging.getLogger(__name__)


def export_path(output_dir: Path, fmt: str, now: datetime | None = None) -> Path:
    stamp = (now or datetime.utcnow()).strftime("%Y-%m-%dT%H-%M-%S")
    return output_dir / f"poses-variations-export-{stamp}.{fmt}"


async def run(fmt: str, output_dir: Path) -> Path:
    try:
        async with get_sessionmaker()() as session:
            rows = await fetch_export_rows(session)
    finally:
        await dispose_engine()

    if not rows:
        logger.warning("No pose variations found")

    output_dir.mkdir(parents=True, exist_ok=True)
    path = export_path(output_dir, fmt)
    path.write_text(to_csv(rows) if fmt == "csv" else to_json(rows), encoding="utf-8")

    summary = export_summary(rows)
    logger.info("Exported %d variations to %s", summary["variations"], path)
    logger.info(
        "Poses: %d, with cues: %d, without cues: %d",
        summary["poses"],
        summary["with_cues"],
        summary["without_cues"],
    )
    return path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Export poses and variations")
    parser.add_argument("--format", choices=["csv", "json"], default="csv")
    parser.add_argument("--output-dir", type=Path, default=Path("."))
    args = parser.parse_args(argv)

    setup_logging()
    try:
        asyncio.run(run(args.format, args.output_dir))
    except Exception:
        logger.exception("Export failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
