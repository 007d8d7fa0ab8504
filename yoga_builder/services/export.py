from __future__ import annotations

import csv
import io
import json
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from yoga_builder.models.pose import Pose, PoseVariation


CSV_HEADERS = [
    "Pose ID",
    "Pose Name",
    "Variation ID",
    "Variation Name",
    "Is Default",
    "Cue 1",
    "Cue 2",
    "Cue 3",
    "Variation Created",
    "Variation Updated",
    "Pose Created",
]


def _iso(value) -> str:
    return value.isoformat() if value else ""


async def fetch_export_rows(session: AsyncSession) -> List[Dict[str, Any]]:
    """Variations joined with their pose: pose name, default first, then variation name."""
    rows = await session.execute(
        select(PoseVariation, Pose)
        .join(Pose, Pose.id == PoseVariation.pose_id)
        .order_by(Pose.name, PoseVariation.is_default.desc(), PoseVariation.name)
    )
    out: List[Dict[str, Any]] = []
    for variation, pose in rows.all():
        out.append(
            {
                "pose_id": str(pose.id),
                "pose_name": pose.name,
                "variation_id": str(variation.id),
                "variation_name": variation.name,
                "is_default": bool(variation.is_default),
                "transitional_cues": list(variation.transitional_cues or []) or None,
                "variation_created_at": _iso(variation.created_at),
                "variation_updated_at": _iso(variation.updated_at),
                "pose_created_at": _iso(pose.created_at),
            }
        )
    return out


def to_csv(rows: List[Dict[str, Any]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        cues = (row.get("transitional_cues") or []) + ["", "", ""]
        writer.writerow(
            [
                row["pose_id"],
                row["pose_name"],
                row["variation_id"],
                row["variation_name"],
                "Yes" if row["is_default"] else "No",
                cues[0],
                cues[1],
                cues[2],
                row["variation_created_at"],
                row["variation_updated_at"],
                row["pose_created_at"],
            ]
        )
    return buf.getvalue()


def to_json(rows: List[Dict[str, Any]]) -> str:
    return json.dumps(rows, indent=2)


def export_summary(rows: List[Dict[str, Any]]) -> Dict[str, int]:
    with_cues = sum(1 for r in rows if r.get("transitional_cues"))
    return {
        "poses": len({r["pose_id"] for r in rows}),
        "variations": len(rows),
        "with_cues": with_cues,
        "without_cues": len(rows) - with_cues,
    }
