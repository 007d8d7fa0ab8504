import csv
import io
import json
from datetime import datetime
from pathlib import Path

from yoga_builder.schemas.pose import PoseCreate, VariationCreate
from yoga_builder.scripts.export_poses_variations import export_path
from yoga_builder.services import poses
from yoga_builder.services.export import CSV_HEADERS, export_summary, fetch_export_rows, to_csv, to_json


async def seed(session):
    tree = await poses.create_pose(session, PoseCreate(name="Tree"))
    boat = await poses.create_pose(session, PoseCreate(name="Boat"))
    await poses.create_variation(
        session,
        VariationCreate(
            pose_id=tree.id,
            name="Arms Up",
            transitional_cues=["Ground your feet", "Engage your core", "Lift your arms"],
        ),
    )
    return tree, boat


async def test_rows_ordered_by_pose_then_default_first(session):
    await seed(session)
    rows = await fetch_export_rows(session)

    assert [(r["pose_name"], r["variation_name"], r["is_default"]) for r in rows] == [
        ("Boat", "Boat (Default)", True),
        ("Tree", "Tree (Default)", True),
        ("Tree", "Arms Up", False),
    ]
    assert rows[2]["transitional_cues"] == ["Ground your feet", "Engage your core", "Lift your arms"]
    assert rows[0]["transitional_cues"] is None
    assert rows[0]["pose_created_at"]


async def test_csv_shape(session):
    await seed(session)
    rows = await fetch_export_rows(session)
    parsed = list(csv.reader(io.StringIO(to_csv(rows))))

    assert parsed[0] == CSV_HEADERS
    assert len(parsed) == 4
    assert parsed[1][4] == "Yes"
    assert parsed[3][4] == "No"
    assert parsed[3][5:8] == ["Ground your feet", "Engage your core", "Lift your arms"]
    assert parsed[1][5:8] == ["", "", ""]


async def test_json_and_summary(session):
    await seed(session)
    rows = await fetch_export_rows(session)

    assert json.loads(to_json(rows)) == rows
    assert export_summary(rows) == {"poses": 2, "variations": 3, "with_cues": 1, "without_cues": 2}


def test_empty_export():
    assert to_csv([]).splitlines() == [",".join(CSV_HEADERS)]
    assert export_summary([]) == {"poses": 0, "variations": 0, "with_cues": 0, "without_cues": 0}


def test_export_path():
    path = export_path(Path("out"), "csv", datetime(2026, 3, 4, 5, 6, 7))
    assert path == Path("out/poses-variations-export-2026-03-04T05-06-07.csv")
