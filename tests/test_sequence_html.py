from yoga_builder.schemas.sequence import load_sections
from yoga_builder.services.sequence_html import export_filename, render_sequence_html
from yoga_builder.services.timeline import PoseNames


CATALOG = {
    "v-tree": PoseNames("Tree", "Tree (Default)"),
    "v-warrior": PoseNames("Warrior II", "Reverse"),
    "v-boat": PoseNames("Boat <Full>", "Boat <Full> (Default)"),
}


def sections():
    return load_sections(
        [
            {
                "id": "s1",
                "name": "Standing & Balance",
                "items": [
                    {"type": "pose_instance", "id": "p1", "poseVariationId": "v-tree", "duration": "1m"},
                    {
                        "type": "group_block",
                        "id": "g1",
                        "sets": 3,
                        "items": [
                            {"type": "pose_instance", "id": "p2", "poseVariationId": "v-warrior", "duration": "30s"}
                        ],
                        "itemSubstitutes": [
                            {
                                "round": 2,
                                "itemIndex": 0,
                                "substituteItem": {
                                    "type": "pose_instance",
                                    "id": "p3",
                                    "poseVariationId": "v-boat",
                                    "duration": "20s",
                                },
                            }
                        ],
                        "roundOverrides": [
                            {
                                "round": 3,
                                "sets": 2,
                                "items": [
                                    {"type": "pose_instance", "id": "p4", "poseVariationId": "gone", "duration": "5s"}
                                ],
                            }
                        ],
                    },
                ],
            },
            {"id": "s2", "name": "Rest", "items": []},
        ]
    )


def test_export_filename():
    assert export_filename("Morning Flow #2") == "morning_flow__2.html"


def test_render_sequence_html():
    html = render_sequence_html("Power <Hour>", sections(), CATALOG)

    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Power &lt;Hour&gt;</title>" in html
    # 60 + (30 + 20 + 30) + 2 * 5
    assert ">2:30</span></h1>" in html
    assert "<h2>Standing &amp; Balance</h2>" in html
    assert "Tree</div>" in html
    assert "Warrior II (Reverse)" in html
    assert "Group:</strong> 3 sets" in html
    assert "Round 2: Boat &lt;Full&gt;" in html
    assert "Round 3 Ending (2 sets):" in html
    assert "Unknown" in html
    assert "Empty section" in html
    assert 'class="section-divider"' in html
