"""Tests for tool result text rendering."""

from scriptparser.mcp import formatting


def _item(content, summary=None, metadata=None):
    return {
        "id": 1,
        "content": content,
        "summary": summary,
        "metadata": metadata or {},
        "created_at": "2026-01-05T10:00:00",
    }


def test_truncate():
    assert formatting.truncate("short", 10) == "short"
    assert formatting.truncate("x" * 10, 10) == "x" * 10
    assert formatting.truncate("x" * 11, 10) == "x" * 10 + "..."


def test_created_project():
    text = formatting.format_created_project({"id": 4, "name": "Pilot"})
    assert text == 'Created script project "Pilot" (ID: 4)'


def test_empty_project_list():
    assert formatting.format_project_list([]) == "No script projects yet"


def test_project_list():
    text = formatting.format_project_list(
        [
            {
                "id": 2,
                "name": "Heist",
                "description": None,
                "data_count": 5,
                "tag_types": ["character", "scene"],
            }
        ]
    )

    assert text.startswith("Found 1 script projects:")
    assert "[ID: 2] Heist" in text
    assert "Description: None" in text
    assert "Items: 5" in text
    assert "Tag types: character, scene" in text


def test_project_detail_samples_three_items_per_group():
    items = [_item(f"line {n}") for n in range(5)]
    text = formatting.format_project_detail(
        {
            "name": "Pilot",
            "description": "Draft",
            "created_at": "2026-01-05T10:00:00",
            "data_by_tag": [{"type": "dialogue", "items": items}],
        }
    )

    assert "dialogue (5 items):" in text
    assert "   3. line 2" in text
    assert "line 3" not in text
    assert "... and 2 more" in text


def test_project_detail_prefers_summary_and_truncates_content():
    long_content = "A" * 80
    text = formatting.format_project_detail(
        {
            "name": "Pilot",
            "description": None,
            "created_at": "2026-01-05T10:00:00",
            "data_by_tag": [
                {
                    "type": "scene",
                    "items": [_item(long_content), _item("raw", summary="Summary")],
                }
            ],
        }
    )

    assert f"1. {'A' * 50}..." in text
    assert "2. Summary" in text


def test_project_detail_without_data():
    text = formatting.format_project_detail(
        {"name": "Empty", "created_at": "2026-01-05", "data_by_tag": []}
    )
    assert text.endswith("No classified data in this project yet")


def test_parse_result():
    text = formatting.format_parse_result(7, "prop", 3)
    assert "Tag type: prop" in text
    assert "Items: 3" in text
    assert "Project ID: 7" in text


def test_tag_data_empty():
    text = formatting.format_tag_data({"project_id": 3, "tag_type": "plot", "items": []})
    assert text == 'No "plot" data in project 3'


def test_tag_data_shows_original_text_when_summarized():
    text = formatting.format_tag_data(
        {
            "project_id": 3,
            "tag_type": "character",
            "items": [
                _item("B" * 150, summary="The detective", metadata={"a": 1}),
                _item("JONAS"),
            ],
        }
    )

    assert text.startswith("character data (2 items):")
    assert "1. The detective" in text
    assert f"Original: {'B' * 100}..." in text
    assert 'Metadata: {"a": 1}' in text
    assert "2. JONAS" in text
    assert text.count("Original:") == 1


def test_tag_types():
    text = formatting.format_tag_types(
        [
            {"name": "character", "description": "Characters", "usage_count": 2},
            {"name": "motif", "description": None, "usage_count": 0},
        ]
    )

    assert "character: Characters (used 2 times)" in text
    assert "motif: No description (used 0 times)" in text


def test_deleted_project():
    assert formatting.format_deleted_project(5) == "Deleted script project (ID: 5)"
