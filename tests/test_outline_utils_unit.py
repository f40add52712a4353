from __future__ import annotations

from prowriter.application.services.generation.outline_utils import (
    normalize_outline,
    parse_outline_titles,
    placeholder_title,
)


def test_normalize_outline_pads_with_placeholders():
    titles = [f"T{i}" for i in range(1, 8)]
    out = normalize_outline(titles, 10)
    assert len(out) == 10
    assert out[:7] == titles
    assert out[7:] == ["Section 8", "Section 9", "Section 10"]


def test_normalize_outline_truncates_extras():
    titles = [f"T{i}" for i in range(1, 14)]
    out = normalize_outline(titles, 10)
    assert out == titles[:10]


def test_normalize_outline_empty_input_is_all_placeholders():
    assert normalize_outline([], 3) == [placeholder_title(1), placeholder_title(2), placeholder_title(3)]


def test_parse_outline_titles_accepts_titles_key():
    assert parse_outline_titles('{"titles": ["A", " B ", ""]}') == ["A", "B"]


def test_parse_outline_titles_accepts_alternative_shapes():
    assert parse_outline_titles('{"sections": ["A"]}') == ["A"]
    assert parse_outline_titles('["A", "B"]') == ["A", "B"]
    assert parse_outline_titles('{"outline": ["X", 1, null, "Y"]}') == ["X", "Y"]


def test_parse_outline_titles_invalid_json_returns_empty():
    assert parse_outline_titles("not json") == []
    assert parse_outline_titles(None) == []
    assert parse_outline_titles('{"titles": "A"}') == []
