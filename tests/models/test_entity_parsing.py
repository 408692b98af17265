from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from nf_metadata.models.entity import (
    capability_labels,
    extract_entities,
    first_entity,
    format_runtime,
    parse_entity,
)

FIXTURE_PATH = Path(__file__).resolve().parents[1] / "fixtures" / "netflix" / "mini_modal_sample.json"


@pytest.fixture
def payload() -> dict:
    return json.loads(FIXTURE_PATH.read_text(encoding="utf-8"))


def test_first_entity_parses_fixture(payload: dict) -> None:
    entity = first_entity(payload)

    assert entity is not None
    assert entity.video_id == 82156122
    assert entity.title == "Sample Feature"
    assert entity.type_name == "Movie"
    assert entity.latest_year == 2021
    assert entity.runtime_sec == 6720
    assert entity.runtime_display == "1h 52m"


def test_images_and_advisory(payload: dict) -> None:
    entity = first_entity(payload)
    assert entity is not None

    assert entity.story_art is not None
    assert entity.story_art.available is False
    assert entity.brand_logo_small is None
    assert entity.boxart_high_res is not None
    assert entity.boxart_high_res.focal_point == (0.5, 0.25)

    advisory = entity.content_advisory
    assert advisory is not None
    assert advisory.certification_value == "PG-13"
    assert advisory.board_name == "MPAA"
    assert advisory.maturity_level == 90
    assert advisory.reasons == ("violence", "language")


def test_capabilities_follow_display_order_and_skip_unknown(payload: dict) -> None:
    entity = first_entity(payload)
    assert entity is not None

    assert entity.capabilities == ("VIDEO_ULTRA_HD", "VIDEO_HD", "AUDIO_FIVE_DOT_ONE")
    assert capability_labels(entity) == ["Ultra 4K HD", "HD", "5.1 Dolby"]
    assert entity.badges == ("NEW",)


def test_unmodelled_fields_are_kept_in_extras(payload: dict) -> None:
    entity = first_entity(payload)
    assert entity is not None

    assert "bookmark" in entity.extras
    assert "watchStatus" in entity.extras
    assert "title" not in entity.extras


def test_is_upcoming_compares_availability_start() -> None:
    entity = parse_entity({"videoId": 1, "title": "x", "availabilityStartTime": "2030-01-01T00:00:00.000Z"})
    assert entity is not None
    assert entity.is_upcoming(now=datetime(2029, 12, 31, tzinfo=UTC)) is True
    assert entity.is_upcoming(now=datetime(2030, 1, 2, tzinfo=UTC)) is False

    no_start = parse_entity({"videoId": 1, "title": "x"})
    assert no_start is not None
    assert no_start.is_upcoming() is False


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"data": None},
        {"data": {}},
        {"data": {"unifiedEntities": []}},
        {"data": {"unifiedEntities": None}},
        {"data": {"unifiedEntities": [None, "x", {"title": "missing id"}]}},
        {"errors": [{"message": "boom"}]},
    ],
)
def test_empty_or_malformed_payloads_yield_nothing(payload) -> None:
    assert extract_entities(payload) == []
    assert first_entity(payload) is None


def test_video_id_accepts_numeric_string_but_not_bool() -> None:
    entity = parse_entity({"videoId": "42"})
    assert entity is not None
    assert entity.video_id == 42
    assert entity.title == ""
    assert parse_entity({"videoId": True}) is None


@pytest.mark.parametrize("seconds,expected", [(0, "0m"), (59, "0m"), (600, "10m"), (3600, "1h 0m"), (6720, "1h 52m")])
def test_format_runtime(seconds: int, expected: str) -> None:
    assert format_runtime(seconds) == expected
