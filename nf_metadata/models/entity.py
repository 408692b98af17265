"""
Normalized title metadata (one `unifiedEntities[]` item of `MiniModalQuery`).

Only the fields the gateway and orchestrator consume are modelled. Everything
else the upstream sends (bookmark, live-event markers, playlist state, ...)
is kept verbatim in `MetadataEntity.extras`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# Known playback capability tokens, in display order.
CAPABILITY_LABELS: dict[str, str] = {
    "VIDEO_ULTRA_HD": "Ultra 4K HD",
    "VIDEO_HD": "HD",
    "VIDEO_SD": "SD",
    "VIDEO_DOLBY_VISION": "Dolby Vision",
    "VIDEO_HDR10_PLUS": "HDR10+",
    "VIDEO_HDR": "HDR",
    "AUDIO_DOLBY_ATMOS": "Dolby Atmos",
    "AUDIO_SPATIAL": "Spatial Audio",
    "AUDIO_FIVE_DOT_ONE": "5.1 Dolby",
    "OFFLINE_DOWNLOAD_AVAILABLE": "Downloads",
}

_IMAGE_FIELDS = {
    "boxart": "boxart",
    "boxart_high_res": "boxartHighRes",
    "story_art": "storyArt",
    "title_logo_branded": "titleLogoBranded",
    "title_logo_unbranded": "titleLogoUnbranded",
    "brand_logo_small": "brandLogoSmall",
}

_MODELLED_KEYS = frozenset(
    {
        "__typename",
        "videoId",
        "unifiedEntityId",
        "title",
        "availabilityStartTime",
        "isAvailable",
        "isPlayable",
        "unplayableCauses",
        "contentAdvisory",
        "taglineMessages",
        "mostLikedMessages",
        "textEvidence",
        "playbackBadges",
        "badges",
        "runtimeSec",
        "displayRuntimeSec",
        "latestYear",
        *_IMAGE_FIELDS.values(),
    }
)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        raw = value.strip()
        if raw.isdigit():
            return int(raw)
    return None


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _str_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(v for v in value if isinstance(v, str))


def _mapping_list(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, Mapping)]


def _parse_iso_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_runtime(seconds: int) -> str:
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


@dataclass(frozen=True)
class ImageRef:
    url: str | None
    available: bool = False
    width: int | None = None
    height: int | None = None
    key: str | None = None
    status: str | None = None
    focal_point: tuple[float, float] | None = None


@dataclass(frozen=True)
class ContentAdvisory:
    board_id: int | None = None
    board_name: str | None = None
    certification_value: str | None = None
    maturity_level: int | None = None
    maturity_description: str | None = None
    reasons: tuple[str, ...] = ()
    i18n_reasons_text: str | None = None


@dataclass(frozen=True)
class TaglineMessage:
    tagline: str
    classification: str | None = None


@dataclass(frozen=True)
class TextEvidence:
    key: str | None
    text: str


@dataclass(frozen=True)
class MetadataEntity:
    """Normalized metadata for one title id. Immutable once parsed."""

    video_id: int
    title: str
    unified_entity_id: str | None = None
    type_name: str | None = None
    boxart: ImageRef | None = None
    boxart_high_res: ImageRef | None = None
    story_art: ImageRef | None = None
    title_logo_branded: ImageRef | None = None
    title_logo_unbranded: ImageRef | None = None
    brand_logo_small: ImageRef | None = None
    availability_start_time: str | None = None
    is_available: bool = False
    is_playable: bool = False
    unplayable_causes: tuple[str, ...] = ()
    content_advisory: ContentAdvisory | None = None
    tagline_messages: tuple[TaglineMessage, ...] = ()
    most_liked_messages: tuple[TaglineMessage, ...] = ()
    text_evidence: tuple[TextEvidence, ...] = ()
    playback_badges: tuple[str, ...] = ()
    badges: tuple[str, ...] = ()
    runtime_sec: int | None = None
    display_runtime_sec: int | None = None
    latest_year: int | None = None
    extras: Mapping[str, Any] = field(default_factory=dict)

    @property
    def capabilities(self) -> tuple[str, ...]:
        """Known capability tokens present in `playback_badges`, in display order."""
        present = set(self.playback_badges)
        return tuple(key for key in CAPABILITY_LABELS if key in present)

    @property
    def runtime_display(self) -> str | None:
        if self.runtime_sec is None:
            return None
        return format_runtime(self.runtime_sec)

    def is_upcoming(self, now: datetime | None = None) -> bool:
        start = _parse_iso_datetime(self.availability_start_time)
        if start is None:
            return False
        return start > (now or datetime.now(UTC))


def _parse_image(value: Any) -> ImageRef | None:
    if not isinstance(value, Mapping):
        return None
    focal = value.get("focalPoint")
    focal_point = None
    if isinstance(focal, Mapping):
        x, y = focal.get("x"), focal.get("y")
        if isinstance(x, (int, float)) and isinstance(y, (int, float)):
            focal_point = (float(x), float(y))
    return ImageRef(
        url=_as_str(value.get("url")),
        available=value.get("available") is True,
        width=_as_int(value.get("width")),
        height=_as_int(value.get("height")),
        key=_as_str(value.get("key")),
        status=_as_str(value.get("status")),
        focal_point=focal_point,
    )


def _parse_content_advisory(value: Any) -> ContentAdvisory | None:
    if not isinstance(value, Mapping):
        return None
    reasons = tuple(
        reason["text"] for reason in _mapping_list(value.get("reasons")) if isinstance(reason.get("text"), str)
    )
    return ContentAdvisory(
        board_id=_as_int(value.get("boardId")),
        board_name=_as_str(value.get("boardName")),
        certification_value=_as_str(value.get("certificationValue")),
        maturity_level=_as_int(value.get("maturityLevel")),
        maturity_description=_as_str(value.get("maturityDescription")),
        reasons=reasons,
        i18n_reasons_text=_as_str(value.get("i18nReasonsText")),
    )


def _parse_taglines(value: Any) -> tuple[TaglineMessage, ...]:
    out: list[TaglineMessage] = []
    for item in _mapping_list(value):
        tagline = _as_str(item.get("tagline"))
        if tagline is None:
            continue
        out.append(TaglineMessage(tagline=tagline, classification=_as_str(item.get("typedClassification"))))
    return tuple(out)


def _parse_text_evidence(value: Any) -> tuple[TextEvidence, ...]:
    out: list[TextEvidence] = []
    for item in _mapping_list(value):
        text = _as_str(item.get("text"))
        if text is None:
            continue
        out.append(TextEvidence(key=_as_str(item.get("key")), text=text))
    return tuple(out)


def parse_entity(node: Mapping[str, Any]) -> MetadataEntity | None:
    """Normalize one raw entity; returns None when it has no usable video id."""
    video_id = _as_int(node.get("videoId"))
    if video_id is None:
        return None

    images = {attr: _parse_image(node.get(key)) for attr, key in _IMAGE_FIELDS.items()}
    extras = {k: v for k, v in node.items() if k not in _MODELLED_KEYS}

    return MetadataEntity(
        video_id=video_id,
        title=node.get("title") if isinstance(node.get("title"), str) else "",
        unified_entity_id=_as_str(node.get("unifiedEntityId")),
        type_name=_as_str(node.get("__typename")),
        availability_start_time=_as_str(node.get("availabilityStartTime")),
        is_available=node.get("isAvailable") is True,
        is_playable=node.get("isPlayable") is True,
        unplayable_causes=_str_list(node.get("unplayableCauses")),
        content_advisory=_parse_content_advisory(node.get("contentAdvisory")),
        tagline_messages=_parse_taglines(node.get("taglineMessages")),
        most_liked_messages=_parse_taglines(node.get("mostLikedMessages")),
        text_evidence=_parse_text_evidence(node.get("textEvidence")),
        playback_badges=_str_list(node.get("playbackBadges")),
        badges=_str_list(node.get("badges")),
        runtime_sec=_as_int(node.get("runtimeSec")),
        display_runtime_sec=_as_int(node.get("displayRuntimeSec")),
        latest_year=_as_int(node.get("latestYear")),
        extras=extras,
        **images,
    )


def extract_entities(payload: Mapping[str, Any] | None) -> list[MetadataEntity]:
    """Parse `data.unifiedEntities[]`; missing or malformed parts yield an empty list."""
    if not isinstance(payload, Mapping):
        return []
    data = payload.get("data")
    if not isinstance(data, Mapping):
        return []
    entities: list[MetadataEntity] = []
    for node in _mapping_list(data.get("unifiedEntities")):
        entity = parse_entity(node)
        if entity is not None:
            entities.append(entity)
    return entities


def first_entity(payload: Mapping[str, Any] | None) -> MetadataEntity | None:
    entities = extract_entities(payload)
    return entities[0] if entities else None


def capability_labels(entity: MetadataEntity) -> list[str]:
    return [CAPABILITY_LABELS[key] for key in entity.capabilities]
