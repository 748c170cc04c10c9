# repertoire_trainer/core/opening_defaults.py
"""
Normalizes opening records and provides the catalogue helpers used to list them.

Records arrive from JSON files, seed data or edit forms with fields missing;
`ensure_opening_defaults` is the single place that fills them in.
"""
import datetime
import uuid
from dataclasses import fields
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import structlog

from repertoire_trainer.types import Annotation, Opening, OpeningMetadata, Side

logger = structlog.get_logger(__name__)

DEFAULT_DIFFICULTY = 2
DIFFICULTY_LABELS: List[str] = ["Intro", "Core", "Advanced"]
ALL_COLORS = "all"


def _generate_opening_id() -> str:
    return str(uuid.uuid4())


def _coerce_annotation(raw: Union[Annotation, Mapping[str, Any]]) -> Annotation:
    if isinstance(raw, Annotation):
        return raw
    return Annotation(
        id=str(raw.get("id") or uuid.uuid4()),
        path=tuple(raw.get("path") or ()),
        comment=raw.get("comment", ""),
        label=raw.get("label") or None,
    )


def _coerce_annotations(items: Iterable[Union[Annotation, Mapping[str, Any]]]) -> List[Annotation]:
    """Drops entries without comment text; they have nothing to show."""
    annotations = [_coerce_annotation(item) for item in items]
    kept = [annotation for annotation in annotations if annotation.comment and annotation.comment.strip()]
    if len(kept) != len(annotations):
        logger.debug("Dropped empty annotations.", dropped=len(annotations) - len(kept))
    return kept


def _coerce_metadata(raw: Union[OpeningMetadata, Mapping[str, Any], None]) -> OpeningMetadata:
    if isinstance(raw, OpeningMetadata):
        return raw
    raw = raw or {}
    return OpeningMetadata(**{f.name: raw.get(f.name) or None for f in fields(OpeningMetadata)})


def ensure_opening_defaults(draft: Mapping[str, Any]) -> Opening:
    """
    Builds an `Opening` from a partial record, filling every missing field.

    The color group follows the practiced side when it is not given, and
    both default to White.
    """
    side = Side(draft.get("side") or Side.WHITE)
    return Opening(
        id=draft.get("id") or _generate_opening_id(),
        name=draft.get("name", ""),
        created=draft.get("created", ""),
        fen=draft.get("fen", ""),
        pgn=draft.get("pgn", ""),
        side=side,
        color_group=Side(draft.get("color_group") or draft.get("colorGroup") or side),
        difficulty=int(draft.get("difficulty") or DEFAULT_DIFFICULTY),
        tags=list(draft.get("tags") or []),
        summary=draft.get("summary") or "",
        annotations=_coerce_annotations(draft.get("annotations") or []),
        metadata=_coerce_metadata(draft.get("metadata")),
    )


def create_blank_opening(side: Side = Side.WHITE) -> Opening:
    return ensure_opening_defaults({"side": side, "color_group": side})


def opening_to_dict(opening: Opening) -> Dict[str, Any]:
    """Serializes an opening into plain JSON-compatible values."""
    return {
        "id": opening.id,
        "name": opening.name,
        "created": opening.created,
        "fen": opening.fen,
        "pgn": opening.pgn,
        "side": opening.side.value,
        "color_group": opening.color_group.value,
        "difficulty": opening.difficulty,
        "tags": list(opening.tags),
        "summary": opening.summary,
        "annotations": [
            {key: value for key, value in (
                ("id", a.id), ("path", list(a.path)), ("comment", a.comment), ("label", a.label)
            ) if value is not None}
            for a in opening.annotations
        ],
        "metadata": opening.metadata.as_dict(),
    }


def difficulty_label(difficulty: Optional[int]) -> str:
    level = DEFAULT_DIFFICULTY if difficulty is None else difficulty
    return DIFFICULTY_LABELS[min(max(level - 1, 0), len(DIFFICULTY_LABELS) - 1)]


def filter_by_color(openings: Iterable[Opening], color: Union[Side, str]) -> List[Opening]:
    """Keeps the openings of one color group; "all" keeps everything."""
    if color == ALL_COLORS:
        return list(openings)
    wanted = Side(color)
    return [opening for opening in openings if opening.color_group == wanted]


def _parse_created(created: str) -> datetime.datetime:
    try:
        return datetime.datetime.strptime(created.strip(), "%B %d, %Y")
    except ValueError:
        logger.debug("Unparseable creation date; sorting it last.", created=created)
        return datetime.datetime.min


def sort_by_created(openings: Iterable[Opening]) -> List[Opening]:
    """Newest first; records with unreadable dates go to the end."""
    return sorted(openings, key=lambda opening: _parse_created(opening.created), reverse=True)


def find_opening(openings: Sequence[Opening], name: Optional[str]) -> Optional[Opening]:
    """
    Looks an opening up by its display name, falling back to the first one.

    Names travel through links with spaces encoded as underscores, so both
    forms match.
    """
    if not openings:
        return None
    if name:
        wanted = name.replace("_", " ")
        for opening in openings:
            if opening.name == wanted:
                return opening
    return openings[0]
