# repertoire_trainer/core/repertoire_editor.py
"""
Pure editing operations for a repertoire's annotations and descriptive fields.

Annotation ids are stable across edits: updating the comment at a path keeps
the id of the entry already stored there. When several annotations share a
path, the last one in list order is the one that counts, both for lookups and
for updates.
"""
import datetime
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from repertoire_trainer.core.variation_walker import parse_repertoire_pgn
from repertoire_trainer.exceptions import NoCommentsFoundError
from repertoire_trainer.types import (Annotation, AnnotationIdFactory, MovePath, Opening,
                                      OpeningMetadata, Side)

STARTING_POSITION_LABEL = "Starting position"


def _new_annotation_id() -> str:
    return str(uuid.uuid4())


def build_annotation_index(annotations: Sequence[Annotation]) -> Dict[MovePath, Annotation]:
    """Maps each path to its annotation; a later duplicate replaces an earlier one."""
    index: Dict[MovePath, Annotation] = {}
    for annotation in annotations:
        index[tuple(annotation.path)] = annotation
    return index


def find_annotation(annotations: Sequence[Annotation], path: Sequence[str]) -> Optional[Annotation]:
    return build_annotation_index(annotations).get(tuple(path))


def upsert_annotation(
    annotations: Sequence[Annotation],
    path: Sequence[str],
    comment: str,
    label: Optional[str] = None,
    id_factory: AnnotationIdFactory = _new_annotation_id,
) -> List[Annotation]:
    """
    Returns a new annotation list with the comment at `path` created or replaced.

    The comment and label are trimmed. An empty comment deletes whatever is
    stored at the path. An existing entry keeps its id and its position in the
    list; earlier duplicates at the same path are dropped.
    """
    key = tuple(path)
    trimmed_comment = (comment or "").strip()
    trimmed_label = (label or "").strip() or None

    if not trimmed_comment:
        return remove_annotation(annotations, key)

    existing = find_annotation(annotations, key)
    updated = Annotation(
        id=existing.id if existing else id_factory(),
        path=key,
        comment=trimmed_comment,
        label=trimmed_label,
    )

    if existing is None:
        return [*annotations, updated]

    result: List[Annotation] = []
    for annotation in annotations:
        if tuple(annotation.path) != key:
            result.append(annotation)
        elif annotation is existing:
            result.append(updated)
    return result


def remove_annotation(annotations: Sequence[Annotation], path: Sequence[str]) -> List[Annotation]:
    key = tuple(path)
    return [annotation for annotation in annotations if tuple(annotation.path) != key]


def import_pgn_comments(
    pgn: str, id_factory: Optional[AnnotationIdFactory] = None
) -> List[Annotation]:
    """
    Builds a fresh annotation list from the comments embedded in `pgn`.

    Raises:
        NoCommentsFoundError: If the notation carries no usable comment.
    """
    annotations = parse_repertoire_pgn(pgn, annotation_id_factory=id_factory).annotations
    if not annotations:
        raise NoCommentsFoundError("No PGN comments were found to import.")
    return annotations


def normalize_tags(tag_input: str) -> List[str]:
    """Splits a comma separated tag field into trimmed, non-empty tags."""
    return [tag.strip() for tag in (tag_input or "").split(",") if tag.strip()]


def derive_fallback_tags(metadata: OpeningMetadata) -> List[str]:
    """ECO code, opening and variation names, used when the user gave no tags."""
    candidates = [metadata.eco, metadata.opening, metadata.variation]
    return _unique([value.strip() for value in candidates if value and value.strip()])


def _unique(values: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(values))


def normalize_thumbnail_fen(fen: str) -> str:
    """Keeps only the piece placement field, which is all a thumbnail needs."""
    return (fen or "").strip().split(" ")[0]


def format_move_label(san: str, ply: int) -> str:
    """Formats a move for display: White's plies carry the move number."""
    if ply % 2 == 0:
        return f"{ply // 2 + 1}. {san}"
    return san


def format_path(path: Sequence[str]) -> str:
    if not path:
        return STARTING_POSITION_LABEL
    return " → ".join(path)


def format_created(day: datetime.date) -> str:
    """Formats a date the way opening records store it, e.g. 'March 10, 2023'."""
    return f"{day:%B} {day.day}, {day.year}"


@dataclass
class OpeningEdit:
    """The values of the edit form for one opening."""
    name: str
    summary: str
    tag_input: str
    fen: str
    pgn: str
    side: Side
    annotations: List[Annotation] = field(default_factory=list)


def apply_opening_edit(
    opening: Opening,
    edit: OpeningEdit,
    today: Optional[datetime.date] = None,
    fallback_name: str = "Untitled repertoire",
) -> Opening:
    """
    Returns the opening updated from an edit form.

    Metadata comes from the edited notation when it yields any, otherwise the
    previous metadata is kept. Tags fall back to the metadata when the user
    left the field blank. The `created` stamp only moves when something
    actually changed.
    """
    parsed = parse_repertoire_pgn(edit.pgn)
    metadata = parsed.metadata if not parsed.metadata.is_empty() else opening.metadata

    tags = _unique(normalize_tags(edit.tag_input) or derive_fallback_tags(parsed.metadata))
    summary = (edit.summary or "").strip()
    fen = normalize_thumbnail_fen(edit.fen)
    name = (
        (edit.name or "").replace("_", " ").strip()
        or parsed.metadata.opening
        or opening.name
        or fallback_name
    )

    updated = replace(
        opening,
        name=name,
        fen=fen,
        pgn=edit.pgn,
        side=Side(edit.side),
        color_group=Side(edit.side),
        tags=tags,
        summary=summary,
        annotations=list(edit.annotations),
        metadata=metadata,
    )

    if updated != opening:
        updated.created = format_created(today or datetime.date.today())
    return updated
