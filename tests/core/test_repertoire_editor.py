# tests/core/test_repertoire_editor.py
import datetime

import pytest

from repertoire_trainer.core.opening_defaults import ensure_opening_defaults
from repertoire_trainer.core.repertoire_editor import (OpeningEdit, apply_opening_edit, build_annotation_index,
                                                       derive_fallback_tags, find_annotation, format_created,
                                                       format_move_label, format_path, import_pgn_comments,
                                                       normalize_tags, normalize_thumbnail_fen,
                                                       remove_annotation, upsert_annotation)
from repertoire_trainer.exceptions import NoCommentsFoundError
from repertoire_trainer.types import Annotation, OpeningMetadata, Side


@pytest.fixture
def annotations():
    return [
        Annotation(id="a", path=("e4",), comment="King's pawn"),
        Annotation(id="b", path=("e4", "e5"), comment="Symmetric"),
    ]


def test_lookup_uses_last_duplicate():
    items = [
        Annotation(id="old", path=("e4",), comment="first"),
        Annotation(id="new", path=("e4",), comment="second"),
    ]

    assert find_annotation(items, ["e4"]).id == "new"
    assert build_annotation_index(items)[("e4",)].comment == "second"


def test_upsert_replaces_comment_and_keeps_id(annotations):
    result = upsert_annotation(annotations, ["e4"], "  Best by test  ", label=" Main ")

    assert result[0] == Annotation(id="a", path=("e4",), comment="Best by test", label="Main")
    assert result[1] is annotations[1]


def test_upsert_appends_new_annotation_with_generated_id(annotations):
    result = upsert_annotation(annotations, ["d4"], "Queen's pawn", id_factory=lambda: "fresh")

    assert len(result) == 3
    assert result[-1] == Annotation(id="fresh", path=("d4",), comment="Queen's pawn")


def test_upsert_with_blank_comment_removes(annotations):
    result = upsert_annotation(annotations, ["e4"], "   ")

    assert [a.id for a in result] == ["b"]


def test_upsert_collapses_duplicates_into_last_entry():
    items = [
        Annotation(id="old", path=("e4",), comment="first"),
        Annotation(id="other", path=("d4",), comment="d-pawn"),
        Annotation(id="new", path=("e4",), comment="second"),
    ]

    result = upsert_annotation(items, ("e4",), "merged")

    assert [(a.id, a.comment) for a in result] == [("other", "d-pawn"), ("new", "merged")]


def test_remove_annotation(annotations):
    assert remove_annotation(annotations, ["e4", "e5"]) == [annotations[0]]


def test_import_pgn_comments():
    imported = import_pgn_comments("1. e4 {Central} e5", id_factory=lambda: "id-1")

    assert imported == [Annotation(id="id-1", path=("e4",), comment="Central")]


def test_import_pgn_comments_without_comments_raises():
    with pytest.raises(NoCommentsFoundError):
        import_pgn_comments("1. e4 e5")


def test_tag_helpers():
    assert normalize_tags(" e4, open game ,, tactics ") == ["e4", "open game", "tactics"]
    metadata = OpeningMetadata(eco="C45", opening="Scotch Game", variation="Scotch Game")
    assert derive_fallback_tags(metadata) == ["C45", "Scotch Game"]


def test_formatting_helpers():
    assert format_move_label("e4", 0) == "1. e4"
    assert format_move_label("e5", 1) == "e5"
    assert format_move_label("Nf3", 2) == "2. Nf3"
    assert format_path(()) == "Starting position"
    assert format_path(("e4", "e5")) == "e4 → e5"
    assert format_created(datetime.date(2023, 3, 10)) == "March 10, 2023"
    assert normalize_thumbnail_fen(" rnbqkbnr/8/8/8/8/8/8/RNBQKBNR w KQkq - 0 1") == "rnbqkbnr/8/8/8/8/8/8/RNBQKBNR"


def test_apply_opening_edit_derives_name_tags_and_metadata():
    opening = ensure_opening_defaults({"id": "op-1", "created": "January 1, 2020"})
    edit = OpeningEdit(
        name="",
        summary="  Fight for the center. ",
        tag_input="",
        fen="startpos w",
        pgn='[ECO "C45"]\n[Opening "Scotch Game"]\n\n1. e4 e5 2. Nf3 Nc6 3. d4 *',
        side=Side.WHITE,
    )

    updated = apply_opening_edit(opening, edit, today=datetime.date(2024, 5, 2))

    assert updated.id == "op-1"
    assert updated.name == "Scotch Game"
    assert updated.tags == ["C45", "Scotch Game"]
    assert updated.summary == "Fight for the center."
    assert updated.fen == "startpos"
    assert updated.metadata.eco == "C45"
    assert updated.created == "May 2, 2024"


def test_apply_opening_edit_without_changes_keeps_created():
    opening = ensure_opening_defaults({
        "id": "op-1", "name": "Mine", "created": "January 1, 2020", "pgn": "1. e4 e5",
        "fen": "placement", "tags": ["e4"],
    })
    edit = OpeningEdit(name="Mine", summary="", tag_input="e4", fen="placement", pgn="1. e4 e5",
                       side=Side.WHITE)

    updated = apply_opening_edit(opening, edit, today=datetime.date(2024, 5, 2))

    assert updated.created == "January 1, 2020"


def test_apply_opening_edit_name_underscores_become_spaces():
    opening = ensure_opening_defaults({})
    edit = OpeningEdit(name="My_Repertoire", summary="", tag_input="x", fen="", pgn="", side=Side.BLACK)

    updated = apply_opening_edit(opening, edit, today=datetime.date(2024, 5, 2))

    assert updated.name == "My Repertoire"
    assert updated.side is Side.BLACK
    assert updated.color_group is Side.BLACK
