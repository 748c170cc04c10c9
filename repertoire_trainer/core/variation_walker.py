# repertoire_trainer/core/variation_walker.py
"""
Flattens repertoire PGN text into practice lines, annotations and metadata.

This module acts as an Anti-Corruption Layer between the `python-chess` PGN
reader and the trainer's domain. A custom visitor drives `chess.pgn.read_game`
and builds a small, throw-away tree of `MoveNode` objects per game; that tree
is walked once, depth first, to emit every root-to-leaf `Line` together with
the comments found along the way, keyed by the move path that reaches them.
No `python-chess` game tree and no `MoveNode` survives a call, so the walker
is a pure, re-entrant function of its input text.
"""
import io
import itertools
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import chess
import chess.pgn
import structlog

from repertoire_trainer.exceptions import PgnParsingError
from repertoire_trainer.types import (Annotation, AnnotationIdFactory, Line, MovePath,
                                      OpeningMetadata, ParsedRepertoire)
from repertoire_trainer.utils import metrics

logger = structlog.get_logger(__name__)

INTRO_LABEL = "Intro"

# Header values PGN writers use to mean "unknown".
_UNKNOWN_HEADER_VALUES = frozenset({"", "?", "????.??.??"})

# Metadata field -> PGN tags consulted in order; the first populated tag wins.
_METADATA_TAGS: Dict[str, List[str]] = {
    "eco": ["ECO"],
    "opening": ["Opening"],
    "variation": ["Variation"],
    "event": ["Event"],
    "site": ["Site"],
    "source": ["Annotator", "Source", "Author"],
}


@dataclass
class MoveNode:
    """A node of the ephemeral variation tree. Only the root has no move."""
    san: Optional[str] = None
    starting_comments: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    children: List["MoveNode"] = field(default_factory=list)


@dataclass
class _GameRecord:
    headers: Dict[str, str]
    root: MoveNode
    errors: List[Exception]
    start_error: Optional[Exception] = None


class _VariationTreeBuilder(chess.pgn.BaseVisitor):
    """
    Builds a `MoveNode` tree while `chess.pgn.read_game` tokenizes one game.

    Each entry of the variation stack is the chain of nodes from the root to
    the cursor of that variation. A new variation branches from the parent of
    the current cursor, which is the last-but-one entry of the chain.
    """

    def begin_game(self) -> None:
        self._headers: Dict[str, str] = {}
        self._root = MoveNode()
        self._variations: List[List[MoveNode]] = [[self._root]]
        self._pending_starting_comments: List[str] = []
        self._at_variation_start = False
        self._errors: List[Exception] = []
        self._start_error: Optional[Exception] = None

    def visit_header(self, tagname: str, tagvalue: str) -> None:
        self._headers[tagname] = tagvalue

    def end_headers(self):
        try:
            _starting_board(self._headers)
        except PgnParsingError as e:
            self._start_error = e
            return chess.pgn.SKIP
        return None

    def begin_variation(self):
        chain = self._variations[-1]
        self._variations.append(chain[:-1] or chain[:1])
        self._at_variation_start = True
        return None

    def end_variation(self) -> None:
        chain = self._variations.pop()
        if self._pending_starting_comments:
            # A variation that closed without any move keeps its comments on the branch point.
            chain[-1].comments.extend(self._pending_starting_comments)
            self._pending_starting_comments = []
        self._at_variation_start = False

    def visit_move(self, board: chess.Board, move: chess.Move) -> None:
        san = board.san(move)
        chain = self._variations[-1]
        parent = chain[-1]
        # A variation repeating a sibling's move continues that sibling, so paths stay unique.
        node = next((child for child in parent.children if child.san == san), None)
        if node is None:
            node = MoveNode(san=san)
            parent.children.append(node)
        node.starting_comments.extend(self._pending_starting_comments)
        self._pending_starting_comments = []
        chain.append(node)
        self._at_variation_start = False

    def visit_comment(self, comment) -> None:
        comments = [comment] if isinstance(comment, str) else list(comment)
        if self._at_variation_start:
            self._pending_starting_comments.extend(comments)
        else:
            self._variations[-1][-1].comments.extend(comments)

    def handle_error(self, error: Exception) -> None:
        # Recorded rather than raised: the reader then skips the rest of the variation.
        self._errors.append(error)

    def result(self) -> _GameRecord:
        return _GameRecord(
            headers=self._headers, root=self._root,
            errors=self._errors, start_error=self._start_error,
        )


def _starting_board(headers: Dict[str, str]) -> chess.Board:
    """Builds the starting position described by the headers (FEN/Variant aware)."""
    try:
        return chess.pgn.Headers(headers).board()
    except ValueError as e:
        raise PgnParsingError(f"Cannot establish starting position: {e}") from e


def _clean_header(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return None if value in _UNKNOWN_HEADER_VALUES else value


def headers_to_metadata(headers: Dict[str, str]) -> OpeningMetadata:
    """Normalizes raw PGN tags into the metadata fields the trainer displays."""
    values: Dict[str, Optional[str]] = {}
    for field_name, tags in _METADATA_TAGS.items():
        values[field_name] = next(
            (cleaned for tag in tags if (cleaned := _clean_header(headers.get(tag)))), None
        )
    return OpeningMetadata(**values)


def merge_metadata(target: OpeningMetadata, source: OpeningMetadata) -> OpeningMetadata:
    """
    Fills the empty fields of `target` from `source`, in place.

    A field already populated in the accumulator is never overwritten, so the
    first non-empty value seen across several games wins.
    """
    for field_name, value in source.as_dict().items():
        if not getattr(target, field_name):
            setattr(target, field_name, value)
    return target


def _clean_comments(comments: Iterable[str]) -> List[str]:
    return [text for text in (comment.strip() for comment in comments if comment) if text]


def _collect_node_comments(
    node: MoveNode, path: MovePath, annotations: List[Annotation], next_id: AnnotationIdFactory
) -> None:
    for text in _clean_comments(node.starting_comments + node.comments):
        annotations.append(Annotation(id=next_id(), path=path, comment=text))


def _walk(
    node: MoveNode, path: MovePath, lines: List[Line],
    annotations: List[Annotation], next_id: AnnotationIdFactory
) -> None:
    """Depth-first traversal emitting one line per leaf; children in source order."""
    if node.san is None:
        for child in node.children:
            _walk(child, path, lines, annotations, next_id)
        return

    current_path = path + (node.san,)
    _collect_node_comments(node, current_path, annotations, next_id)

    if not node.children:
        lines.append(current_path)
        return

    for child in node.children:
        _walk(child, current_path, lines, annotations, next_id)


def _collect_game(
    record: _GameRecord, lines: List[Line], annotations: List[Annotation],
    metadata: OpeningMetadata, next_id: AnnotationIdFactory
) -> None:
    merge_metadata(metadata, headers_to_metadata(record.headers))

    for text in _clean_comments(record.root.comments):
        annotations.append(Annotation(id=next_id(), path=(), comment=text, label=INTRO_LABEL))

    _walk(record.root, (), lines, annotations, next_id)


def _read_games(text: str) -> Iterable[_GameRecord]:
    handle = io.StringIO(text)
    while True:
        try:
            record = chess.pgn.read_game(handle, Visitor=_VariationTreeBuilder)
        except (ValueError, RuntimeError) as e:
            logger.warning("Stopping PGN read after a tokenizer failure.", error=str(e))
            return
        if record is None:
            return
        yield record


def _counter_id_factory() -> AnnotationIdFactory:
    counter = itertools.count()
    return lambda: f"annot-{next(counter)}"


def parse_repertoire_pgn(
    text: Optional[str], annotation_id_factory: Optional[AnnotationIdFactory] = None
) -> ParsedRepertoire:
    """
    Parses repertoire notation into lines, annotations and merged metadata.

    Games are processed in order. A game whose starting position cannot be
    established is skipped and the remaining games are still read. Moves are
    stored in the canonical SAN of the position they are played from, so the
    lines compare directly with the move oracle's notation.

    Args:
        text: Raw PGN text holding zero or more games.
        annotation_id_factory: Produces the id of each new annotation. Defaults
            to a counter local to this call (`annot-0`, `annot-1`, ...).

    Returns:
        A `ParsedRepertoire`. Input that yields nothing usable produces an
        empty result rather than an exception.
    """
    if not text or not text.strip():
        return ParsedRepertoire()

    next_id = annotation_id_factory or _counter_id_factory()
    lines: List[Line] = []
    annotations: List[Annotation] = []
    metadata = OpeningMetadata()

    for game_number, record in enumerate(_read_games(text), start=1):
        if record.start_error is not None:
            logger.warning(
                "Skipping game without a valid starting position.",
                game_number=game_number, error=str(record.start_error)
            )
            metrics.PGN_GAMES_SKIPPED_TOTAL.labels(reason="invalid_start").inc()
            continue
        if record.errors:
            logger.warning(
                "PGN game contains unreadable moves; affected variations were truncated.",
                game_number=game_number, errors=[str(e) for e in record.errors]
            )
        _collect_game(record, lines, annotations, metadata, next_id)

    logger.debug("Parsed repertoire PGN.", lines=len(lines), annotations=len(annotations))
    return ParsedRepertoire(lines=lines, annotations=annotations, metadata=metadata)


def parse_lines(text: Optional[str]) -> List[Line]:
    """Returns only the practice lines of the given notation."""
    return parse_repertoire_pgn(text).lines
