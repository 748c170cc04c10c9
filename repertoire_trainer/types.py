# repertoire_trainer/types.py
"""
A central module for shared data structures and service interfaces (Protocols).
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import (Any, Callable, Dict, List, Optional, Protocol, TYPE_CHECKING,
                    Tuple, TypeAlias, Union, runtime_checkable)

if TYPE_CHECKING:
    import chess

FEN: TypeAlias = str
SAN: TypeAlias = str
# A path identifies a position by the SAN moves that lead to it; () is the start.
MovePath: TypeAlias = Tuple[SAN, ...]
# A line is one root-to-leaf path of a repertoire's variation tree.
Line: TypeAlias = Tuple[SAN, ...]
MoveInput: TypeAlias = Union[str, "chess.Move"]
AnnotationIdFactory: TypeAlias = Callable[[], str]


class Side(str, Enum):
    WHITE = "white"; BLACK = "black"


class PracticeMode(str, Enum):
    RANDOM = "random"; SEQUENTIAL = "sequential"


class SessionState(str, Enum):
    IDLE = "Idle"
    AWAITING_USER_MOVE = "AwaitingUserMove"
    AUTO_PLAYING_REPLY = "AutoPlayingReply"
    LINE_COMPLETE = "LineComplete"


class MoveOutcome(str, Enum):
    """The result of submitting a move to a practice session."""
    ACCEPTED = "accepted"
    MISMATCH = "mismatch"
    ILLEGAL = "illegal"
    LINE_EXHAUSTED = "line_exhausted"
    UNAVAILABLE = "unavailable"

    @property
    def accepted(self) -> bool:
        return self is MoveOutcome.ACCEPTED


# --- REPERTOIRE DATA CONTRACTS ---

@dataclass(frozen=True, slots=True)
class Annotation:
    """Commentary attached to the position reached by `path`."""
    id: str
    path: MovePath
    comment: str
    label: Optional[str] = None


@dataclass(slots=True)
class OpeningMetadata:
    eco: Optional[str] = None; opening: Optional[str] = None; variation: Optional[str] = None
    event: Optional[str] = None; site: Optional[str] = None; source: Optional[str] = None

    def as_dict(self) -> Dict[str, str]:
        """Returns only the populated fields."""
        return {key: value for key, value in asdict(self).items() if value}

    def is_empty(self) -> bool:
        return not self.as_dict()


@dataclass(frozen=True)
class ParsedRepertoire:
    """Everything the variation walker extracts from one notation text."""
    lines: List[Line] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)
    metadata: OpeningMetadata = field(default_factory=OpeningMetadata)

    @property
    def is_empty(self) -> bool:
        return not self.lines and not self.annotations and self.metadata.is_empty()


@dataclass
class Opening:
    """An opening repertoire record as kept by the opening store."""
    id: str
    name: str
    created: str
    fen: FEN
    pgn: str
    side: Side = Side.WHITE
    color_group: Side = Side.WHITE
    difficulty: int = 2
    tags: List[str] = field(default_factory=list)
    summary: str = ""
    annotations: List[Annotation] = field(default_factory=list)
    metadata: OpeningMetadata = field(default_factory=OpeningMetadata)


# --- ORACLE DATA CONTRACTS ---

@dataclass(frozen=True, slots=True)
class MoveNotation:
    san: SAN; uci: str


@dataclass(frozen=True, slots=True)
class AppliedMove:
    fen_before: FEN; fen_after: FEN; san: SAN; uci: str


# --- PRACTICE SESSION DATA CONTRACTS ---

@dataclass(frozen=True, slots=True)
class HintArrow:
    """A board shape pointing from the origin to the destination of the expected move."""
    orig: str; dest: str; brush: str = "green"


@dataclass(frozen=True, slots=True)
class StatsSnapshot:
    attempts: int; first_try_count: int; total_depth: int; average_depth: float


@dataclass(frozen=True)
class SessionSnapshot:
    """The state a presentation layer needs after each session transition."""
    state: SessionState
    fen: FEN
    mode: PracticeMode
    max_depth: int
    line: Line
    index: int
    path: MovePath
    legal_destinations: Dict[str, List[str]]
    hint: Optional[HintArrow]
    annotation: Optional[Annotation]
    stats: StatsSnapshot


SessionListener: TypeAlias = Callable[[SessionSnapshot], None]


# --- PROTOCOLS: Abstract Interfaces for Services ---
# These define the contracts the practice session and the CLI depend on.
# They enable dependency inversion and allow for easy fakes in tests.

@runtime_checkable
class MoveOracle(Protocol):
    """Defines the chess-rules boundary: legality, resulting positions and notation."""
    def apply_move(self, fen: FEN, move: MoveInput) -> AppliedMove: ...
    def legal_moves(self, fen: FEN) -> List[MoveNotation]: ...
    def legal_destinations(self, fen: FEN) -> Dict[str, List[str]]: ...
    def notation_of(self, fen: FEN, move: MoveInput) -> MoveNotation: ...


@runtime_checkable
class ScheduledHandle(Protocol):
    def cancel(self) -> None: ...


@runtime_checkable
class Scheduler(Protocol):
    """Runs a callback once after a delay; the returned handle cancels it."""
    def schedule(self, delay_s: float, callback: Callable[[], Any]) -> ScheduledHandle: ...


@runtime_checkable
class OpeningStore(Protocol):
    """Defines the abstract interface for the opening collection's persistence."""
    async def load_all(self) -> List[Opening]: ...
    async def get(self, opening_id: str) -> Opening: ...
    async def find_by_name(self, name: Optional[str]) -> Optional[Opening]: ...
    async def upsert(self, opening: Opening) -> Opening: ...
    async def delete(self, opening_id: str) -> None: ...
    async def update_annotations(self, opening_id: str, annotations: List[Annotation]) -> Opening: ...
