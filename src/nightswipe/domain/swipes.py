"""Domain models for swipes, matching and confirmations."""

from dataclasses import dataclass
from datetime import datetime

from nightswipe.domain.deck import Place

LEFT = "left"
RIGHT = "right"
DIRECTIONS = frozenset({LEFT, RIGHT})

LOAD_MORE = "load_more"
RESTART = "restart"
CONFIRMATION_KINDS = frozenset({LOAD_MORE, RESTART})


@dataclass(frozen=True)
class SwipeRecord:
    """A single swipe decision, scoped to the deck epoch it was made in."""

    id: str
    session_id: str
    user_id: str
    place_id: str
    direction: str
    deck_seed: str
    swiped_at: datetime


@dataclass(frozen=True)
class SwipeOutcome:
    """Submitted swipe plus whether it was already on record."""

    swipe: SwipeRecord
    duplicate: bool


@dataclass(frozen=True)
class MemberProgress:
    """Swipe progress of one member for the current epoch."""

    user_id: str
    display_name: str
    role: str
    swipes_count: int
    deck_size: int
    finished: bool


@dataclass(frozen=True)
class SessionStatus:
    """Completion view recomputed from the swipe ledger."""

    session_id: str
    status: str
    session_status: str
    deck_seed: str | None
    users: list[MemberProgress]


@dataclass(frozen=True)
class MatchResult:
    """Places every member swiped right on."""

    session_id: str
    matches: list[Place]

    @property
    def match_count(self) -> int:
        return len(self.matches)


@dataclass(frozen=True)
class ConfirmationResult:
    """State of a load-more or restart confirmation round."""

    kind: str
    all_confirmed: bool
    confirmed_users: list[str]
    total_users: int
    new_deck_generated: bool
    deck_seed: str | None
