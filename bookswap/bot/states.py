from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ConversationState(str, Enum):
    """Fixed set of conversation states. IDLE is also the recovery target."""
    IDLE = "idle"
    INITIAL_LANGUAGE_SELECTION = "initial_language_selection"
    LANGUAGE_SELECTION = "language_selection"
    REGISTRATION = "registration"
    ADDING_BOOK = "adding_book"
    PROFILE_MENU = "profile_menu"
    MANAGE_BOOKS = "manage_books"
    CONFIRM_DELETE_BOOK = "confirm_delete_book"
    BROWSING = "browsing"


PROFILE_STATES = (
    ConversationState.PROFILE_MENU,
    ConversationState.MANAGE_BOOKS,
    ConversationState.CONFIRM_DELETE_BOOK,
)


class BrowsingPointer(BaseModel):
    """The candidate currently shown to the user and when it was shown."""
    current_candidate_id: int | None = None
    start_time: datetime | None = None

    def point_to(self, candidate_id: int) -> None:
        self.current_candidate_id = candidate_id
        self.start_time = datetime.now(timezone.utc)

    def clear(self) -> None:
        self.current_candidate_id = None
        self.start_time = None

    def is_expired(self, timeout_seconds: int, now: datetime | None = None) -> bool:
        if self.start_time is None:
            return True
        now = now or datetime.now(timezone.utc)
        return (now - self.start_time).total_seconds() > timeout_seconds


class Session(BaseModel):
    """Per-user conversation state kept in FSM storage."""
    state: ConversationState = ConversationState.IDLE
    step: int = 0
    temp_data: dict[str, Any] = Field(default_factory=dict)
    browsing: BrowsingPointer = Field(default_factory=BrowsingPointer)
    language: str | None = None

    def enter(self, state: ConversationState, step: int = 0, temp_data: dict[str, Any] | None = None) -> None:
        """Move to a new state, replacing step and scratch data."""
        self.state = state
        self.step = step
        self.temp_data = temp_data if temp_data is not None else {}

    def reset(self) -> None:
        """Back to idle with nothing in progress. Language is kept."""
        self.enter(ConversationState.IDLE)
        self.browsing.clear()
