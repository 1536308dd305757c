from dataclasses import dataclass, field
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookswap.bot.states import ConversationState, Session
from bookswap.bot.utils.candidates import CandidateSelector
from bookswap.bot.utils.matching import MatchEngine
from bookswap.bot.utils.messaging import Messenger, Notifier, ReplyMarkup
from bookswap.bot.utils.notifications import MatchNotifier
from bookswap.core.config import Settings
from bookswap.core.localization import t


@dataclass
class BotContext:
    """Everything a handler may touch, passed in instead of module globals."""
    session_pool: async_sessionmaker[AsyncSession]
    messenger: Messenger
    notifier: Notifier
    settings: Settings
    selector: CandidateSelector = field(default_factory=CandidateSelector)
    engine: MatchEngine = field(default_factory=MatchEngine)
    match_notifier: MatchNotifier = field(init=False)

    def __post_init__(self):
        self.match_notifier = MatchNotifier(self.notifier)


@dataclass
class ChatUser:
    """The sender of an update."""
    id: int
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "username": self.username,
        }


@dataclass
class Reply:
    text: str
    reply_markup: ReplyMarkup | None = None


Continuation = Callable[["Turn"], Awaitable[None]]


@dataclass
class Turn:
    """
    One inbound event being processed.

    Handlers read the input, mutate ``session`` and queue replies; the
    controller sends the replies and persists the session afterwards. A handler
    may register a continuation that runs once the first batch is delivered.
    """
    user: ChatUser
    text: str
    session: Session
    db: AsyncSession
    ctx: BotContext
    # Snapshot taken before any global command reset the session
    previous: Session = field(default_factory=Session)
    replies: list[Reply] = field(default_factory=list)
    continuation: Continuation | None = None

    @property
    def lang(self) -> str | None:
        return self.session.language

    @property
    def previous_state(self) -> ConversationState:
        return self.previous.state

    @property
    def max_books(self) -> int:
        return self.ctx.settings.MAX_BOOKS

    def t(self, key: str, *args) -> str:
        return t(key, self.lang, *args)

    def reply(self, text: str, reply_markup: ReplyMarkup | None = None) -> None:
        self.replies.append(Reply(text=text, reply_markup=reply_markup))

    def then(self, continuation: Continuation) -> None:
        self.continuation = continuation

    def restore_previous(self) -> None:
        """Undo a global reset, for commands rejected without changing state."""
        self.session = self.previous.model_copy(deep=True)
