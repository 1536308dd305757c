from bookswap.db.models.user import User, UserStatus
from bookswap.db.models.book import TEXT_MAX_LENGTH, Book, BookCondition
from bookswap.db.models.decision import Decision, DecisionAction
from bookswap.db.models.match import Match, MatchStatus

__all__ = [
    "User",
    "UserStatus",
    "Book",
    "BookCondition",
    "TEXT_MAX_LENGTH",
    "Decision",
    "DecisionAction",
    "Match",
    "MatchStatus",
]
