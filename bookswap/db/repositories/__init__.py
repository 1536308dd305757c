from bookswap.db.repositories.user import user_repo
from bookswap.db.repositories.decision import decision_repo
from bookswap.db.repositories.match import match_repo

__all__ = ["user_repo", "decision_repo", "match_repo"]
