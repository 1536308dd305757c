"""Tests for the user, decision and match repositories."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from bookswap.core.exceptions import BookLimitError, InvalidBookError
from bookswap.db.models import TEXT_MAX_LENGTH, Decision, DecisionAction, Match, UserStatus
from bookswap.db.repositories import decision_repo, match_repo, user_repo


class TestUserRepository:

    async def test_get_or_create_is_idempotent(self, db):
        user, created = await user_repo.get_or_create_user(db, {"id": 10, "first_name": "Ann"})
        again, created_again = await user_repo.get_or_create_user(db, {"id": 10, "username": "ann"})

        assert created is True
        assert created_again is False
        assert again.id == user.id
        assert again.username == "ann"
        assert again.status == UserStatus.ACTIVE.value
        assert again.books == []

    async def test_books_keep_insertion_order(self, db):
        user, _ = await user_repo.get_or_create_user(db, {"id": 10})
        for title in ("Dune", "Emma", "Ulysses"):
            await user_repo.add_book(db, user, title, "Someone", None)

        assert [book.title for book in user.books] == ["Dune", "Emma", "Ulysses"]

    async def test_add_book_enforces_cap(self, db):
        user, _ = await user_repo.get_or_create_user(db, {"id": 10})
        for i in range(3):
            await user_repo.add_book(db, user, f"Book {i}", "Author", "good")

        with pytest.raises(BookLimitError):
            await user_repo.add_book(db, user, "One too many", "Author", "good")
        assert len(user.books) == 3

    @pytest.mark.parametrize("title,author,condition", [
        ("", "Author", "good"),
        ("Title", "   ", "good"),
        ("T" * (TEXT_MAX_LENGTH + 1), "Author", "good"),
        ("Title", "A" * (TEXT_MAX_LENGTH + 1), "good"),
        ("Title", "Author", "mint"),
    ])
    async def test_add_book_validates(self, db, title, author, condition):
        user, _ = await user_repo.get_or_create_user(db, {"id": 10})
        with pytest.raises(InvalidBookError):
            await user_repo.add_book(db, user, title, author, condition)
        assert user.books == []

    async def test_delete_book_by_id(self, db):
        user, _ = await user_repo.get_or_create_user(db, {"id": 10})
        first = await user_repo.add_book(db, user, "Dune", "Herbert", "new")
        second = await user_repo.add_book(db, user, "Emma", "Austen", "fair")
        third = await user_repo.add_book(db, user, "Ulysses", "Joyce", "poor")

        deleted = await user_repo.delete_book(db, user, second.id)

        assert deleted.id == second.id
        assert [book.id for book in user.books] == [first.id, third.id]

    async def test_delete_missing_book_is_noop(self, db):
        user, _ = await user_repo.get_or_create_user(db, {"id": 10})
        book = await user_repo.add_book(db, user, "Dune", "Herbert", "new")
        other, _ = await user_repo.get_or_create_user(db, {"id": 11})

        assert await user_repo.delete_book(db, other, book.id) is None
        assert await user_repo.delete_book(db, user, 9999) is None
        assert len(user.books) == 1

    async def test_toggle_status(self, db):
        user, _ = await user_repo.get_or_create_user(db, {"id": 10})
        assert await user_repo.toggle_status(db, user) == UserStatus.INACTIVE.value
        assert await user_repo.toggle_status(db, user) == UserStatus.ACTIVE.value


class TestDecisionRepository:

    async def test_identical_decision_stored_once(self, db):
        _, created = await decision_repo.add_if_absent(db, 1, 2, DecisionAction.LIKE)
        _, created_again = await decision_repo.add_if_absent(db, 1, 2, DecisionAction.LIKE)

        count = await db.scalar(select(func.count()).select_from(Decision))
        assert created is True
        assert created_again is False
        assert count == 1

    async def test_decided_ids_include_likes_and_skips(self, db):
        await decision_repo.add_if_absent(db, 1, 2, DecisionAction.LIKE)
        await decision_repo.add_if_absent(db, 1, 3, DecisionAction.SKIP)
        await decision_repo.add_if_absent(db, 4, 1, DecisionAction.LIKE)

        assert await decision_repo.get_decided_user_ids(db, 1) == {2, 3}


class TestMatchRepository:

    async def test_pair_is_order_independent(self, db):
        match = await match_repo.create(db, 9, 3)

        assert match.users == (3, 9)
        assert (await match_repo.get(db, match.id)).users == (3, 9)
        assert (await match_repo.get_for_pair(db, 3, 9)).id == match.id
        assert (await match_repo.get_for_pair(db, 9, 3)).id == match.id
        assert match.other_user(3) == 9
        assert match.other_user(9) == 3

    async def test_duplicate_pair_violates_unique_constraint(self, db):
        await match_repo.create(db, 1, 2)
        with pytest.raises(IntegrityError):
            await match_repo.create(db, 2, 1)
        await db.rollback()

        count = await db.scalar(select(func.count()).select_from(Match))
        assert count == 1

    async def test_self_match_rejected(self, db):
        with pytest.raises(ValueError):
            await match_repo.create(db, 1, 1)

    async def test_list_for_user(self, db):
        await match_repo.create(db, 1, 2)
        await match_repo.create(db, 3, 1)
        await match_repo.create(db, 2, 3)

        matches = await match_repo.list_for_user(db, 1)
        assert sorted(m.other_user(1) for m in matches) == [2, 3]
