"""Browsing, like/skip and match detection through the controller."""
from datetime import timedelta

from sqlalchemy import select

from bookswap.bot.context import ChatUser
from bookswap.bot.states import ConversationState
from bookswap.core.localization import t
from bookswap.db.models import Decision, DecisionAction, Match, UserStatus
from bookswap.db.repositories import decision_repo


async def all_rows(session_pool, model):
    async with session_pool() as session:
        return list((await session.execute(select(model))).scalars().all())


class TestBrowsing:

    async def test_browse_shows_candidate(self, send, create_user, sessions, messenger):
        await create_user(1)
        await create_user(2)
        await send(1, "📚 Browse Books")

        session = await sessions.load(1)
        assert session.state == ConversationState.BROWSING
        assert session.browsing.current_candidate_id == 2
        assert session.browsing.start_time is not None
        candidate_text = messenger.reply.await_args_list[0].args[1]
        assert t("browse_user_header", "en", "Reader2") in candidate_text
        assert "Book 1" in candidate_text

    async def test_browse_requires_books(self, send, create_user, sessions, sent_texts):
        await create_user(1, books=0)
        await create_user(2)
        await send(1, "/browse")

        assert await state_of(sessions, 1) == ConversationState.IDLE
        assert sent_texts() == [t("browse_no_books", "en")]

    async def test_nobody_to_show(self, send, create_user, sessions, sent_texts):
        await create_user(1)
        await create_user(2, status=UserStatus.INACTIVE)
        await send(1, "/browse")

        assert await state_of(sessions, 1) == ConversationState.IDLE
        assert sent_texts() == [t("browse_no_more_books", "en")]

    async def test_acknowledgement_precedes_next_candidate(self, send, create_user, sessions, sent_texts):
        for telegram_id in (1, 2, 3):
            await create_user(telegram_id)
        await send(1, "/browse")
        first = (await sessions.load(1)).browsing.current_candidate_id

        await send(1, "👎 Skip")

        texts = sent_texts()
        ack = texts.index(t("browse_skipped", "en"))
        second = (await sessions.load(1)).browsing.current_candidate_id
        assert second not in (None, first)
        assert t("browse_user_header", "en", f"Reader{second}") in texts[ack + 1]

    async def test_back_to_menu_cancels_browsing(self, send, create_user, sessions, sent_texts):
        await create_user(1)
        await create_user(2)
        await send(1, "/browse")
        await send(1, "🔙 Back to Main Menu")

        session = await sessions.load(1)
        assert session.state == ConversationState.IDLE
        assert session.browsing.current_candidate_id is None
        assert sent_texts()[-2:] == [t("browse_cancelled", "en"), t("main_menu", "en")]


class TestMatchScenarios:

    async def test_mutual_like_creates_one_match_and_notifies_both(
        self, send, create_user, ctx, sessions, sent_texts, notifier, session_pool
    ):
        await create_user(1, username="alice")
        await create_user(2, username="bob")

        await send(1, "/browse")
        assert (await sessions.load(1)).browsing.current_candidate_id == 2
        await send(1, "👍 Like")
        assert await all_rows(session_pool, Match) == []

        await send(2, "/browse")
        assert (await sessions.load(2)).browsing.current_candidate_id == 1
        await send(2, "👍 Like")
        await ctx.match_notifier.wait_pending()

        matches = await all_rows(session_pool, Match)
        assert len(matches) == 1
        assert matches[0].users == (1, 2)
        assert len(await all_rows(session_pool, Decision)) == 2

        assert any("@alice" in text for text in sent_texts(2))
        notifier.send_direct.assert_awaited_once()
        user_id, text = notifier.send_direct.await_args.args
        assert user_id == 1
        assert "@bob" in text

    async def test_skip_is_never_shown_again(self, send, create_user, sessions, sent_texts, session_pool):
        await create_user(1)
        await create_user(2)

        await send(1, "/browse")
        await send(1, "👎 Skip")
        await send(1, "/browse")

        assert await state_of(sessions, 1) == ConversationState.IDLE
        assert sent_texts()[-1] == t("browse_no_more_books", "en")
        decisions = await all_rows(session_pool, Decision)
        assert [(d.from_user_id, d.to_user_id, d.action) for d in decisions] == [(1, 2, "skip")]

    async def test_failed_partner_notification_keeps_match(
        self, send, create_user, ctx, notifier, session_pool
    ):
        await create_user(1)
        await create_user(2)
        notifier.send_direct.side_effect = RuntimeError("blocked")

        async with session_pool() as session:
            await decision_repo.add_if_absent(session, 1, 2, DecisionAction.LIKE)
        await send(2, "/browse")
        await send(2, "👍 Like")
        await ctx.match_notifier.wait_pending()

        assert len(await all_rows(session_pool, Match)) == 1


class TestBrowsingRecovery:

    async def test_timeout_expires_session(self, send, create_user, sessions, sent_texts, session_pool):
        await create_user(1)
        await create_user(2)
        await send(1, "/browse")

        session = await sessions.load(1)
        session.browsing.start_time -= timedelta(seconds=301)
        await sessions.save(1, session)

        await send(1, "👍 Like")

        session = await sessions.load(1)
        assert session.state == ConversationState.IDLE
        assert session.browsing.current_candidate_id is None
        assert sent_texts()[-1] == t("browse_session_expired", "en")
        assert await all_rows(session_pool, Decision) == []

    async def test_callback_for_current_candidate(self, controller, create_user, sessions, session_pool):
        await create_user(1)
        await create_user(2)
        await controller.handle_text(ChatUser(id=1), "/browse")

        await controller.handle_callback(ChatUser(id=1), DecisionAction.LIKE, 2)

        decisions = await all_rows(session_pool, Decision)
        assert [(d.from_user_id, d.to_user_id, d.action) for d in decisions] == [(1, 2, "like")]

    async def test_callback_for_old_candidate_is_expired(
        self, controller, create_user, sessions, sent_texts, session_pool
    ):
        await create_user(1)
        await create_user(2)
        await create_user(3)
        await controller.handle_text(ChatUser(id=1), "/browse")
        shown = (await sessions.load(1)).browsing.current_candidate_id
        other = 3 if shown == 2 else 2

        await controller.handle_callback(ChatUser(id=1), DecisionAction.LIKE, other)

        assert await state_of(sessions, 1) == ConversationState.IDLE
        assert sent_texts()[-1] == t("browse_session_expired", "en")
        assert await all_rows(session_pool, Decision) == []

    async def test_repeated_callback_keeps_browsing(
        self, controller, create_user, sessions, sent_texts, session_pool
    ):
        for telegram_id in (1, 2, 3):
            await create_user(telegram_id)
        await controller.handle_text(ChatUser(id=1), "/browse")
        shown = (await sessions.load(1)).browsing.current_candidate_id

        await controller.handle_callback(ChatUser(id=1), DecisionAction.LIKE, shown)
        next_shown = (await sessions.load(1)).browsing.current_candidate_id
        sent_before = len(sent_texts())
        await controller.handle_callback(ChatUser(id=1), DecisionAction.LIKE, shown)

        session = await sessions.load(1)
        assert session.state == ConversationState.BROWSING
        assert next_shown not in (None, shown)
        assert session.browsing.current_candidate_id == next_shown
        assert len(sent_texts()) == sent_before
        assert t("browse_session_expired", "en") not in sent_texts()
        decisions = await all_rows(session_pool, Decision)
        assert [(d.from_user_id, d.to_user_id) for d in decisions] == [(1, shown)]

    async def test_callback_outside_browsing_is_expired(self, controller, create_user, sent_texts, session_pool):
        await create_user(1)
        await create_user(2)

        await controller.handle_callback(ChatUser(id=1), DecisionAction.SKIP, 2)

        assert sent_texts() == [t("browse_session_expired", "en")]
        assert await all_rows(session_pool, Decision) == []

    async def test_store_failure_resets_session(
        self, send, create_user, sessions, sent_texts, ctx, monkeypatch
    ):
        await create_user(1)
        await create_user(2)
        await send(1, "/browse")

        async def failing_record(*args, **kwargs):
            raise RuntimeError("database is gone")

        monkeypatch.setattr(ctx.engine, "record_decision", failing_record)
        await send(1, "👍 Like")

        session = await sessions.load(1)
        assert session.state == ConversationState.IDLE
        assert session.browsing.current_candidate_id is None
        assert sent_texts()[-1] == t("error_generic", "en")
        assert t("browse_liked", "en") not in sent_texts()


async def state_of(sessions, user_id):
    return (await sessions.load(user_id)).state
