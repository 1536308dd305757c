from bookswap.core.localization import format_condition, t
from bookswap.db.models import Book, User, UserStatus


def format_books(books: list[Book], lang: str | None, item_key: str = "book_item") -> str:
    """Numbered list of books, one block per book."""
    return "\n\n".join(
        t(item_key, lang, position, book.title, book.author, format_condition(book.condition, lang))
        for position, book in enumerate(books, start=1)
    )


def format_contact(user: User, lang: str | None) -> str:
    if user.username:
        return f"@{user.username}"
    return t("contact_no_username", lang)


def format_status(user: User, lang: str | None) -> tuple[str, str]:
    """Status emoji and localized status word."""
    if user.status == UserStatus.ACTIVE.value:
        return "🟢", t("status_active", lang)
    return "🔴", t("status_inactive", lang)


def format_profile(user: User, lang: str | None, max_books: int) -> str:
    emoji, status = format_status(user, lang)
    parts = [t("profile_details", lang, user.display_name, emoji, status)]
    if not user.books:
        parts.append(t("profile_no_books", lang))
    else:
        parts.append(f"{t('profile_books_header', lang)}\n{format_books(user.books, lang)}")
        if len(user.books) < max_books:
            parts.append(t("profile_books_remaining", lang, max_books - len(user.books)))
    parts.append(t("profile_select_option", lang))
    return "\n\n".join(parts)


def format_candidate(candidate: User, lang: str | None) -> str:
    return "\n\n".join([
        t("browse_user_header", lang, candidate.display_name),
        format_books(candidate.books, lang, item_key="browse_book_item"),
    ])


def format_match_list_entry(position: int, other: User, lang: str | None) -> str:
    books = "\n".join(f"- {book.title} ({book.author})" for book in other.books) or "-"
    return t("matches_item", lang, position, other.display_name, books, format_contact(other, lang))
