"""
Localization for user-facing bot text.

Only produces strings: the conversation logic branches on canonical values
(see bookswap.bot.actions), never on the text returned from here.
"""

import re

from loguru import logger

# Available languages with their display names
AVAILABLE_LANGUAGES = {
    "en": "English",
    "ru": "Русский",
}

DEFAULT_LANGUAGE = "en"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        # Main menu
        "menu_browse": "📚 Browse Books",
        "menu_profile": "📋 My Profile",
        "menu_matches": "🔄 My Matches",
        "menu_add_book": "📕 Add Book",
        "menu_toggle_status": "🔄 Toggle Status",
        "menu_help": "ℹ️ Help",
        "menu_language": "🌐 Language",

        # Profile menu
        "profile_manage_books": "📚 Manage Books",

        # Common buttons
        "back_to_main": "🔙 Back to Main Menu",
        "back_to_profile": "🔙 Back to Profile",
        "back_language": "🔙 Back / Назад",
        "cancel": "🔙 Cancel",
        "cancel_registration": "🔙 Cancel Registration",

        # Browse actions
        "browse_like": "👍 Like",
        "browse_skip": "👎 Skip",

        # Book conditions
        "condition_new": "📘 New",
        "condition_good": "👍 Good",
        "condition_fair": "👌 Fair",
        "condition_poor": "😕 Poor",
        "condition_unknown": "Not specified",

        # Yes/No
        "yes": "✅ Yes",
        "no": "❌ No",

        # Book management
        "delete_book_button": "❌ Book %d: %s",
        "delete_confirm": "✅ Yes, delete",
        "delete_reject": "❌ No, keep it",

        # Status
        "status_active": "active",
        "status_inactive": "inactive",
        "status_updated": "Your status has been updated to: %s %s",
        "status_visible": "Your books are now visible to other users.",
        "status_hidden": "Your books are now hidden from other users.",

        # Messages
        "welcome_message": "Welcome to Book Exchange! 📚\n\nPlease select your language:",
        "language_selected": "Language set to English. You can change it anytime from the main menu.",
        "language_selection": "Please select your language:",
        "main_menu": "Main Menu",
        "registration_start": "Let's set up your profile. Please add your first book by sending its title.",
        "registration_author": "Great! Now please send me the author's name.",
        "registration_condition": "Thanks! How would you rate the book's condition?\nChoose one of the options below:",
        "registration_invalid_condition": "Please choose one of the provided options:",
        "registration_cancelled": "Registration cancelled. You can start over anytime.",
        "registration_add_another": "Book added! Would you like to add another book? You can add %d more books.",
        "registration_next_title": "Ok! Please send me the title of your next book.",
        "registration_complete": "Perfect! Your profile is all set up. 🎉\n\nUse the menu below to navigate:",
        "empty_input": "Please send a non-empty text.",
        "input_too_long": "That is too long. Please keep it to %d characters or fewer.",

        "profile_details": "Profile Details:\nName: %s\nStatus: %s %s",
        "profile_no_books": "You don't have any books yet! Add books to start exchanging.",
        "profile_books_header": "Your Books:",
        "profile_books_remaining": "You can add %d more book(s).",
        "profile_select_option": "Select an option below:",

        "book_management": "📚 Book Management",
        "book_select_remove": "Select a book to remove or add a new book:",
        "book_item": "📚 Book %d:\nTitle: %s\nAuthor: %s\nCondition: %s",
        "book_deletion_confirm": "Are you sure you want to delete this book?\n\nTitle: %s\nAuthor: %s",
        "book_deleted": 'Book "%s" has been deleted.',
        "book_add_title": "Let's add a new book! Please send me the title.",
        "book_add_cancelled": "Adding book cancelled.",
        "book_add_success": "📚 Book added successfully!\n\nWhat would you like to do next?",
        "book_limit_reached": "You can only have up to %d books at a time. Please remove a book first.",

        "browse_no_books": "You need to add at least one book before you can browse! Use the 📕 Add Book button to add your first book.",
        "browse_no_more_books": "No more books available right now. Check back later! 📚",
        "browse_cancelled": "Browsing cancelled.",
        "browse_liked": "👍 You liked this book!",
        "browse_skipped": "👎 Skipped this book.",
        "browse_session_expired": "Session expired. Please start browsing again.",
        "browse_user_header": "Books from %s:",
        "browse_book_item": "📚 Book %d:\nTitle: %s\nAuthor: %s\nCondition: %s",
        "browse_question": "What do you think of these books?",

        "contact_no_username": "this user (they don't have a username)",
        "match_notification_all_books": "It's a match! 🎉\n\nYou and %s both liked each other's books!\n\n%s\nYou can contact %s directly through Telegram to arrange your book exchange.",
        "match_notification_other_all_books": "🎉 Book Match! 🎉\n\nYou've matched with %s!\n\nThey like your books and you like their books:\n\n%s\nYou can now contact %s directly through Telegram to arrange your book exchange.",

        "matches_header": "Your Matches 🤝",
        "matches_item": "Match #%d:\nUser: %s\nBooks:\n%s\nContact: %s",
        "matches_footer": "Start a conversation to arrange your book exchange!",
        "matches_none": "You don't have any matches yet. 🤔\nUse 📚 Browse Books to discover more books!",

        "help_text": (
            "📚 Book Exchange Bot - Help Guide\n\n"
            "Welcome to Book Exchange! Use the keyboard menu below to navigate:\n\n"
            "📚 Browse Books - Discover and like books from other users\n"
            "📋 My Profile - Manage your profile, status, and books\n"
            "🔄 My Matches - See everyone you matched with\n"
            "ℹ️ Help - Show this help message\n"
            "🌐 Language - Change your language\n\n"
            "💡 Book Exchange Process:\n"
            "• Add up to 3 books to your profile\n"
            "• Browse books from other users and like the ones you want\n"
            "• When you and another user both like each other's books, it's a match!\n"
            "• Contact your match directly through Telegram to arrange the exchange\n\n"
            "Happy book exchanging! 📖"
        ),

        "rate_limited": "Please wait a moment before sending more requests.",
        "error_generic": "Sorry, something went wrong. Please try again later.",
        "error_not_registered": "Please use /start to register first!",
        "error_invalid_input": "Invalid input. Please try again.",
        "error_book_not_found": "Book not found. Please try again.",
        "error_user_not_found": "User not found. Please use /start to register.",
    },
    "ru": {
        # Main menu
        "menu_browse": "📚 Искать книги",
        "menu_profile": "📋 Мой профиль",
        "menu_matches": "🔄 Мои совпадения",
        "menu_add_book": "📕 Добавить книгу",
        "menu_toggle_status": "🔄 Изменить статус",
        "menu_help": "ℹ️ Помощь",
        "menu_language": "🌐 Язык",

        # Profile menu
        "profile_manage_books": "📚 Управление книгами",

        # Common buttons
        "back_to_main": "🔙 Вернуться в меню",
        "back_to_profile": "🔙 Вернуться в профиль",
        "back_language": "🔙 Back / Назад",
        "cancel": "🔙 Отмена",
        "cancel_registration": "🔙 Отменить регистрацию",

        # Browse actions
        "browse_like": "👍 Нравится",
        "browse_skip": "👎 Пропустить",

        # Book conditions
        "condition_new": "📘 Новая",
        "condition_good": "👍 Хорошая",
        "condition_fair": "👌 Средняя",
        "condition_poor": "😕 Плохая",
        "condition_unknown": "Не указано",

        # Yes/No
        "yes": "✅ Да",
        "no": "❌ Нет",

        # Book management
        "delete_book_button": "❌ Книга %d: %s",
        "delete_confirm": "✅ Да, удалить",
        "delete_reject": "❌ Нет, оставить",

        # Status
        "status_active": "активен",
        "status_inactive": "неактивен",
        "status_updated": "Ваш статус обновлен: %s %s",
        "status_visible": "Ваши книги теперь видны другим пользователям.",
        "status_hidden": "Ваши книги теперь скрыты от других пользователей.",

        # Messages
        "welcome_message": "Добро пожаловать в Book Exchange! 📚\n\nПожалуйста, выберите язык:",
        "language_selected": "Язык установлен на русский. Вы можете изменить его в любое время из главного меню.",
        "language_selection": "Пожалуйста, выберите язык:",
        "main_menu": "Главное меню",
        "registration_start": "Давайте настроим ваш профиль. Добавьте свою первую книгу, отправив ее название.",
        "registration_author": "Отлично! Теперь, пожалуйста, отправьте имя автора.",
        "registration_condition": "Спасибо! Как бы вы оценили состояние книги?\nВыберите один из вариантов ниже:",
        "registration_invalid_condition": "Пожалуйста, выберите один из предложенных вариантов:",
        "registration_cancelled": "Регистрация отменена. Вы можете начать заново в любое время.",
        "registration_add_another": "Книга добавлена! Хотите добавить еще одну книгу? Вы можете добавить еще %d книг(и).",
        "registration_next_title": "Хорошо! Отправьте название следующей книги.",
        "registration_complete": "Отлично! Ваш профиль настроен. 🎉\n\nИспользуйте меню ниже для навигации:",
        "empty_input": "Пожалуйста, отправьте непустой текст.",
        "input_too_long": "Слишком длинный текст. Пожалуйста, не более %d символов.",

        "profile_details": "Профиль:\nИмя: %s\nСтатус: %s %s",
        "profile_no_books": "У вас еще нет книг! Добавьте книги, чтобы начать обмен.",
        "profile_books_header": "Ваши книги:",
        "profile_books_remaining": "Вы можете добавить еще %d книг(и).",
        "profile_select_option": "Выберите опцию ниже:",

        "book_management": "📚 Управление книгами",
        "book_select_remove": "Выберите книгу для удаления или добавьте новую книгу:",
        "book_item": "📚 Книга %d:\nНазвание: %s\nАвтор: %s\nСостояние: %s",
        "book_deletion_confirm": "Вы уверены, что хотите удалить эту книгу?\n\nНазвание: %s\nАвтор: %s",
        "book_deleted": 'Книга "%s" была удалена.',
        "book_add_title": "Давайте добавим новую книгу! Пожалуйста, отправьте название.",
        "book_add_cancelled": "Добавление книги отменено.",
        "book_add_success": "📚 Книга успешно добавлена!\n\nЧто бы вы хотели сделать дальше?",
        "book_limit_reached": "Вы можете иметь не более %d книг одновременно. Пожалуйста, удалите книгу.",

        "browse_no_books": "Вам нужно добавить хотя бы одну книгу, прежде чем вы сможете просматривать! Используйте кнопку 📕 Добавить книгу.",
        "browse_no_more_books": "Сейчас нет доступных книг. Проверьте позже! 📚",
        "browse_cancelled": "Просмотр отменен.",
        "browse_liked": "👍 Вам понравилась эта книга!",
        "browse_skipped": "👎 Книга пропущена.",
        "browse_session_expired": "Сессия истекла. Пожалуйста, начните просмотр снова.",
        "browse_user_header": "Книги от %s:",
        "browse_book_item": "📚 Книга %d:\nНазвание: %s\nАвтор: %s\nСостояние: %s",
        "browse_question": "Что вы думаете об этих книгах?",

        "contact_no_username": "этот пользователь (у него нет имени пользователя)",
        "match_notification_all_books": "Совпадение! 🎉\n\nВам и %s понравились книги друг друга!\n\n%s\nВы можете связаться с %s напрямую через Telegram, чтобы договориться об обмене книгами.",
        "match_notification_other_all_books": "🎉 Совпадение по книге! 🎉\n\nУ вас совпадение с %s!\n\nИм нравятся ваши книги, а вам нравятся их книги:\n\n%s\nТеперь вы можете связаться с %s напрямую через Telegram, чтобы договориться об обмене книгами.",

        "matches_header": "Ваши совпадения 🤝",
        "matches_item": "Совпадение #%d:\nПользователь: %s\nКниги:\n%s\nКонтакт: %s",
        "matches_footer": "Начните разговор, чтобы договориться об обмене!",
        "matches_none": "У вас пока нет совпадений. 🤔\nИспользуйте 📚 Искать книги, чтобы найти новые книги!",

        "help_text": (
            "📚 Book Exchange Bot - Руководство\n\n"
            "Добро пожаловать в Book Exchange! Используйте меню клавиатуры ниже для навигации:\n\n"
            "📚 Искать книги - Находите и отмечайте понравившиеся книги\n"
            "📋 Мой профиль - Управляйте профилем, статусом и книгами\n"
            "🔄 Мои совпадения - Все ваши совпадения\n"
            "ℹ️ Помощь - Показать это сообщение\n"
            "🌐 Язык - Изменить язык\n\n"
            "💡 Процесс обмена книгами:\n"
            "• Добавьте до 3 книг в свой профиль\n"
            "• Просматривайте книги других пользователей и отмечайте понравившиеся\n"
            "• Когда вам и другому пользователю понравились книги друг друга, это совпадение!\n"
            "• Свяжитесь с ним напрямую через Telegram, чтобы договориться об обмене\n\n"
            "Приятного обмена книгами! 📖"
        ),

        "rate_limited": "Пожалуйста, подождите немного перед следующими запросами.",
        "error_generic": "Извините, что-то пошло не так. Пожалуйста, попробуйте позже.",
        "error_not_registered": "Пожалуйста, используйте /start для регистрации!",
        "error_invalid_input": "Неверный ввод. Пожалуйста, попробуйте снова.",
        "error_book_not_found": "Книга не найдена. Пожалуйста, попробуйте снова.",
        "error_user_not_found": "Пользователь не найден. Пожалуйста, используйте /start для регистрации.",
    },
}

_PLACEHOLDER = re.compile(r"%[sdf]")


def normalize_language(lang_code: str | None) -> str:
    """Return a supported language code, falling back to the default."""
    if lang_code in TRANSLATIONS:
        return lang_code
    return DEFAULT_LANGUAGE


def t(key: str, lang_code: str | None = DEFAULT_LANGUAGE, *args) -> str:
    """
    Get a translation string for the given language.

    Falls back to English and then to the key itself. Positional args replace
    %s/%d/%f placeholders in order; missing args leave the placeholder intact.
    """
    lang_code = normalize_language(lang_code)
    text = TRANSLATIONS[lang_code].get(key) or TRANSLATIONS[DEFAULT_LANGUAGE].get(key)
    if text is None:
        logger.warning(f"Missing translation key '{key}' for language '{lang_code}'")
        return key

    if not args:
        return text

    remaining = list(args)

    def substitute(match: re.Match) -> str:
        if not remaining:
            return match.group(0)
        return str(remaining.pop(0))

    return _PLACEHOLDER.sub(substitute, text)


def format_condition(condition: str | None, lang_code: str | None = DEFAULT_LANGUAGE) -> str:
    """Format a canonical condition value with its localized label."""
    if not condition:
        return t("condition_unknown", lang_code)
    lang_code = normalize_language(lang_code)
    return TRANSLATIONS[lang_code].get(f"condition_{condition.lower()}", condition)


def labels_for(key: str) -> set[str]:
    """All localized variants of a label, used to recognise button presses in any language."""
    return {texts[key] for texts in TRANSLATIONS.values() if key in texts}


def language_code_for(display_name: str) -> str | None:
    """Find a language code by its display name."""
    for code, name in AVAILABLE_LANGUAGES.items():
        if name == display_name:
            return code
    return None
