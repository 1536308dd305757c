"""Domain errors raised by the stores and caught by the conversation layer."""


class BookSwapError(Exception):
    """Base class for all bot domain errors."""


class UserNotFoundError(BookSwapError):
    def __init__(self, telegram_id: int):
        super().__init__(f"User {telegram_id} is not registered")
        self.telegram_id = telegram_id


class BookLimitError(BookSwapError):
    def __init__(self, telegram_id: int, limit: int):
        super().__init__(f"User {telegram_id} already has {limit} books")
        self.telegram_id = telegram_id
        self.limit = limit


class InvalidBookError(BookSwapError, ValueError):
    """Raised when a book is missing its title/author or has an unknown condition."""
