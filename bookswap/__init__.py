"""BookSwap - a Telegram bot that connects people who want to swap books."""

__version__ = "0.1.0"
