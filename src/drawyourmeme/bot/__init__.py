"""
DrawYourMeme Telegram bot.

Menu, gallery and stats screens backed by the shared registry.
"""

from drawyourmeme.bot.handlers import BotHandlers, create_dispatcher, create_router, run_polling

__all__ = [
    "BotHandlers",
    "create_dispatcher",
    "create_router",
    "run_polling",
]
