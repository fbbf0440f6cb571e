"""
Telegram bot handlers.

The bot reads the same registry instance as the HTTP API. Its only write
is refreshing a linked user's Telegram username on /start.
"""

import logging

from aiogram import Bot, Dispatcher, Router
from aiogram.enums import ParseMode
from aiogram.filters import CommandStart
from aiogram.types import CallbackQuery, Message

from drawyourmeme.bot import keyboards, messages
from drawyourmeme.config import Settings
from drawyourmeme.core.exceptions import DrawYourMemeError, format_exception
from drawyourmeme.registry.storage import Registry

logger = logging.getLogger(__name__)


class BotHandlers:
    """Message and callback handlers bound to a registry."""

    def __init__(self, registry: Registry, settings: Settings):
        self._registry = registry
        self._settings = settings

    async def on_start(self, message: Message) -> None:
        """Greet the user and show the main menu."""
        sender = message.from_user
        telegram_id = str(sender.id) if sender else None
        username = sender.username if sender else None
        logger.info(f"User {telegram_id} started the bot")

        try:
            user = self._registry.find_user_by_telegram_id(telegram_id) if telegram_id else None

            await message.answer(
                messages.welcome_text(user),
                reply_markup=keyboards.main_menu(self._settings),
                parse_mode=ParseMode.HTML,
            )

            if user and username and username != user.telegram_username:
                self._registry.update_user(user.id, telegram_username=username)
        except Exception as e:
            logger.error(f"Error handling /start: {format_exception(e)}", exc_info=True)
            await message.answer(messages.ERROR_TEXT)

    async def on_callback(self, query: CallbackQuery) -> None:
        """Route inline keyboard presses."""
        if query.message is None:
            await query.answer()
            return

        try:
            await query.answer()

            match query.data:
                case keyboards.GALLERY:
                    await self._send_gallery(query.message)
                case keyboards.STATS:
                    await self._send_stats(query.message)
                case keyboards.HELP:
                    await query.message.answer(
                        messages.HELP_TEXT,
                        reply_markup=keyboards.help_menu(self._settings),
                        parse_mode=ParseMode.HTML,
                    )
                case keyboards.MENU:
                    await query.message.answer(
                        messages.MENU_TEXT,
                        reply_markup=keyboards.main_menu(self._settings),
                        parse_mode=ParseMode.HTML,
                    )
                case _:
                    await query.message.answer(messages.UNKNOWN_ACTION_TEXT)
        except Exception as e:
            logger.error(f"Error handling callback query: {format_exception(e)}", exc_info=True)
            await query.message.answer(messages.ERROR_TEXT)

    async def on_text(self, message: Message) -> None:
        """Point stray messages back at the menu."""
        if message.text and message.text.startswith("/"):
            return

        await message.answer(
            messages.FALLBACK_TEXT,
            reply_markup=keyboards.fallback_menu(self._settings),
        )

    async def _send_gallery(self, message: Message) -> None:
        try:
            tokens = self._registry.list_recent_tokens(messages.GALLERY_SIZE)
        except DrawYourMemeError as e:
            logger.error(f"Error loading gallery: {e}")
            await message.answer(messages.GALLERY_ERROR_TEXT)
            return

        await message.answer(
            messages.gallery_text(tokens),
            reply_markup=keyboards.gallery_menu(self._settings),
            parse_mode=ParseMode.HTML,
        )

    async def _send_stats(self, message: Message) -> None:
        try:
            stats = self._registry.stats()
        except DrawYourMemeError as e:
            logger.error(f"Error loading stats: {e}")
            await message.answer(messages.STATS_ERROR_TEXT)
            return

        await message.answer(
            messages.stats_text(stats),
            reply_markup=keyboards.stats_menu(self._settings),
            parse_mode=ParseMode.HTML,
        )


def create_router(registry: Registry, settings: Settings) -> Router:
    """Build the bot router with handlers bound to the registry."""
    handlers = BotHandlers(registry, settings)
    router = Router(name="drawyourmeme")
    router.message.register(handlers.on_start, CommandStart())
    router.callback_query.register(handlers.on_callback)
    router.message.register(handlers.on_text)
    return router


def create_dispatcher(registry: Registry, settings: Settings) -> Dispatcher:
    dp = Dispatcher()
    dp.include_router(create_router(registry, settings))
    return dp


async def run_polling(registry: Registry, settings: Settings) -> None:
    """Poll Telegram until cancelled."""
    if not settings.telegram_bot_token:
        raise ValueError("telegram_bot_token is not configured")

    bot = Bot(settings.telegram_bot_token)
    dp = create_dispatcher(registry, settings)
    logger.info("Telegram bot polling started")
    try:
        await dp.start_polling(bot, handle_signals=False)
    finally:
        logger.info("Telegram bot polling stopped")
