from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, WebAppInfo

from drawyourmeme.config import Settings

# Callback data values
GALLERY = "gallery"
STATS = "stats"
HELP = "help"
MENU = "menu"


def _play_button(settings: Settings, text: str = "🎮 Play DrawYourMeme") -> InlineKeyboardButton:
    return InlineKeyboardButton(text=text, web_app=WebAppInfo(url=settings.webapp_url))


def _back_button() -> InlineKeyboardButton:
    return InlineKeyboardButton(text="🔙 Back to Menu", callback_data=MENU)


def main_menu(settings: Settings) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_play_button(settings)],
        [InlineKeyboardButton(text="💎 Buy $DRAWYOURMEME Token", url=settings.project_token_url)],
        [
            InlineKeyboardButton(text="🖼️ Gallery", callback_data=GALLERY),
            InlineKeyboardButton(text="📊 Stats", callback_data=STATS),
        ],
        [
            InlineKeyboardButton(text="❓ Help", callback_data=HELP),
            InlineKeyboardButton(text="📢 Channel", url=settings.channel_url),
        ],
    ])


def gallery_menu(settings: Settings) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_play_button(settings, "🎮 Create Your Token")],
        [_back_button()],
    ])


def stats_menu(settings: Settings) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_play_button(settings, "🎮 Launch Your Token")],
        [_back_button()],
    ])


def help_menu(settings: Settings) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_play_button(settings, "🎮 Start Creating")],
        [_back_button()],
    ])


def fallback_menu(settings: Settings) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_play_button(settings)],
        [InlineKeyboardButton(text="/start - Show Main Menu", callback_data=MENU)],
    ])
