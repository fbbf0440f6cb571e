"""
Bot message text.

Everything here renders HTML-parse-mode text from registry records and
has no Telegram dependency.
"""

from html import escape

from drawyourmeme.core.models import RegistryStats, Token, User

GALLERY_SIZE = 5

NEW_USER_WELCOME = (
    "Welcome to DrawYourMeme! 🎨\n\n"
    "The first meme token launchpad where you draw, name, and launch tokens instantly!\n\n"
    "🚀 No wallet connection required\n"
    "🎨 Just draw and create\n"
    "💰 Launch on PumpFun instantly"
)

HELP_TEXT = (
    "❓ <b>How to Use DrawYourMeme</b>\n\n"
    '1. 🎮 Click "Play DrawYourMeme" to open the app\n'
    "2. 🎨 Draw your meme on the 500x500 canvas\n"
    "3. 📝 Give it a name and ticker symbol\n"
    "4. 🚀 Launch your token instantly on PumpFun\n"
    "5. 📢 Share with friends and get votes!\n\n"
    "💡 <b>Tips:</b>\n"
    "• No wallet connection needed\n"
    "• Tokens deploy automatically\n"
    "• Each Solana address = 1 account\n"
    "• Vote on others' tokens in gallery\n\n"
    "Ready to create? 🎨"
)

MENU_TEXT = "🎨 <b>DrawYourMeme Menu</b>\n\nChoose an option below:"

FALLBACK_TEXT = "🎨 Welcome to DrawYourMeme!\n\nUse the menu below or type /start to begin:"

ERROR_TEXT = "❌ Something went wrong. Please try again later."
GALLERY_ERROR_TEXT = "❌ Error loading gallery. Please try again."
STATS_ERROR_TEXT = "❌ Error loading stats. Please try again."
UNKNOWN_ACTION_TEXT = "❌ Unknown action. Please try again."


def short_address(address: str) -> str:
    """ABCD...WXYZ form of a wallet address."""
    if len(address) <= 8:
        return address
    return f"{address[:4]}...{address[-4:]}"


def welcome_text(user: User | None) -> str:
    if user is None:
        return NEW_USER_WELCOME
    return (
        "Welcome back to DrawYourMeme! 🎨\n\n"
        f"Your account: {short_address(user.solana_address)}"
    )


def gallery_text(tokens: list[Token]) -> str:
    """Numbered list of tokens with votes and PumpFun links."""
    text = "🖼️ <b>Recent Meme Tokens</b>\n\n"
    if not tokens:
        return text + "No tokens created yet! Be the first to launch a meme token! 🚀"

    for index, token in enumerate(tokens, start=1):
        text += f"{index}. <b>{escape(token.name)}</b> ({escape(token.ticker)})\n"
        text += f"   💎 {token.votes} votes\n"
        if token.pumpfun_link:
            text += f'   🔗 <a href="{escape(token.pumpfun_link, quote=True)}">View on PumpFun</a>\n'
        text += "\n"
    return text


def stats_text(stats: RegistryStats) -> str:
    top = stats.top_token
    top_line = f"{escape(top.name)} ({top.votes} votes)" if top else "None yet"
    return (
        "📊 <b>DrawYourMeme Stats</b>\n\n"
        f"🚀 Total Tokens Launched: {stats.total_tokens}\n"
        f"💎 Total Votes: {stats.total_votes}\n"
        f"👑 Top Token: {top_line}\n\n"
        "Join the meme revolution! 🎨"
    )
