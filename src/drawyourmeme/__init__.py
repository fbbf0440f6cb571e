"""
DrawYourMeme - draw a meme, name it, launch it as a token.

An in-memory registry of users, launched tokens and votes, served over a
FastAPI HTTP API and a Telegram bot.
"""

__version__ = "0.1.0"

# API module is available but not exported by default
# Import explicitly: from drawyourmeme.api import create_app

__all__ = []
