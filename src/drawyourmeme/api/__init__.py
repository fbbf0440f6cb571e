"""
DrawYourMeme API Module.

REST API for user registration, token launches, listings and votes.
"""

from drawyourmeme.api.app import create_app

__all__ = ["create_app"]
