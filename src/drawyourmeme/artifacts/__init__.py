"""
DrawYourMeme Artifacts Module.

Stores uploaded token images.
"""

__all__ = [
    "ImageStore",
    "PUBLIC_PREFIX",
]

from drawyourmeme.artifacts.storage import PUBLIC_PREFIX, ImageStore
