"""
FastAPI dependencies.

Route handlers reach the process-wide registry, settings and image store
through app.state, which create_app populates.
"""

from fastapi import Request

from drawyourmeme.artifacts.storage import ImageStore
from drawyourmeme.config import Settings
from drawyourmeme.registry.storage import Registry


def get_registry(request: Request) -> Registry:
    return request.app.state.registry


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store
