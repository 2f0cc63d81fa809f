"""Expose dependency helpers for FastAPI routers."""

from .clients import AppContext, build_app_context, build_store, get_app_context
from .config import (
    ProjectIdDependency,
    get_app_settings,
    require_project_id,
)

__all__ = [
    "AppContext",
    "ProjectIdDependency",
    "build_app_context",
    "build_store",
    "get_app_context",
    "get_app_settings",
    "require_project_id",
]
