"""
FastAPI dependency utilities for injecting configuration.
"""

from fastapi import Depends

from chattranslator.core.config import AppSettings
from chattranslator.core.errors import ConfigurationError
from chattranslator.dependencies.clients import AppContext, get_app_context


def get_app_settings(context: AppContext = Depends(get_app_context)) -> AppSettings:
    """FastAPI dependency returning the settings the context was built with."""
    return context.settings


def require_project_id(settings: AppSettings = Depends(get_app_settings)) -> str:
    """Fail the request as a server error when ``PROJECT_ID`` is unset."""
    if not settings.google.project_id:
        raise ConfigurationError("PROJECT_ID not provided")
    return settings.google.project_id


ProjectIdDependency = Depends(require_project_id)

__all__ = [
    "ProjectIdDependency",
    "get_app_settings",
    "require_project_id",
]
