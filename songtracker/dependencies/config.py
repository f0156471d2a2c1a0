"""Settings dependency shared by the routers."""

from typing import Annotated

from fastapi import Depends

from songtracker.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """Process-wide settings; tests swap them through ``dependency_overrides``."""
    return get_settings()


SettingsDep = Annotated[AppSettings, Depends(get_app_settings)]

__all__ = ["SettingsDep", "get_app_settings"]
