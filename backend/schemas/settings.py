from typing import Optional

from pydantic import BaseModel, field_validator

_THEMES = ("light", "dark", "system")


class AppSettings(BaseModel):
    theme: str = "system"
    prefer_sharps_global: bool = True

    @field_validator("theme")
    @classmethod
    def theme_must_be_known(cls, v: str) -> str:
        if v not in _THEMES:
            raise ValueError(f"theme must be one of {', '.join(_THEMES)}")
        return v


class SettingsUpdateRequest(BaseModel):
    theme: Optional[str] = None
    prefer_sharps_global: Optional[bool] = None

    @field_validator("theme")
    @classmethod
    def theme_must_be_known(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in _THEMES:
            raise ValueError(f"theme must be one of {', '.join(_THEMES)}")
        return v
