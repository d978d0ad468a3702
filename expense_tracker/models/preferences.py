"""User preference models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Theme(str, Enum):
    """Colour scheme preference."""
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class UserPreferences(BaseModel):
    """
    Per-user display preferences.

    Unknown keys in stored data are ignored so older or newer
    payloads still load.
    """
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO 4217 currency code used for display"
    )
    language: str = Field(default="en", min_length=2)
    theme: Theme = Theme.SYSTEM
    notifications: bool = True
    backup: bool = True


DEFAULT_USER_PREFERENCES = UserPreferences()
