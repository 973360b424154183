"""
Runtime settings with environment variable support.

Settings select the profile and may override the identity fields of the
profile's ``agent`` section. Environment variables use the ``SKILLFORCE_``
prefix, e.g. ``SKILLFORCE_PROFILE=prod``.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class SkillforceSettings(BaseSettings):
    """Process-wide settings for the CLI and the API."""

    profile: str = Field(default="dev", description="Configuration profile name")
    config_dir: str = Field(default="configs", description="Directory holding profile YAML files")
    organization_id: Optional[str] = Field(default=None, description="Overrides agent.organization_id")
    user_id: Optional[str] = Field(default=None, description="Overrides agent.user_id")
    debug: bool = Field(default=False, description="Enable debug logging")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    model_config = {
        "env_file": ".env",
        "env_prefix": "SKILLFORCE_",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> SkillforceSettings:
    return SkillforceSettings()
