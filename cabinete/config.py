"""
Configuration management for the cabinete CLI tool.
"""

import os
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".cabinete.rc"
CONFIG_ENV_VAR = "CABINETE_CONFIG"


class GranularityPolicy(str, Enum):
    """How many date segments form the destination directory."""

    DAY = "day"
    # Default when no flag is given: year/month/day nesting.
    MONTH = "month"
    YEAR = "year"
    MONTH_WITHIN_YEAR = "month-within-year"

    @classmethod
    def from_flags(cls, year: bool, month: bool) -> Optional["GranularityPolicy"]:
        """Map the --year/--month command line flags to a policy.

        Returns None when neither flag is set so callers can fall back to the
        configured default.
        """
        if month:
            return cls.MONTH_WITHIN_YEAR
        if year:
            return cls.YEAR
        return None


class OrganizerConfig(BaseModel):
    """Main configuration for the organizer tool."""
    granularity: GranularityPolicy = Field(
        GranularityPolicy.MONTH,
        description="Policy used when no granularity flag is given"
    )
    exclude_patterns: List[str] = Field(
        default_factory=list,
        description="File name patterns that are never counted or moved"
    )
    skip_hidden: bool = Field(False, description="Ignore dot-files")
    refresh_per_second: float = Field(
        10.0,
        description="Maximum number of display redraws per second"
    )
    log_level: str = Field("warning", description="Default logging level")

    @field_validator("refresh_per_second")
    @classmethod
    def _positive_refresh(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("refresh_per_second must be greater than zero")
        return value

    @classmethod
    def resolve_path(cls, config_path: Optional[Path] = None) -> Path:
        """Pick the config file: explicit path, then $CABINETE_CONFIG, then ~/.cabinete.rc."""
        if config_path is not None:
            return config_path
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser()
        return DEFAULT_CONFIG_PATH

    @classmethod
    def load_config(cls, config_path: Optional[Path] = None) -> "OrganizerConfig":
        """Load configuration from file.

        A missing default file is not an error: the built-in defaults apply.
        A missing file that was asked for explicitly raises FileNotFoundError.
        """
        from .config_handler import load_config_file

        explicit = config_path is not None or bool(os.environ.get(CONFIG_ENV_VAR))
        path = cls.resolve_path(config_path)

        if not path.exists():
            if explicit:
                raise FileNotFoundError(
                    f"Configuration file not found at {path}. "
                    "Please run 'cabinete init' to create one."
                )
            return cls()

        return cls.model_validate(load_config_file(path))

    def save_config(self, config_path: Optional[Path] = None) -> Path:
        """Save configuration to file and return the path written."""
        from .config_handler import save_config_file

        path = self.resolve_path(config_path)
        save_config_file(path, self.model_dump(mode="json"))
        return path
