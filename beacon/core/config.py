"""
Beacon: Configuration Management

Runtime settings for Beacon are read from the process environment, with
an optional ``.env`` file for local runs, and validated by a Pydantic
settings model. Engine thresholds live in
:class:`beacon.planning.config.AnalysisConfig`; this module only carries
what operators are expected to change per deployment.

Key responsibilities:
- Read and validate the environment-driven settings (logging, default
  monthly capacity, savings pool strategy, history window)
- Load ``.env`` files before the settings model is built
- Cache one settings instance per process

External dependencies:
- pydantic: Field validation and the nested logging model
- pydantic-settings: Mapping environment variables onto fields
- python-dotenv: Reading ``.env`` files into the environment

Thread safety: Thread-safe once loaded (settings are never mutated)

Author: Beacon Team
Created: 2025-11-24
Last Modified: 2025-12-02
Status: Development
Version: v0.1.0
"""

# ============================================================================
# Imports
# ============================================================================

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ============================================================================
# Settings Models
# ============================================================================

DEFAULT_ENV_FILE = Path(".env")


class LoggingConfig(BaseModel):
    """Logging section of the settings.

    Attributes:
        level: Level name understood by :mod:`logging`, such as "DEBUG".
        file: Log file path; an empty string means console only.
    """

    level: str = "INFO"
    file: str = "beacon.log"


class BeaconConfig(BaseSettings):
    """Deployment settings, one field per environment variable.

    ========================  ==========================================
    Variable                  Meaning
    ========================  ==========================================
    LOG_LEVEL                 Root and ``beacon`` logger level
    LOG_FILE                  Log file path, empty to disable
    ENVIRONMENT               development / staging / production
    DEFAULT_MONTHLY_CAPACITY  Capacity used when a caller passes none
    SAVINGS_POOL_STRATEGY     ``shared`` or ``earmarked``
    HISTORY_MONTHS            Months in the contribution history
    ========================  ==========================================
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: str = Field(default="beacon.log", alias="LOG_FILE")

    environment: str = Field(default="development", alias="ENVIRONMENT")

    default_monthly_capacity: float = Field(default=5000.0, alias="DEFAULT_MONTHLY_CAPACITY")
    savings_pool_strategy: Literal["shared", "earmarked"] = Field(
        default="shared", alias="SAVINGS_POOL_STRATEGY"
    )
    history_months: int = Field(default=6, ge=1, alias="HISTORY_MONTHS")

    @property
    def logging(self) -> LoggingConfig:
        return LoggingConfig(level=self.log_level, file=self.log_file)


# ============================================================================
# Public API
# ============================================================================


def load_config(env_file: Optional[Path] = None) -> BeaconConfig:
    """Build a fresh :class:`BeaconConfig`.

    Without ``env_file``, a ``.env`` in the working directory is read if
    it exists and never overrides variables that are already set. An
    explicit ``env_file`` must exist and its values win over the current
    environment.

    Raises:
        FileNotFoundError: ``env_file`` was given but is missing.
    """

    if env_file is None:
        if DEFAULT_ENV_FILE.exists():
            load_dotenv(DEFAULT_ENV_FILE)
        return BeaconConfig()  # type: ignore[call-arg]

    if not env_file.exists():
        raise FileNotFoundError(f"Environment file not found: {env_file}")
    load_dotenv(env_file, override=True)
    return BeaconConfig()  # type: ignore[call-arg]


_settings: Optional[BeaconConfig] = None


def get_config() -> BeaconConfig:
    """Return the process-wide settings, loading them on first use."""

    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings
