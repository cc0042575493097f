"""Application settings loaded from the environment.

Every setting has a BOOKKEEP_* environment variable; CLI options override
them (see bookkeep.cli.main).
"""

import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from bookkeep.domain.dedup import DedupScope
from bookkeep.domain.errors import ConfigurationError

ENV_DB_PATH = "BOOKKEEP_DB_PATH"
ENV_STORAGE_ROOT = "BOOKKEEP_STORAGE_ROOT"
ENV_DEDUP_SCOPE = "BOOKKEEP_DEDUP_SCOPE"
ENV_EMPTY_IMPORT_POLICY = "BOOKKEEP_EMPTY_IMPORT_POLICY"
ENV_LOG_LEVEL = "BOOKKEEP_LOG_LEVEL"
ENV_LOG_JSON = "BOOKKEEP_LOG_JSON"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EmptyImportPolicy(str, Enum):
    """Final statement status when nothing was inserted but rows failed."""

    # Zero inserted rows is still a successful parse
    PARSED = "parsed"
    # Row errors with nothing inserted or recognised as duplicate fail the run
    ERROR = "error"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration."""

    database_path: str
    storage_root: str
    dedup_scope: DedupScope = DedupScope.ACCOUNT
    empty_import_policy: EmptyImportPolicy = EmptyImportPolicy.PARSED
    log_level: str = "INFO"
    log_json: bool = False

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def default_home() -> Path:
    return Path.home() / ".bookkeep"


def default_database_path(environ: Optional[Mapping[str, str]] = None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get(ENV_DB_PATH) or str(default_home() / "bookkeep.db")


def default_storage_root(environ: Optional[Mapping[str, str]] = None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get(ENV_STORAGE_ROOT) or str(default_home() / "statements")


def parse_choice(enum_cls, value: str, setting: str):
    """Convert a setting string into an enum member or raise ConfigurationError."""
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"Invalid {setting} '{value}'. Must be one of: {choices}")


def parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid log level '{value}'. Must be one of: {', '.join(LOG_LEVELS)}"
        )
    return level


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables.

    Raises:
        ConfigurationError: If a variable holds an unsupported value
    """
    environ = os.environ if environ is None else environ

    settings = Settings(
        database_path=default_database_path(environ),
        storage_root=default_storage_root(environ),
    )

    overrides = {}
    if environ.get(ENV_DEDUP_SCOPE):
        overrides["dedup_scope"] = parse_choice(
            DedupScope, environ[ENV_DEDUP_SCOPE], "dedup scope"
        )
    if environ.get(ENV_EMPTY_IMPORT_POLICY):
        overrides["empty_import_policy"] = parse_choice(
            EmptyImportPolicy, environ[ENV_EMPTY_IMPORT_POLICY], "empty import policy"
        )
    if environ.get(ENV_LOG_LEVEL):
        overrides["log_level"] = parse_log_level(environ[ENV_LOG_LEVEL])
    if environ.get(ENV_LOG_JSON):
        overrides["log_json"] = _parse_bool(environ[ENV_LOG_JSON])

    return settings.with_overrides(**overrides)
