"""
Configuration management for Bunny Upload.

Options come from three places, highest priority first:
- Explicit values (CLI flags or keyword arguments)
- Environment variables (BUNNY_STORAGE_ZONE_NAME, BUNNY_ACCESS_KEY, BUNNY_STORAGE_REGION)
- An optional .env file, loaded into the environment without overriding it
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from .exceptions import ConfigError

CLEAN_NONE = "none"
CLEAN_SIMPLE = "simple"
CLEAN_AVOID_DELETES = "avoid-deletes"
CLEAN_MODES = (CLEAN_NONE, CLEAN_SIMPLE, CLEAN_AVOID_DELETES)

DEFAULT_MAX_CONCURRENT_UPLOADS = 10

ENV_ZONE = "BUNNY_STORAGE_ZONE_NAME"
ENV_ACCESS_KEY = "BUNNY_ACCESS_KEY"
ENV_REGION = "BUNNY_STORAGE_REGION"


def normalize_clean_mode(value: Union[str, bool, None]) -> str:
    """
    Map a clean mode value onto one of CLEAN_MODES.

    The legacy boolean form maps True -> "simple" and False -> "none".
    """
    if value is None or value is False or value == "":
        return CLEAN_NONE
    if value is True:
        return CLEAN_SIMPLE
    if isinstance(value, str):
        mode = value.strip().lower()
        if mode in CLEAN_MODES:
            return mode
    raise ConfigError(
        f'Invalid clean mode "{value}". Use "{CLEAN_NONE}", "{CLEAN_SIMPLE}" or "{CLEAN_AVOID_DELETES}".'
    )


@dataclass
class UploadOptions:
    """Options shared by every storage operation."""
    storage_zone_name: str
    access_key: str
    region: str = ""  # e.g. "la", "ny", "sg"; empty = default (Falkenstein) host
    clean_destination: Union[str, bool, None] = CLEAN_NONE
    max_concurrent_uploads: int = DEFAULT_MAX_CONCURRENT_UPLOADS
    include_hidden: bool = False  # upload dotfiles / dot-directories too
    timeout: Tuple[int, int] = (10, 120)  # (connect, read) seconds
    max_retries: int = 3

    @property
    def clean_mode(self) -> str:
        return normalize_clean_mode(self.clean_destination)

    def validate(self) -> "UploadOptions":
        """Raise ConfigError if the options can't drive a sync. Returns self."""
        if not self.storage_zone_name:
            raise ConfigError(f"Storage zone name is required (use --zone or {ENV_ZONE} env)")
        if not self.access_key:
            raise ConfigError(f"Access key is required (use --key or {ENV_ACCESS_KEY} env)")
        normalize_clean_mode(self.clean_destination)
        if (
            isinstance(self.max_concurrent_uploads, bool)
            or not isinstance(self.max_concurrent_uploads, int)
            or self.max_concurrent_uploads < 1
        ):
            raise ConfigError(
                f"max_concurrent_uploads must be a positive integer, got {self.max_concurrent_uploads!r}"
            )
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be at least 1, got {self.max_retries!r}")
        return self

    @classmethod
    def from_env(
        cls,
        storage_zone_name: Optional[str] = None,
        access_key: Optional[str] = None,
        region: Optional[str] = None,
        **kwargs,
    ) -> "UploadOptions":
        """Build options, falling back to environment variables for zone, key and region."""
        return cls(
            storage_zone_name=storage_zone_name or os.environ.get(ENV_ZONE, ""),
            access_key=access_key or os.environ.get(ENV_ACCESS_KEY, ""),
            region=region or os.environ.get(ENV_REGION, ""),
            **kwargs,
        )


def load_env_file(path: Path) -> int:
    """
    Load KEY=VALUE lines from a .env file into os.environ.

    Existing environment variables are left alone. Blank lines and
    comments are skipped; surrounding quotes on values are removed.

    Returns number of variables set.
    """
    if not path.exists():
        return 0

    loaded = 0
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export "):].strip()
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]
            if key and key not in os.environ:
                os.environ[key] = value
                loaded += 1
    return loaded
