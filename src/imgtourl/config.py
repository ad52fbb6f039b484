"""Configuration management for imgtourl.

Handles loading, saving, and validating TOML configuration stored in:
- macOS: ~/.config/imgtourl/config.toml
- Linux: ~/.config/imgtourl/config.toml (XDG_CONFIG_HOME)
- Windows: %APPDATA%\\imgtourl\\config.toml

Credentials are only ever read from environment variables (or passed in
explicitly); they are never written to the config file.
"""

import logging
import math
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

import tomllib
import tomli_w

from imgtourl.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 2 * 1024 * 1024  # 2MB
DEFAULT_CACHE_CONTROL = "public, max-age=31536000"
DEFAULT_KEY_PREFIX = "images"

# Environment variables checked for each field, first non-empty value wins.
ENV_VARS: dict[str, tuple[str, ...]] = {
    "account_id": (
        "R2_ACCOUNT_ID",
        "IMGTOURL_ACCOUNT_ID",
        "IMAGETOURL_ACCOUNT_ID",
        "IMAGE2URL_ACCOUNT_ID",
    ),
    "access_key_id": (
        "R2_ACCESS_KEY_ID",
        "IMGTOURL_ACCESS_KEY_ID",
        "IMAGETOURL_ACCESS_KEY_ID",
        "IMAGE2URL_ACCESS_KEY_ID",
    ),
    "secret_access_key": (
        "R2_SECRET_ACCESS_KEY",
        "IMGTOURL_SECRET_ACCESS_KEY",
        "IMAGETOURL_SECRET_ACCESS_KEY",
        "IMAGE2URL_SECRET_ACCESS_KEY",
    ),
    "bucket": (
        "R2_BUCKET_NAME",
        "IMGTOURL_BUCKET",
        "IMAGETOURL_BUCKET",
        "IMAGE2URL_BUCKET",
    ),
    "public_url": (
        "R2_PUBLIC_URL",
        "IMGTOURL_PUBLIC_URL",
        "IMAGETOURL_PUBLIC_URL",
        "IMAGE2URL_PUBLIC_URL",
    ),
    "key_prefix": ("IMGTOURL_PREFIX", "IMAGETOURL_PREFIX", "IMAGE2URL_PREFIX"),
    "max_size_bytes": ("IMGTOURL_MAX_SIZE", "IMAGETOURL_MAX_SIZE", "IMAGE2URL_MAX_SIZE"),
    "cache_control": ("IMGTOURL_CACHE_CONTROL",),
    "endpoint_url": ("R2_ENDPOINT_URL", "IMGTOURL_ENDPOINT_URL"),
    "region": ("R2_REGION", "IMGTOURL_REGION"),
}

# Required fields in the order they are checked: (label, CLI flag).
REQUIRED_FIELDS: dict[str, tuple[str, str]] = {
    "account_id": ("account id", "account"),
    "access_key_id": ("access key", "access-key"),
    "secret_access_key": ("secret key", "secret-key"),
    "bucket": ("bucket name", "bucket"),
    "public_url": ("public URL", "public-url"),
}

SECRET_FIELDS = ("access_key_id", "secret_access_key")

# (table, key) in config.toml for every persisted field
_FILE_LAYOUT: dict[str, tuple[str, str]] = {
    "account_id": ("r2", "account_id"),
    "bucket": ("r2", "bucket"),
    "public_url": ("r2", "public_url"),
    "endpoint_url": ("r2", "endpoint_url"),
    "region": ("r2", "region"),
    "key_prefix": ("upload", "prefix"),
    "max_size_bytes": ("upload", "max_size"),
    "cache_control": ("upload", "cache_control"),
}


def parse_size(value: object) -> Optional[int]:
    """Parse a byte-size value.

    Accepts ints, floats and numeric strings (``"1048576"``, ``"1.5e6"``).

    Returns:
        The size as an int, or None if *value* is not a finite number
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def first_env(env: Mapping[str, str], names: tuple[str, ...]) -> Optional[str]:
    """Return the first non-empty value among *names* in *env*."""
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


@dataclass
class UploaderConfig:
    """Configuration for the R2 image uploader.

    Attributes:
        account_id: Cloudflare account ID (used to derive the R2 endpoint)
        access_key_id: R2 access key ID (env only)
        secret_access_key: R2 secret access key (env only)
        bucket: Target bucket name
        public_url: Public base URL the bucket is served from
        key_prefix: Prefix for generated object keys
        max_size_bytes: Largest payload accepted for upload
        cache_control: Cache-Control header stored on every object
        endpoint_url: Explicit S3 endpoint (overrides the derived R2 endpoint)
        region: S3 region (R2 uses "auto")
    """

    # Cloudflare R2
    account_id: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    bucket: str = ""
    public_url: str = ""
    endpoint_url: str = ""
    region: str = "auto"

    # Upload behaviour
    key_prefix: str = DEFAULT_KEY_PREFIX
    max_size_bytes: int = DEFAULT_MAX_SIZE
    cache_control: str = DEFAULT_CACHE_CONTROL

    @classmethod
    def load(
        cls, path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None
    ) -> "UploaderConfig":
        """Load configuration from TOML file, then apply environment overrides.

        Args:
            path: Path to config file (defaults to standard location)
            env: Environment mapping (defaults to ``os.environ``)

        Returns:
            UploaderConfig instance with loaded values

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        if path is None:
            path = get_config_path()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()
        config._apply_file(data)
        config._apply_env(os.environ if env is None else env)
        return config

    @classmethod
    def load_or_default(
        cls, path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None
    ) -> "UploaderConfig":
        """Load configuration, tolerating a missing default config file.

        An explicitly given *path* must exist; the default location may not.
        """
        if path is not None:
            return cls.load(path, env)

        default_path = get_config_path()
        if default_path.exists():
            return cls.load(default_path, env)
        return cls.from_env(env)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "UploaderConfig":
        """Build configuration from defaults plus environment variables only."""
        config = cls()
        config._apply_env(os.environ if env is None else env)
        return config

    def _apply_file(self, data: dict) -> None:
        for name, (table, key) in _FILE_LAYOUT.items():
            section = data.get(table)
            if not isinstance(section, dict) or key not in section:
                continue
            self._assign(name, section[key], source=f"{table}.{key}")

    def _apply_env(self, env: Mapping[str, str]) -> None:
        for name, names in ENV_VARS.items():
            value = first_env(env, names)
            if value:
                self._assign(name, value, source=" / ".join(names))

    def _assign(self, name: str, value: object, source: str) -> None:
        if name == "max_size_bytes":
            size = parse_size(value)
            if size is None:
                logger.warning(f"Ignoring invalid max size from {source}: {value!r}")
                return
            self.max_size_bytes = size
        else:
            setattr(self, name, str(value))

    def apply_overrides(self, **overrides: object) -> "UploaderConfig":
        """Apply explicit values (e.g. CLI flags), skipping None.

        Returns:
            self, for chaining
        """
        for name, value in overrides.items():
            if not hasattr(self, name):
                raise ValueError(f"Invalid config field: {name}")
            if value is None:
                continue
            self._assign(name, value, source=f"--{name.replace('_', '-')}")
        return self

    def validate(self) -> None:
        """Check that every required field is set.

        Raises:
            ConfigError: Naming the first missing field and where to set it
        """
        for name, (label, flag) in REQUIRED_FIELDS.items():
            if not getattr(self, name):
                raise ConfigError(
                    f"Missing {label}. Provide --{flag} or set {' / '.join(ENV_VARS[name])}."
                )

    def endpoint(self) -> str:
        """Return the S3 endpoint URL for this account."""
        if self.endpoint_url:
            return self.endpoint_url
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    def masked(self) -> dict[str, str]:
        """Return all fields as display strings with secrets masked."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in SECRET_FIELDS:
                result[f.name] = "****" if value else ""
            else:
                result[f.name] = str(value)
        return result

    def save(self, path: Optional[Path] = None) -> None:
        """Save configuration to TOML file.

        Secrets are not written.

        Args:
            path: Path to save config (defaults to standard location)
        """
        if path is None:
            path = get_config_path()

        # Ensure directory exists
        path.parent.mkdir(parents=True, exist_ok=True)

        data: dict[str, dict] = {"r2": {}, "upload": {}}
        for name, (table, key) in _FILE_LAYOUT.items():
            data[table][key] = getattr(self, name)

        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a configuration value by key.

        Accepts either the field name (``bucket``) or the file key in dot
        notation (``r2.bucket``, ``upload.max_size``).

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        name = _resolve_key(key)
        if name is None:
            return default
        return getattr(self, name)

    def set(self, key: str, value: str) -> None:
        """Set a configuration value by key.

        Args:
            key: Configuration key (field name or dot notation)
            value: Configuration value

        Raises:
            ValueError: If the key is unknown, secret, or the value is invalid
        """
        name = _resolve_key(key)
        if name is None:
            raise ValueError(f"Invalid config key: {key}")
        if name in SECRET_FIELDS:
            raise ValueError(
                f"{key} is a secret; set {' / '.join(ENV_VARS[name])} in the environment instead"
            )

        # Try to preserve type
        current = getattr(self, name)
        if isinstance(current, int):
            size = parse_size(value)
            if size is None:
                raise ValueError(f"Invalid number for {key}: {value}")
            setattr(self, name, size)
        else:
            setattr(self, name, value)


def _resolve_key(key: str) -> Optional[str]:
    names = {f.name for f in fields(UploaderConfig)}
    if key in names:
        return key
    for name, (table, file_key) in _FILE_LAYOUT.items():
        if key == f"{table}.{file_key}":
            return name
    return None


def get_config_dir() -> Path:
    """Get the platform-specific config directory.

    Returns:
        Path to the config directory for imgtourl.
    """
    if sys.platform == "darwin" or sys.platform == "linux":
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "imgtourl"
        return Path.home() / ".config" / "imgtourl"
    elif sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "imgtourl"
        return Path.home() / "AppData" / "Roaming" / "imgtourl"
    else:
        return Path.home() / ".config" / "imgtourl"


def get_config_path() -> Path:
    """Get the path to the config.toml file.

    Returns:
        Path to config.toml
    """
    return get_config_dir() / "config.toml"
