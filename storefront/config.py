"""
Config system - Layered typed configuration with validation.

Merge precedence (later overrides earlier):
config files (YAML/JSON) > .env file > environment variables > overrides
"""

from typing import Any, Dict, Optional, Type, get_origin, get_args
from dataclasses import dataclass, field, fields, is_dataclass, MISSING
from pathlib import Path
import glob
import json
import os
import types

import yaml
from dotenv import dotenv_values


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Environment keys use a prefix and double underscores for nesting:
    ``SF_PAYMENT__TIMEOUT=5`` becomes ``{"payment": {"timeout": "5"}}``.
    Environment values stay strings until a typed section is built; only
    fields that do not accept ``str`` are parsed.
    """

    def __init__(self, env_prefix: str = "SF_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "SF_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        use_environ: bool = True,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Args:
            paths: Config file paths (glob patterns supported, .yaml/.yml/.json)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)
            use_environ: Read os.environ (disabled in tests)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        if use_environ:
            loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from files matching pattern."""
        for path in sorted(glob.glob(pattern)):
            path = Path(path)
            if path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            elif path.suffix == ".json":
                self._load_json_file(path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
            self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            return
        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert SF_PAYMENT__TIMEOUT to nested dict."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def get_section(self, name: str, config_class: Type) -> Any:
        """
        Get and validate one top-level section as a dataclass.

        Args:
            name: Section key (e.g. "payment")
            config_class: Dataclass to instantiate and validate
        """
        data = self.get(name, {}) or {}
        if isinstance(data, str):
            data = self._parse_value(data)
        if not isinstance(data, dict):
            raise ConfigError(f"Config section '{name}' must be a mapping")
        return self._instantiate_dataclass(config_class, data)

    def _instantiate_dataclass(self, config_class: Type, data: dict):
        """Instantiate dataclass config with validation."""
        if not is_dataclass(config_class):
            raise ConfigError(f"{config_class.__name__} is not a dataclass")

        known = {f.name for f in fields(config_class)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(
                f"Unknown config field(s) for {config_class.__name__}: {', '.join(sorted(unknown))}"
            )

        kwargs = {}
        for field_info in fields(config_class):
            field_name = field_info.name
            field_type = field_info.type

            if field_name in data:
                value = data[field_name]
                if isinstance(value, str) and not self._check_type(value, field_type):
                    value = self._parse_value(value)
                if field_type is float and isinstance(value, int) and not isinstance(value, bool):
                    value = float(value)

                if not self._check_type(value, field_type):
                    raise ConfigError(
                        f"Config field '{field_name}' expected {field_type}, "
                        f"got {type(value).__name__}"
                    )

                kwargs[field_name] = value
            elif field_info.default is not MISSING:
                kwargs[field_name] = field_info.default
            elif field_info.default_factory is not MISSING:
                kwargs[field_name] = field_info.default_factory()
            else:
                raise ConfigError(
                    f"Required config field '{field_name}' not provided"
                )

        return config_class(**kwargs)

    def _check_type(self, value: Any, expected_type: Type) -> bool:
        """Basic type checking."""
        origin = get_origin(expected_type)
        if origin is types.UnionType or str(origin) == "typing.Union":
            if value is None:
                return True
            args = [a for a in get_args(expected_type) if a is not type(None)]
            return any(self._check_type(value, a) for a in args)

        if origin:
            return isinstance(value, origin)

        # bool is an int subclass; keep them apart
        if expected_type is int and isinstance(value, bool):
            return False

        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True


# ============================================================================
# Typed settings
# ============================================================================

@dataclass
class PaymentSettings:
    """Payment gateway settings."""
    api_key: Optional[str] = None
    currency: str = "usd"
    timeout: float = 10.0
    api_version: Optional[str] = "2023-10-16"


@dataclass
class MailSettings:
    """Notification mail settings."""
    enabled: bool = True
    provider: str = "console"
    default_from: str = "orders@localhost"
    subject_prefix: str = ""
    host: str = "localhost"
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    timeout: float = 10.0


@dataclass
class OrderSettings:
    """Order lifecycle policy switches."""
    rollback_stock_on_payment_failure: bool = True
    require_paid_for_delivery: bool = False


@dataclass
class Settings:
    payment: PaymentSettings = field(default_factory=PaymentSettings)
    mail: MailSettings = field(default_factory=MailSettings)
    orders: OrderSettings = field(default_factory=OrderSettings)

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> "Settings":
        settings = cls(
            payment=loader.get_section("payment", PaymentSettings),
            mail=loader.get_section("mail", MailSettings),
            orders=loader.get_section("orders", OrderSettings),
        )
        if settings.payment.timeout <= 0:
            raise ConfigError("payment.timeout must be positive")
        if settings.mail.timeout <= 0:
            raise ConfigError("mail.timeout must be positive")
        if settings.mail.provider not in ("console", "smtp"):
            raise ConfigError(f"Unknown mail provider: {settings.mail.provider!r}")
        return settings
