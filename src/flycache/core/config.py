# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Type-safe configuration with YAML/TOML files, env vars, and dataclass binding."""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
import types
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from flycache.kernel.exceptions import ConfigurationException

T = TypeVar("T")

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")

_CONFIG_PROPERTIES_ATTR = "__flycache_config_prefix__"

_ENV_PREFIX = "FLYCACHE_"

_MAX_PLACEHOLDER_DEPTH = 10


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a class as bindable to a configuration prefix.

    Works with both dataclasses and Pydantic BaseModel subclasses.

    Usage:
        @config_properties(prefix="flycache.cache.redis")
        @dataclass
        class RedisProperties:
            host: str = "localhost:6379"
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


def env_key(key: str) -> str:
    """Environment variable overriding *key*: ``flycache.cache.default_ttl`` -> ``FLYCACHE_CACHE_DEFAULT_TTL``."""
    base = key.removeprefix("flycache.")
    return _ENV_PREFIX + base.upper().replace(".", "_").replace("-", "_")


class Config:
    """Hierarchical configuration with dot-notation access and env var overrides.

    Priority (highest wins):
    1. Environment variables (FLYCACHE_SECTION_KEY format)
    2. Profile overlays, then flycache.yaml / flycache.toml
    3. Packaged defaults (flycache-defaults.yaml)
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """List of config file paths that were loaded, in merge order."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    @classmethod
    def from_sources(
        cls,
        base_dir: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Load and merge config from the packaged defaults and *base_dir*.

        Merge order (later wins):
        1. Packaged defaults (flycache-defaults.yaml)
        2. flycache.yaml or flycache.toml
        3. Profile overlays: flycache-{profile}.yaml / .toml
        4. Environment variables (handled at read time in get())
        """
        base_dir = Path(base_dir)
        data: dict[str, Any] = {}
        sources: list[str] = []

        if load_defaults:
            data = cls._load_defaults()
            sources.append("flycache-defaults.yaml (defaults)")

        for stem, label in [("flycache", None)] + [(f"flycache-{p}", p) for p in active_profiles or []]:
            for ext in (".yaml", ".toml"):
                candidate = base_dir / f"{stem}{ext}"
                if candidate.is_file():
                    data = cls._deep_merge(data, cls._load_config_data(candidate))
                    sources.append(str(candidate) if label is None else f"{candidate} (profile: {label})")

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @classmethod
    def from_file(cls, path: str | Path, load_defaults: bool = True) -> Config:
        """Load a single YAML or TOML file on top of the packaged defaults.

        A missing file is not an error: only the defaults are loaded.
        """
        path = Path(path)
        data = cls._load_defaults() if load_defaults else {}
        sources = ["flycache-defaults.yaml (defaults)"] if load_defaults else []
        if path.is_file():
            data = cls._deep_merge(data, cls._load_config_data(path))
            sources.append(str(path))

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @staticmethod
    def _load_config_data(path: Path) -> dict[str, Any]:
        try:
            if path.suffix == ".toml":
                with open(path, "rb") as f:
                    return tomllib.load(f) or {}
            with open(path) as f:
                return yaml.safe_load(f) or {}
        except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationException(
                f"Cannot parse configuration file {path}: {exc}", context={"path": str(path)}
            ) from exc

    @staticmethod
    def _load_defaults() -> dict[str, Any]:
        defaults_file = importlib.resources.files("flycache.resources").joinpath("flycache-defaults.yaml")
        with importlib.resources.as_file(defaults_file) as p, open(p) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge override into base, with override values winning."""
        merged = dict(base)
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _lookup(self, key: str) -> Any:
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None
        return current

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, checking env vars first.

        String values containing ``${...}`` placeholders are resolved:
        - ``${ENV_VAR}`` from environment variables
        - ``${config.key}`` from other config values
        - ``${key:default}`` falls back to ``default``
        """
        env_val = os.environ.get(env_key(key))
        if env_val is not None:
            return env_val

        current = self._lookup(key)
        if current is None:
            return default

        if isinstance(current, str) and "${" in current:
            return self._resolve_placeholders(current)

        return current

    def _resolve_placeholders(self, value: str, _depth: int = 0) -> str:
        if _depth > _MAX_PLACEHOLDER_DEPTH:
            raise ConfigurationException(
                f"Max recursion depth exceeded resolving placeholders in '{value}'. Check for circular references.",
                context={"value": value},
            )

        def _replace(match: re.Match[str]) -> str:
            inner = match.group(1)
            ref_key, sep, default_val = inner.partition(":")

            env_val = os.environ.get(ref_key)
            if env_val is not None:
                return env_val

            current = self._lookup(ref_key)
            if current is not None:
                resolved = str(current)
                if "${" in resolved:
                    resolved = self._resolve_placeholders(resolved, _depth + 1)
                return resolved

            if sep:
                return default_val

            raise ConfigurationException(
                f"Cannot resolve placeholder '${{{inner}}}': not found in environment or config",
                context={"placeholder": inner},
            )

        return _PLACEHOLDER_RE.sub(_replace, value)

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Get all values under a prefix as a dict."""
        current = self._lookup(prefix)
        return current if isinstance(current, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Bind configuration to a @config_properties dataclass or Pydantic model.

        Each field is read through :meth:`get`, so environment overrides and
        placeholders apply to bound values too.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(
                f"{config_cls.__name__} is not decorated with @config_properties",
                context={"class": config_cls.__name__},
            )

        if isinstance(config_cls, type) and issubclass(config_cls, BaseModel):
            section = self._collect(prefix, list(config_cls.model_fields))
            try:
                return config_cls.model_validate(section)  # type: ignore[return-value]
            except ValidationError as exc:
                raise ConfigurationException(
                    f"Configuration validation failed for '{config_cls.__name__}' (prefix='{prefix}'):\n{exc}",
                    context={"prefix": prefix},
                ) from exc

        if not dataclasses.is_dataclass(config_cls):
            raise ConfigurationException(
                f"{config_cls.__name__} must be a dataclass or a pydantic model",
                context={"class": config_cls.__name__},
            )

        hints = get_type_hints(config_cls)
        section = self._collect(prefix, [f.name for f in dataclasses.fields(config_cls)])
        kwargs: dict[str, Any] = {}
        for name, value in section.items():
            try:
                kwargs[name] = _coerce(value, hints.get(name))
            except ValueError as exc:
                raise ConfigurationException(
                    f"Invalid value for '{prefix}.{name}': {value!r}",
                    context={"prefix": prefix, "field": name},
                ) from exc

        return config_cls(**kwargs)

    def _collect(self, prefix: str, names: list[str]) -> dict[str, Any]:
        section: dict[str, Any] = {}
        for name in names:
            value = self.get(f"{prefix}.{name}")
            if value is not None:
                section[name] = value
        return section


def _coerce(value: Any, expected: Any) -> Any:
    """Convert env-var strings to the field's scalar type."""
    if not isinstance(value, str):
        return value
    if get_origin(expected) in (Union, types.UnionType):
        candidates = [arg for arg in get_args(expected) if arg is not type(None)]
        if len(candidates) == 1:
            expected = candidates[0]
    if expected is bool:
        return value.lower() in ("true", "1", "yes")
    if expected is int:
        return int(value)
    if expected is float:
        return float(value)
    return value
