"""Configuration management for cacheables.

Applications can keep the cache switches in a YAML (or TOML) file instead of
hard-coding them. :class:`CacheConfigManager` loads and validates such a file
with Pydantic and notifies registered callbacks on reload, which lets a live
:class:`~cacheables.Cacheables` instance pick up new flags via
:meth:`~cacheables.Cacheables.apply_settings`.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from cacheables.core.policy import CacheOnlyOptions, _BaseOptions, resolve_options
from cacheables.utils.errors import CachePolicyError, ConfigurationError
from cacheables.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("cacheables.yml")


class CacheSettings(BaseModel):
    """Root configuration schema."""

    enabled: bool = True
    log: bool = False
    log_timing: bool = False
    default_policy: Any = Field(
        default_factory=CacheOnlyOptions,
        description="Options used when a call passes none",
    )

    @field_validator("default_policy", mode="before")
    @classmethod
    def validate_default_policy(cls, value: Any) -> _BaseOptions:
        try:
            return resolve_options(value)
        except CachePolicyError as exc:
            raise ValueError(str(exc)) from exc


SettingsCallback = Callable[[CacheSettings], Awaitable[None]]


class CacheConfigManager:
    """Load cache settings from disk and fan out reloads.

    The path defaults to ``$CACHEABLES_CONFIG`` and then ``cacheables.yml`` in
    the working directory. When the default file does not exist the built-in
    defaults are used; an explicitly configured path must exist.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None) -> None:
        env_path = os.environ.get("CACHEABLES_CONFIG")
        self._explicit = config_path is not None or env_path is not None
        self.config_path = Path(config_path or env_path or DEFAULT_CONFIG_PATH)
        self._settings: Optional[CacheSettings] = None
        self._callbacks: List[SettingsCallback] = []
        self._lock = asyncio.Lock()

    async def load(self) -> CacheSettings:
        """Load configuration from disk and validate it."""

        async with self._lock:
            logger.debug("loading configuration", extra={"path": str(self.config_path)})
            if not self._explicit and not self.config_path.exists():
                settings = CacheSettings()
            else:
                data = self._read_file(self.config_path)
                try:
                    settings = CacheSettings(**data)
                except ValidationError as exc:
                    raise ConfigurationError(str(exc)) from exc
            self._settings = settings
            return settings

    async def reload(self) -> CacheSettings:
        """Reload configuration explicitly and notify callbacks."""

        settings = await self.load()
        await self._notify(settings)
        return settings

    def register_callback(self, callback: SettingsCallback) -> None:
        """Register a coroutine callback executed after reloads."""

        self._callbacks.append(callback)

    async def get_settings(self) -> CacheSettings:
        """Return the last loaded settings, loading them if necessary."""

        if self._settings is None:
            return await self.load()
        return self._settings

    async def _notify(self, settings: CacheSettings) -> None:
        for callback in self._callbacks:
            try:
                await callback(settings)
            except Exception as exc:
                logger.exception("configuration callback failed", exc_info=exc)

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ConfigurationError(f"Configuration file {path} does not exist")
        try:
            if path.suffix in {".yml", ".yaml"}:
                with path.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle) or {}
            elif path.suffix == ".toml":
                import tomllib

                with path.open("rb") as handle:
                    data = tomllib.load(handle)
            else:
                raise ConfigurationError(f"Unsupported configuration format: {path.suffix}")
        except (OSError, yaml.YAMLError, ValueError) as exc:
            raise ConfigurationError(f"Could not read {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration in {path} must be a mapping")
        return data.get("cacheables", data)


__all__ = [
    "CacheConfigManager",
    "CacheSettings",
    "DEFAULT_CONFIG_PATH",
    "SettingsCallback",
]
