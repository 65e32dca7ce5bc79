import asyncio
import logging
from pathlib import Path

import pytest

from cacheables import Cacheables, CacheConfigManager, CacheSettings, ConfigurationError, MaxAgeOptions


def test_load_yaml_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "cacheables.yml"
    config_path.write_text(
        "enabled: false\nlog: true\ndefault_policy:\n  cache_policy: max-age\n  max_age: 500\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("CACHEABLES_CONFIG", str(config_path))
    manager = CacheConfigManager()
    settings = asyncio.run(manager.load())
    assert settings.enabled is False
    assert settings.log is True
    assert settings.log_timing is False
    assert isinstance(settings.default_policy, MaxAgeOptions)
    assert settings.default_policy.max_age == 500


def test_load_toml_config_with_section(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.toml"
    config_path.write_text(
        '[cacheables]\nlog_timing = true\ndefault_policy = "network-only"\n',
        encoding="utf-8",
    )
    settings = asyncio.run(CacheConfigManager(config_path).load())
    assert settings.log_timing is True
    assert settings.default_policy.cache_policy == "network-only"


def test_missing_default_file_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CACHEABLES_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    settings = asyncio.run(CacheConfigManager().get_settings())
    assert settings == CacheSettings()


def test_missing_explicit_file_fails(tmp_path: Path) -> None:
    manager = CacheConfigManager(tmp_path / "absent.yml")
    with pytest.raises(ConfigurationError):
        asyncio.run(manager.load())


@pytest.mark.parametrize(
    ("name", "content"),
    [
        ("bad.yml", "default_policy:\n  cache_policy: max-age\n"),
        ("bad.yml", "enabled: [1, 2\n"),
        ("bad.yml", "- just\n- a list\n"),
        ("bad.toml", "enabled = \n"),
        ("bad.ini", "enabled=true\n"),
    ],
)
def test_invalid_config_raises_configuration_error(tmp_path: Path, name: str, content: str) -> None:
    config_path = tmp_path / name
    config_path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        asyncio.run(CacheConfigManager(config_path).load())


@pytest.mark.asyncio
async def test_reload_applies_settings_to_cache(tmp_path: Path) -> None:
    config_path = tmp_path / "cacheables.yml"
    config_path.write_text("enabled: true\n", encoding="utf-8")
    manager = CacheConfigManager(config_path)
    cache = Cacheables.from_settings(await manager.get_settings())
    manager.register_callback(cache.apply_settings)

    config_path.write_text("enabled: false\nlog_timing: true\n", encoding="utf-8")
    settings = await manager.reload()

    assert settings.enabled is False
    assert cache.enabled is False
    assert cache.log_timing is True
    assert await manager.get_settings() is settings


@pytest.mark.asyncio
async def test_failing_callback_does_not_break_reload(tmp_path: Path, caplog) -> None:
    caplog.set_level(logging.ERROR, logger="cacheables")
    config_path = tmp_path / "cacheables.yml"
    config_path.write_text("log: true\n", encoding="utf-8")
    manager = CacheConfigManager(config_path)
    seen = []

    async def broken(settings: CacheSettings) -> None:
        raise RuntimeError("callback failed")

    async def recorder(settings: CacheSettings) -> None:
        seen.append(settings)

    manager.register_callback(broken)
    manager.register_callback(recorder)
    settings = await manager.reload()

    assert seen == [settings]
    assert any(record.getMessage() == "configuration callback failed" for record in caplog.records)
