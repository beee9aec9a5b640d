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
"""Tests for configuration loading and binding."""

from dataclasses import dataclass
from pathlib import Path

import pytest

from pywire.container import ModulePluginLocator, ServiceRegistry, TeardownOrder
from pywire.container.settings import RegistrySettings
from pywire.core.config import Config, config_properties


class TestConfig:
    def test_load_from_dict(self):
        config = Config({"app": {"name": "billing", "workers": 4}})
        assert config.get("app.name") == "billing"
        assert config.get("app.workers") == 4

    def test_get_with_default(self):
        assert Config({}).get("missing.key", "fallback") == "fallback"

    def test_false_values_are_not_defaults(self):
        config = Config({"pywire": {"registry": {"thread-safe": False}}})
        assert config.get("pywire.registry.thread-safe", True) is False

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("PYWIRE_APP_NAME", "from-env")
        config = Config({"app": {"name": "from-file"}})
        assert config.get("app.name") == "from-env"

    def test_env_var_override_strips_library_prefix(self, monkeypatch):
        monkeypatch.setenv("PYWIRE_REGISTRY_THREAD_SAFE", "true")
        assert Config({}).get("pywire.registry.thread-safe") == "true"

    def test_get_section(self):
        config = Config({"pywire": {"plugins": {"root": "acme_plugins"}}})
        assert config.get_section("pywire.plugins") == {"root": "acme_plugins"}
        assert config.get_section("pywire.absent") == {}


class TestPlaceholders:
    def test_config_reference_and_default(self):
        config = Config({"db": {"host": "localhost", "url": "pg://${db.host}:${db.port:5432}"}})
        assert config.get("db.url") == "pg://localhost:5432"

    def test_environment_reference(self, monkeypatch):
        monkeypatch.setenv("PYWIRE_TEST_TOKEN", "s3cret")
        config = Config({"auth": {"token": "${PYWIRE_TEST_TOKEN}"}})
        assert config.get("auth.token") == "s3cret"

    def test_unresolvable_placeholder(self):
        config = Config({"db": {"url": "${nowhere.to.be.found}"}})
        with pytest.raises(ValueError, match="Cannot resolve placeholder"):
            config.get("db.url")

    def test_reference_loop(self):
        config = Config({"a": "${b}", "b": "${a}"})
        with pytest.raises(ValueError, match="circular"):
            config.get("a")


class TestConfigFiles:
    def test_defaults(self):
        config = Config.defaults()
        assert config.get("pywire.registry.teardown-order") == "reverse"
        assert config.get("pywire.plugins.root") == "pywire_plugins"
        assert config.loaded_sources == ["pywire-defaults.yaml (library defaults)"]

    def test_from_file_yaml(self, tmp_path: Path):
        path = tmp_path / "pywire.yaml"
        path.write_text("pywire:\n  registry:\n    thread-safe: true\n")
        config = Config.from_file(path)
        assert config.get("pywire.registry.thread-safe") is True
        assert config.get("pywire.registry.teardown-order") == "reverse"

    def test_from_file_without_defaults(self, tmp_path: Path):
        path = tmp_path / "pywire.yaml"
        path.write_text("app:\n  name: bare\n")
        config = Config.from_file(path, load_defaults=False)
        assert config.get("pywire.registry.teardown-order") is None

    def test_from_file_profile_overlay(self, tmp_path: Path):
        (tmp_path / "pywire.yaml").write_text("app:\n  name: base\n  region: eu\n")
        (tmp_path / "pywire-dev.yaml").write_text("app:\n  name: dev\n")
        config = Config.from_file(tmp_path / "pywire.yaml", active_profiles=["dev"])
        assert config.get("app.name") == "dev"
        assert config.get("app.region") == "eu"

    def test_from_sources_merges_locations_and_toml(self, tmp_path: Path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "pywire.yaml").write_text("app:\n  name: from-config-dir\n  tier: 1\n")
        (tmp_path / "pywire.toml").write_text('[app]\nname = "from-root"\n')
        (tmp_path / "pywire-prod.toml").write_text("[app]\ntier = 3\n")

        config = Config.from_sources(tmp_path, active_profiles=["prod"])

        assert config.get("app.name") == "from-root"
        assert config.get("app.tier") == 3
        assert len(config.loaded_sources) == 4
        assert config.loaded_sources[-1].endswith("(profile: prod)")


class TestBinding:
    def test_bind_registry_settings_with_aliases(self):
        config = Config({"pywire": {"registry": {"teardown-order": "registration", "thread-safe": True}}})
        settings = config.bind(RegistrySettings)
        assert settings.teardown_order is TeardownOrder.REGISTRATION
        assert settings.thread_safe is True

    def test_bind_registry_settings_defaults(self):
        settings = Config({}).bind(RegistrySettings)
        assert settings.teardown_order is TeardownOrder.REVERSE
        assert settings.thread_safe is False

    def test_bind_applies_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PYWIRE_REGISTRY_TEARDOWN_ORDER", "registration")
        monkeypatch.setenv("PYWIRE_REGISTRY_THREAD_SAFE", "true")
        settings = Config.defaults().bind(RegistrySettings)
        assert settings.teardown_order is TeardownOrder.REGISTRATION
        assert settings.thread_safe is True

    def test_bind_accepts_field_names(self):
        config = Config({"pywire": {"registry": {"thread_safe": True}}})
        assert config.bind(RegistrySettings).thread_safe is True

    def test_bind_resolves_placeholders(self):
        config = Config({"defaults": {"order": "registration"}, "pywire": {"registry": {"teardown-order": "${defaults.order}"}}})
        assert config.bind(RegistrySettings).teardown_order is TeardownOrder.REGISTRATION

    def test_bind_rejects_invalid_values(self):
        config = Config({"pywire": {"registry": {"teardown-order": "sideways"}}})
        with pytest.raises(ValueError, match="Configuration validation failed"):
            config.bind(RegistrySettings)

    def test_bind_dataclass_coerces_strings(self):
        @config_properties(prefix="cache")
        @dataclass
        class CacheSettings:
            size: int = 128
            enabled: bool = False

        settings = Config({"cache": {"size": "512", "enabled": "yes"}}).bind(CacheSettings)
        assert settings.size == 512
        assert settings.enabled is True

    def test_bind_requires_decorator(self):
        @dataclass
        class Plain:
            value: int = 0

        with pytest.raises(ValueError, match="not decorated"):
            Config({}).bind(Plain)


class TestRegistryFromConfig:
    def test_settings_and_plugin_root(self):
        config = Config(
            {
                "pywire": {
                    "registry": {"teardown-order": "registration", "thread-safe": True},
                    "plugins": {"root": "acme_plugins"},
                }
            }
        )
        registry = ServiceRegistry.from_config(config)
        assert registry.teardown_order is TeardownOrder.REGISTRATION
        assert isinstance(registry.plugins, ModulePluginLocator)
        assert registry.plugins.root == "acme_plugins"

    def test_explicit_plugin_locator_wins(self):
        locator = ModulePluginLocator(root="elsewhere")
        registry = ServiceRegistry.from_config(Config.defaults(), plugins=locator)
        assert registry.plugins is locator
