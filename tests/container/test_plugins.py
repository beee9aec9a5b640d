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
"""Tests for plugin locators."""

import sys
from pathlib import Path

import pytest

from pywire.container import (
    HIGHEST_PRECEDENCE,
    InMemoryPluginLocator,
    ModulePluginLocator,
    PluginFactory,
    PluginLocator,
    PluginNotFoundError,
    ServiceConstructionError,
    ServiceRegistry,
    order,
    plugin,
)
from pywire.container.ordering import get_order, sort_by_precedence

ALPHA = '''
from pywire.container import plugin


@plugin(key="alpha")
class AlphaPlugin:
    pass
'''

BETA = '''
from pywire.container import order, plugin


@order(-1)
@plugin(key="beta")
class BetaPlugin:
    pass


class NotAPlugin:
    pass
'''

NESTED = '''
from pywire.container import plugin


@plugin(key="nested")
class NestedPlugin:
    pass
'''

FAILS_BEFORE_DEFINING = '''
raise RuntimeError("plugin module failed to load")
'''

NEEDS_MISSING_DEPENDENCY = '''
import pywire_missing_dependency_xyz
'''


@plugin(key="first")
class First:
    pass


@order(-5)
@plugin(key="preferred")
class Preferred:
    pass


@plugin
class Keyless:
    pass


def _write_package(base: Path, name: str, files: dict[str, str]) -> Path:
    package = base / name
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("")
    for filename, source in files.items():
        (package / filename).write_text(source)
    return package


class TestInMemoryPluginLocator:
    def test_conforms_to_port(self):
        assert isinstance(InMemoryPluginLocator(), PluginLocator)

    def test_selector_filters_by_key(self):
        locator = InMemoryPluginLocator({"things": [First, Preferred]})
        assert locator.resolve_plugin("things", "first") is First

    def test_lowest_order_wins_without_selector(self):
        locator = InMemoryPluginLocator({"things": [First, Preferred, Keyless]})
        assert locator.resolve_plugin("things") is Preferred

    def test_unknown_selector_lists_available_keys(self):
        locator = InMemoryPluginLocator({"things": [First, Preferred]})
        with pytest.raises(PluginNotFoundError) as exc_info:
            locator.resolve_plugin("things", "missing")
        assert exc_info.value.candidates == ["first", "preferred"]
        assert isinstance(exc_info.value, ServiceConstructionError)

    def test_unknown_category(self):
        with pytest.raises(PluginNotFoundError):
            InMemoryPluginLocator().resolve_plugin("nothing")

    def test_add(self):
        locator = InMemoryPluginLocator()
        locator.add("things", First)
        locator.add("things", First)
        assert locator.resolve_plugin("things") is First


class TestModulePluginLocatorDirectory:
    def test_absolute_directory_category(self, tmp_path):
        plugins = tmp_path / "plugins"
        plugins.mkdir()
        (plugins / "alpha.py").write_text(ALPHA)
        (plugins / "beta.py").write_text(BETA)

        locator = ModulePluginLocator()

        assert locator.resolve_plugin(str(plugins), "alpha").__name__ == "AlphaPlugin"
        assert locator.resolve_plugin(str(plugins)).__name__ == "BetaPlugin"

    def test_directory_search_is_not_recursive(self, tmp_path):
        plugins = tmp_path / "plugins"
        plugins.mkdir()
        (plugins / "alpha.py").write_text(ALPHA)
        nested = plugins / "deeper"
        nested.mkdir()
        (nested / "nested.py").write_text(NESTED)

        with pytest.raises(PluginNotFoundError):
            ModulePluginLocator().resolve_plugin(str(plugins), "nested")

    def test_missing_directory(self, tmp_path):
        with pytest.raises(PluginNotFoundError):
            ModulePluginLocator().resolve_plugin(str(tmp_path / "absent"))

    def test_failed_module_is_not_cached(self, tmp_path):
        plugins = tmp_path / "plugins"
        plugins.mkdir()
        module_file = plugins / "late_failure.py"
        module_file.write_text(FAILS_BEFORE_DEFINING)
        locator = ModulePluginLocator()

        with pytest.raises(RuntimeError, match="failed to load"):
            locator.resolve_plugin(str(plugins))
        assert not [name for name in sys.modules if name.endswith("_late_failure")]

        module_file.write_text(ALPHA)
        assert locator.resolve_plugin(str(plugins), "alpha").__name__ == "AlphaPlugin"

    def test_registry_reports_failed_module_and_recovers(self, tmp_path):
        plugins = tmp_path / "plugins"
        plugins.mkdir()
        module_file = plugins / "flaky.py"
        module_file.write_text(FAILS_BEFORE_DEFINING)
        registry = ServiceRegistry(plugins=ModulePluginLocator())
        registry.register("Flaky", PluginFactory(str(plugins)))

        with pytest.raises(ServiceConstructionError) as exc_info:
            registry.resolve("Flaky")
        assert isinstance(exc_info.value.__cause__, RuntimeError)

        module_file.write_text(BETA)
        registry.register("Recovered", PluginFactory(str(plugins)))
        assert type(registry.resolve("Recovered")).__name__ == "BetaPlugin"


class TestModulePluginLocatorPackage:
    def test_category_below_root_package(self, tmp_path, monkeypatch):
        root = _write_package(tmp_path, "pywire_test_root_a", {})
        _write_package(root, "storage", {"alpha.py": ALPHA, "beta.py": BETA})
        monkeypatch.syspath_prepend(str(tmp_path))

        locator = ModulePluginLocator(root="pywire_test_root_a")

        assert locator.resolve_plugin("storage", "alpha").__name__ == "AlphaPlugin"
        assert {c.__name__ for c in locator.candidates("storage")} == {"AlphaPlugin", "BetaPlugin"}

    def test_slash_separated_category_skips_subpackages(self, tmp_path, monkeypatch):
        root = _write_package(tmp_path, "pywire_test_root_b", {})
        group = _write_package(root, "backends", {})
        storage = _write_package(group, "storage", {"alpha.py": ALPHA})
        _write_package(storage, "extra", {"nested.py": NESTED})
        monkeypatch.syspath_prepend(str(tmp_path))

        locator = ModulePluginLocator(root="pywire_test_root_b")

        assert locator.resolve_plugin("backends/storage").__name__ == "AlphaPlugin"
        with pytest.raises(PluginNotFoundError):
            locator.resolve_plugin("backends/storage", "nested")

    def test_missing_category_package(self):
        with pytest.raises(PluginNotFoundError):
            ModulePluginLocator(root="pywire_no_such_root").resolve_plugin("storage")

    def test_missing_dependency_inside_category_propagates(self, tmp_path, monkeypatch):
        root = _write_package(tmp_path, "pywire_test_root_d", {})
        storage = _write_package(root, "storage", {"alpha.py": ALPHA})
        (storage / "__init__.py").write_text(NEEDS_MISSING_DEPENDENCY)
        monkeypatch.syspath_prepend(str(tmp_path))

        locator = ModulePluginLocator(root="pywire_test_root_d")

        with pytest.raises(ModuleNotFoundError) as exc_info:
            locator.resolve_plugin("storage")
        assert exc_info.value.name == "pywire_missing_dependency_xyz"
        assert not isinstance(exc_info.value, PluginNotFoundError)

    def test_registry_builds_plugin_from_package(self, tmp_path, monkeypatch):
        root = _write_package(tmp_path, "pywire_test_root_c", {})
        _write_package(root, "storage", {"beta.py": BETA})
        monkeypatch.syspath_prepend(str(tmp_path))

        registry = ServiceRegistry(plugins=ModulePluginLocator(root="pywire_test_root_c"))
        registry.register("Storage", PluginFactory("storage"))

        assert type(registry.resolve("Storage")).__name__ == "BetaPlugin"


class TestOrdering:
    def test_undecorated_classes_rank_at_zero(self):
        assert get_order(First) == 0
        assert get_order(Preferred) == -5

    def test_ties_break_on_qualified_name(self):
        @plugin(key="b")
        class Bravo:
            pass

        @plugin(key="a")
        class Alpha:
            pass

        assert sort_by_precedence([Bravo, Alpha, Preferred]) == [Preferred, Alpha, Bravo]

    def test_highest_precedence_is_accepted(self):
        @order(HIGHEST_PRECEDENCE)
        class Urgent:
            pass

        assert get_order(Urgent) == HIGHEST_PRECEDENCE

    def test_out_of_range_order_is_rejected(self):
        with pytest.raises(ValueError):
            order(HIGHEST_PRECEDENCE - 1)
