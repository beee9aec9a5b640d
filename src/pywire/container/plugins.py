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
"""PluginLocator — resolves a plugin category and selector to a class."""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import os
import pkgutil
import sys
import types
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Protocol, TypeVar, overload, runtime_checkable

from pywire.container.exceptions import PluginNotFoundError
from pywire.container.ordering import precedence_key, sort_by_precedence

T = TypeVar("T", bound=type)

PLUGIN_ATTR = "__pywire_plugin__"
PLUGIN_KEY_ATTR = "__pywire_plugin_key__"


@overload
def plugin(cls: T) -> T: ...


@overload
def plugin(*, key: str = "") -> Callable[[T], T]: ...


def plugin(cls: T | None = None, *, key: str = "") -> T | Callable[[T], T]:
    """Mark a class as a plugin candidate.

    Usage::

        @plugin(key="sqlite")
        class SqliteStorage:
            ...
    """

    def decorator(cls: T) -> T:
        setattr(cls, PLUGIN_ATTR, True)
        setattr(cls, PLUGIN_KEY_ATTR, key)
        return cls

    if cls is not None:
        return decorator(cls)
    return decorator


def get_plugin_key(cls: type) -> str:
    return getattr(cls, PLUGIN_KEY_ATTR, "")


@runtime_checkable
class PluginLocator(Protocol):
    """Port resolving ``(category, selector)`` to a constructible class."""

    def resolve_plugin(self, category: str, selector: str | None = None) -> type: ...


def select_plugin(category: str, selector: str | None, candidates: Iterable[type]) -> type:
    """Pick one class among *candidates*.

    With a selector, only classes declaring that key qualify. The lowest
    ``@order`` value wins, ties broken by module then qualified name.
    """
    pool = list(candidates)
    matches = [c for c in pool if not selector or get_plugin_key(c) == selector]
    if not matches:
        raise PluginNotFoundError(
            category,
            selector,
            candidates=sorted({get_plugin_key(c) for c in pool if get_plugin_key(c)}),
        )
    return min(matches, key=precedence_key)


class InMemoryPluginLocator:
    """PluginLocator over an explicit ``category -> classes`` mapping."""

    def __init__(self, plugins: Mapping[str, Iterable[type]] | None = None) -> None:
        self._plugins: dict[str, list[type]] = {
            category: list(classes) for category, classes in (plugins or {}).items()
        }

    def add(self, category: str, cls: type) -> None:
        self._plugins.setdefault(category, [])
        if cls not in self._plugins[category]:
            self._plugins[category].append(cls)

    def resolve_plugin(self, category: str, selector: str | None = None) -> type:
        return select_plugin(category, selector, self._plugins.get(category, []))


class ModulePluginLocator:
    """PluginLocator that imports plugin modules from a package or directory.

    A category is either a dotted (or slash-separated) path below ``root``,
    or an absolute filesystem directory. Only modules directly inside the
    category are searched; sub-packages are not descended into.
    """

    def __init__(self, root: str = "pywire_plugins") -> None:
        self._root = root

    @property
    def root(self) -> str:
        return self._root

    def resolve_plugin(self, category: str, selector: str | None = None) -> type:
        return select_plugin(category, selector, self.candidates(category))

    def candidates(self, category: str) -> list[type]:
        """All ``@plugin`` classes found in *category*, highest precedence first."""
        classes: list[type] = []
        for module in self._load_modules(category):
            classes.extend(scan_plugin_classes(module))
        return sort_by_precedence(classes)

    def _load_modules(self, category: str) -> list[types.ModuleType]:
        if os.path.isabs(category):
            return _load_directory(Path(category))

        dotted = category.strip("/").replace("/", ".")
        package_name = f"{self._root}.{dotted}" if self._root else dotted
        try:
            package = importlib.import_module(package_name)
        except ImportError as e:
            if not _names_package(e.name, package_name):
                raise
            raise PluginNotFoundError(category) from e

        modules = [package]
        if hasattr(package, "__path__"):
            for _finder, modname, ispkg in pkgutil.iter_modules(package.__path__, prefix=package.__name__ + "."):
                if ispkg:
                    continue
                modules.append(importlib.import_module(modname))
        return modules


def _names_package(missing: str | None, package_name: str) -> bool:
    """True when *missing* is *package_name* or one of its parent packages."""
    if missing is None:
        return False
    return package_name == missing or package_name.startswith(missing + ".")


def scan_plugin_classes(module: types.ModuleType) -> list[type]:
    """Extract the ``@plugin`` classes defined in *module*."""
    classes: list[type] = []
    for _name, obj in inspect.getmembers(module, inspect.isclass):
        if getattr(obj, PLUGIN_ATTR, False) and obj.__module__ == module.__name__:
            classes.append(obj)
    return classes


def _load_directory(directory: Path) -> list[types.ModuleType]:
    if not directory.is_dir():
        raise PluginNotFoundError(str(directory))

    modules: list[types.ModuleType] = []
    for path in sorted(directory.glob("*.py")):
        if path.name.startswith("_"):
            continue
        module_name = f"_pywire_plugin_{abs(hash(str(directory)))}_{path.stem}"
        if module_name in sys.modules:
            modules.append(sys.modules[module_name])
            continue
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            continue
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        modules.append(module)
    return modules
