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
"""Registration sources — how a registration produces its instance."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Union

from pywire.container.keys import KeyLike, ServiceKey


@dataclass(frozen=True)
class Instance:
    """A pre-built object. Ownership passes to the registry on registration."""

    obj: Any = field(repr=False)


@dataclass(frozen=True)
class TypeFactory:
    """A type built with its standard constructor, then property-injected."""

    type_identity: Any


@dataclass(frozen=True)
class FunctionFactory:
    """A callable invoked with its resolved dependencies as positional arguments."""

    func: Callable[..., Any]
    dependencies: tuple[ServiceKey, ...] = ()

    def __init__(self, func: Callable[..., Any], dependencies: Iterable[KeyLike] = ()) -> None:
        if not callable(func):
            raise TypeError(f"FunctionFactory requires a callable, got {func!r}")
        object.__setattr__(self, "func", func)
        object.__setattr__(self, "dependencies", tuple(ServiceKey.of(d) for d in dependencies))


@dataclass(frozen=True)
class PluginFactory:
    """A type looked up by the plugin locator, then built like a TypeFactory."""

    category: str
    selector: str | None = None


Source = Union[Instance, TypeFactory, FunctionFactory, PluginFactory]

SOURCE_TYPES: tuple[type, ...] = (Instance, TypeFactory, FunctionFactory, PluginFactory)


def describe_source(source: Source) -> str:
    """Short human-readable description used in logs and errors."""
    if isinstance(source, Instance):
        return f"instance of {type(source.obj).__qualname__}"
    if isinstance(source, TypeFactory):
        ident = source.type_identity
        return f"type {getattr(ident, '__qualname__', ident)}"
    if isinstance(source, FunctionFactory):
        return f"factory {getattr(source.func, '__qualname__', repr(source.func))}"
    if source.selector:
        return f"plugin {source.category}[{source.selector}]"
    return f"plugin {source.category}"
