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
"""MetadataProvider — the port through which the registry introspects types.

The registry never inspects classes itself. It asks a metadata provider to
build instances, list injectable slots and run lifecycle hooks, so hosts
with their own object model can plug in a different provider.
"""

from __future__ import annotations

import importlib
import inspect
import types
import typing
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, Union, get_args, get_origin, runtime_checkable

from pywire.container.inject import Inject
from pywire.container.keys import ServiceKey
from pywire.container.lifecycle import (
    POST_CONSTRUCT_ATTR,
    POST_CONSTRUCT_NAME,
    PRE_DESTROY_ATTR,
    PRE_DESTROY_NAME,
    call_lifecycle_hooks,
)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class InjectionSlot:
    """One declared injection point: the attribute to set and the key to resolve."""

    name: str
    key: ServiceKey
    required: bool = True

    def apply(self, target: Any, value: Any) -> None:
        setattr(target, self.name, value)


@runtime_checkable
class MetadataProvider(Protocol):
    """Port defining how the registry constructs and describes types."""

    def construct_standard(self, type_identity: Any, parent: Any = None) -> Any: ...
    def injectable_slots(self, type_identity: Any) -> Sequence[InjectionSlot]: ...
    def invoke_post_construct_hook(self, instance: Any) -> None: ...
    def invoke_pre_destroy_hook(self, instance: Any) -> None: ...


class ReflectionMetadataProvider:
    """Default MetadataProvider backed by Python introspection.

    Type identities are classes or ``"package.module:QualName"`` strings.
    Injectable slots are class attributes defaulting to :class:`Inject`.
    Hooks are methods marked ``@post_construct`` / ``@pre_destroy``, falling
    back to methods named ``on_init`` / ``on_destroy``.
    """

    def load_type(self, type_identity: Any) -> type:
        """Turn a type identity into a class."""
        if inspect.isclass(type_identity):
            return type_identity
        if isinstance(type_identity, str):
            module_name, sep, qualname = type_identity.partition(":")
            if not sep or not module_name or not qualname:
                raise TypeError(
                    f"Type identity '{type_identity}' must have the form 'package.module:QualName'"
                )
            obj: Any = importlib.import_module(module_name)
            for part in qualname.split("."):
                obj = getattr(obj, part)
            if not inspect.isclass(obj):
                raise TypeError(f"Type identity '{type_identity}' does not name a class")
            return obj
        raise TypeError(f"Unsupported type identity {type_identity!r}")

    def construct_standard(self, type_identity: Any, parent: Any = None) -> Any:
        """Invoke the nullary or single-argument constructor of the type.

        A single required positional parameter receives *parent*.
        """
        cls = self.load_type(type_identity)
        if cls.__init__ is object.__init__:  # type: ignore[misc]
            return cls()

        try:
            sig = inspect.signature(cls)
        except (TypeError, ValueError):
            return cls()

        required = [
            p for p in sig.parameters.values()
            if p.default is inspect.Parameter.empty
            and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        if not required:
            return cls()
        if len(required) == 1 and required[0].kind in _POSITIONAL:
            return cls(parent)

        names = ", ".join(p.name for p in required)
        raise TypeError(
            f"{cls.__qualname__} has no standard constructor; "
            f"expected at most one required positional parameter, found: {names}"
        )

    def injectable_slots(self, type_identity: Any) -> list[InjectionSlot]:
        """List ``Inject``-marked attributes in definition order, base classes first."""
        cls = self.load_type(type_identity)
        hints = _get_class_type_hints(cls)

        names: dict[str, None] = {}
        for klass in reversed(cls.__mro__):
            for attr_name, value in vars(klass).items():
                if isinstance(value, Inject):
                    names[attr_name] = None

        slots: list[InjectionSlot] = []
        for attr_name in names:
            marker = inspect.getattr_static(cls, attr_name, None)
            if not isinstance(marker, Inject):
                continue
            key = marker.key or _key_from_annotation(cls, attr_name, hints.get(attr_name))
            slots.append(InjectionSlot(name=attr_name, key=key, required=marker.required))
        return slots

    def invoke_post_construct_hook(self, instance: Any) -> None:
        call_lifecycle_hooks(instance, POST_CONSTRUCT_ATTR, POST_CONSTRUCT_NAME)

    def invoke_pre_destroy_hook(self, instance: Any) -> None:
        call_lifecycle_hooks(instance, PRE_DESTROY_ATTR, PRE_DESTROY_NAME)


def _get_class_type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # Unresolvable forward references; slots need an explicit key then.
        return {}


def _key_from_annotation(cls: type, attr_name: str, annotation: Any) -> ServiceKey:
    # Optional[T] / T | None injects T
    if get_origin(annotation) is Union or isinstance(annotation, types.UnionType):
        non_none = [a for a in get_args(annotation) if a is not type(None)]
        if len(non_none) == 1:
            annotation = non_none[0]

    if inspect.isclass(annotation) and get_origin(annotation) is None:
        return ServiceKey.of(annotation)

    raise TypeError(
        f"Cannot derive a service key for {cls.__qualname__}.{attr_name} "
        f"(annotation: {annotation!r}); pass Inject('<key>') explicitly"
    )
