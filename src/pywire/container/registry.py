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
"""Service registry with weak/strong registrations and scoped teardown."""

from __future__ import annotations

import contextlib
import difflib
import itertools
import threading
from collections.abc import Callable, Hashable, Iterable
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, overload, runtime_checkable

import structlog

from pywire.container.exceptions import (
    ServiceConstructionError,
    ServiceDestructionError,
    ServiceExistsError,
)
from pywire.container.keys import KeyLike, ServiceKey
from pywire.container.metadata import MetadataProvider, ReflectionMetadataProvider
from pywire.container.plugins import ModulePluginLocator, PluginLocator
from pywire.container.registration import Registration
from pywire.container.resolver import Resolver
from pywire.container.sources import (
    SOURCE_TYPES,
    FunctionFactory,
    Instance,
    PluginFactory,
    Source,
    TypeFactory,
    describe_source,
)
from pywire.container.types import RegistrationState, Scope, ScopeTag, TeardownOrder

if TYPE_CHECKING:
    from pywire.core.config import Config

T = TypeVar("T")

logger = structlog.get_logger("pywire.container.registry")


@runtime_checkable
class Owner(Protocol):
    """An object that takes over the lifetime of objects built for it."""

    def adopt(self, child: Any) -> None: ...


class ServiceRegistry:
    """Dependency injection registry.

    Maps service keys to registrations, constructs services lazily on first
    resolution, injects ``Inject``-marked slots, and destroys instances
    scope by scope. Weak registrations are defaults that any later
    registration replaces; strong registrations lock their key.

    The registry is not a process-wide singleton: build one per owning
    context and tear it down when that context stops.
    """

    def __init__(
        self,
        metadata: MetadataProvider | None = None,
        plugins: PluginLocator | None = None,
        *,
        teardown_order: TeardownOrder | str = TeardownOrder.REVERSE,
        thread_safe: bool = False,
    ) -> None:
        self._metadata: MetadataProvider = metadata or ReflectionMetadataProvider()
        self._plugins = plugins
        self._teardown_order = TeardownOrder(teardown_order)
        self._registrations: dict[ServiceKey, Registration] = {}
        self._scopes: dict[ScopeTag, list[ServiceKey]] = {}
        self._owned: dict[ScopeTag, list[Any]] = {}
        self._sequence = itertools.count(1)
        self._lock: contextlib.AbstractContextManager[Any] = (
            threading.RLock() if thread_safe else contextlib.nullcontext()
        )
        self._resolver = Resolver(self)

    @classmethod
    def from_config(
        cls,
        config: Config,
        metadata: MetadataProvider | None = None,
        plugins: PluginLocator | None = None,
    ) -> ServiceRegistry:
        """Build a registry from the ``pywire.registry`` and ``pywire.plugins`` sections."""
        from pywire.container.settings import RegistrySettings

        settings = config.bind(RegistrySettings)
        if plugins is None:
            plugins = ModulePluginLocator(root=str(config.get("pywire.plugins.root", "pywire_plugins")))
        return cls(
            metadata,
            plugins,
            teardown_order=settings.teardown_order,
            thread_safe=settings.thread_safe,
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        key: KeyLike,
        source: Source,
        scope: ScopeTag = Scope.APPLICATION,
        weak: bool = False,
    ) -> None:
        """Install a registration for *key*.

        An existing weak registration is discarded (destroying the instance
        it holds); a failing pre-destroy hook is logged and does not affect the
        replacement. An existing strong registration makes this call fail with
        :class:`ServiceExistsError` and leaves the registry unchanged.
        """
        if not isinstance(source, SOURCE_TYPES):
            raise TypeError(
                f"Registration source must be Instance, TypeFactory, FunctionFactory "
                f"or PluginFactory, got {source!r}"
            )
        if not isinstance(scope, Hashable):
            raise TypeError(f"Scope tag must be hashable, got {scope!r}")
        service_key = ServiceKey.of(key)

        with self._lock:
            existing = self._registrations.get(service_key)
            if existing is not None:
                if not existing.weak:
                    raise ServiceExistsError(service_key, existing.description)
                failures = self._discard(existing)
                logger.debug(
                    "weak_service_replaced",
                    key=service_key.name,
                    previous=existing.description,
                    destroy_failures=len(failures),
                )

            reg = Registration(
                key=service_key,
                source=source,
                scope=scope,
                weak=weak,
                sequence=next(self._sequence),
            )
            self._registrations[service_key] = reg
            self._scopes.setdefault(scope, []).append(service_key)
            logger.debug(
                "service_registered",
                key=service_key.name,
                source=describe_source(source),
                scope=repr(scope),
                weak=weak,
            )

    def register_instance(
        self, key: KeyLike, obj: Any, scope: ScopeTag = Scope.APPLICATION, weak: bool = False
    ) -> None:
        """Register a pre-built object; the registry takes ownership of it."""
        self.register(key, Instance(obj), scope, weak)

    def register_type(
        self,
        key: KeyLike,
        cls: Any = None,
        scope: ScopeTag = Scope.APPLICATION,
        weak: bool = False,
    ) -> None:
        """Register a type built by its standard constructor.

        When *cls* is omitted, *key* must itself be the class to build.
        """
        if cls is None:
            if not isinstance(key, type):
                raise TypeError("register_type() needs a class when the key is not a class")
            cls = key
        self.register(key, TypeFactory(cls), scope, weak)

    def register_factory(
        self,
        key: KeyLike,
        func: Callable[..., Any],
        dependencies: Iterable[KeyLike] = (),
        scope: ScopeTag = Scope.APPLICATION,
        weak: bool = False,
    ) -> None:
        """Register a function called with its resolved dependencies."""
        self.register(key, FunctionFactory(func, dependencies), scope, weak)

    def register_plugin(
        self,
        key: KeyLike,
        category: str,
        selector: str | None = None,
        scope: ScopeTag = Scope.APPLICATION,
        weak: bool = False,
    ) -> None:
        """Register a service whose class is found by the plugin locator."""
        self.register(key, PluginFactory(category, selector), scope, weak)

    # ------------------------------------------------------------------
    # Resolution and injection
    # ------------------------------------------------------------------

    @overload
    def resolve(self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: ServiceKey | str) -> Any: ...

    def resolve(self, key: KeyLike) -> Any:
        """Return the instance registered under *key*, constructing it on first use."""
        with self._lock:
            return self._resolver.resolve(ServiceKey.of(key))

    def inject_services(self, obj: Any) -> None:
        """Resolve and assign the injectable slots of an arbitrary object.

        Not transactional: slots set before a failing slot stay set, and the
        object should be treated as unusable once this raises.
        """
        with self._lock:
            try:
                self._resolver.inject(obj)
            except ServiceConstructionError:
                raise
            except Exception as exc:
                raise ServiceConstructionError(
                    None, f"injection into {type(obj).__qualname__} failed: {exc}"
                ) from exc

    def construct_injected(self, type_identity: Any, owner: Any = None) -> Any:
        """Build a registry-external object and inject its services.

        *owner* decides who destroys the result: ``None`` leaves it to the
        caller, a scope tag hands it to the registry until that scope is torn
        down, and an :class:`Owner` receives it through ``adopt``. An object
        owner is also passed to a single-argument constructor.
        """
        owner_scope = self._owner_scope(owner)
        parent = owner if owner is not None and owner_scope is None else None

        with self._lock:
            try:
                instance = self._metadata.construct_standard(type_identity, parent)
            except Exception as exc:
                name = getattr(type_identity, "__qualname__", type_identity)
                raise ServiceConstructionError(None, f"cannot construct {name}: {exc}") from exc

            self.inject_services(instance)

            try:
                self._metadata.invoke_post_construct_hook(instance)
            except Exception as exc:
                raise ServiceConstructionError(
                    None, f"post-construct hook of {type(instance).__qualname__} failed: {exc}"
                ) from exc

            if owner_scope is not None:
                self._owned.setdefault(owner_scope, []).append(instance)
            elif owner is not None:
                owner.adopt(instance)
            return instance

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def teardown_scope(self, scope: ScopeTag) -> None:
        """Destroy every instance held under *scope* and drop its registrations.

        Pre-destroy hook failures are logged and do not stop the teardown;
        they are raised together as :class:`ServiceDestructionError` once the
        scope is gone.
        """
        with self._lock:
            errors = self._teardown(scope)
        if errors:
            raise ServiceDestructionError(scope, errors) from errors[0][1]

    def teardown_all(self) -> None:
        """Tear down every scope, most recently introduced first."""
        with self._lock:
            errors: list[tuple[str, BaseException]] = []
            for scope in reversed(list(dict.fromkeys([*self._scopes, *self._owned]))):
                errors.extend(self._teardown(scope))
        if errors:
            raise ServiceDestructionError("*", errors) from errors[0][1]

    def _teardown(self, scope: ScopeTag) -> list[tuple[str, BaseException]]:
        keys = self._scopes.pop(scope, [])
        owned = self._owned.pop(scope, [])
        errors: list[tuple[str, BaseException]] = []

        for obj in reversed(owned):
            self._destroy(type(obj).__qualname__, obj, errors)

        ordered = reversed(keys) if self._teardown_order is TeardownOrder.REVERSE else iter(keys)
        for key in ordered:
            reg = self._registrations.pop(key, None)
            if reg is None:
                continue
            instance = reg.held_instance
            if instance is not None:
                self._destroy(key.name, instance, errors)

        logger.info("scope_torn_down", scope=repr(scope), services=len(keys), owned=len(owned))
        return errors

    def _discard(self, reg: Registration) -> list[tuple[str, BaseException]]:
        errors: list[tuple[str, BaseException]] = []
        del self._registrations[reg.key]
        scope_keys = self._scopes.get(reg.scope)
        if scope_keys is not None and reg.key in scope_keys:
            scope_keys.remove(reg.key)
        instance = reg.held_instance
        if instance is not None:
            self._destroy(reg.key.name, instance, errors)
        return errors

    def _destroy(self, name: str, instance: Any, errors: list[tuple[str, BaseException]]) -> None:
        try:
            self._metadata.invoke_pre_destroy_hook(instance)
        except Exception as exc:
            logger.exception("pre_destroy_failed", service=name)
            errors.append((name, exc))

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    @property
    def metadata(self) -> MetadataProvider:
        return self._metadata

    @property
    def plugins(self) -> PluginLocator | None:
        return self._plugins

    @property
    def teardown_order(self) -> TeardownOrder:
        return self._teardown_order

    def registration(self, key: KeyLike) -> Registration | None:
        """The active registration for *key*, if any."""
        return self._registrations.get(ServiceKey.of(key))

    def state(self, key: KeyLike) -> RegistrationState | None:
        reg = self.registration(key)
        return reg.state if reg is not None else None

    def contains(self, key: KeyLike) -> bool:
        return ServiceKey.of(key) in self._registrations

    def keys(self, scope: ScopeTag | None = None) -> list[ServiceKey]:
        """Registered keys in registration order, optionally limited to one scope."""
        if scope is None:
            return [reg.key for reg in sorted(self._registrations.values(), key=lambda r: r.sequence)]
        return list(self._scopes.get(scope, []))

    def scopes(self) -> list[ScopeTag]:
        """Scopes that currently hold registrations or owned objects."""
        return [s for s in dict.fromkeys([*self._scopes, *self._owned]) if self._scopes.get(s) or self._owned.get(s)]

    def similar_keys(self, key: ServiceKey) -> list[str]:
        """Registered key names close to *key*, for diagnostics."""
        names = [k.name for k in self._registrations]
        return difflib.get_close_matches(key.name, names, n=5, cutoff=0.6)

    def __contains__(self, key: object) -> bool:
        try:
            return self.contains(key)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return False

    def __len__(self) -> int:
        return len(self._registrations)

    def _owner_scope(self, owner: Any) -> ScopeTag | None:
        if owner is None or isinstance(owner, Owner):
            return None
        if isinstance(owner, (Scope, str)):
            return owner
        if isinstance(owner, Hashable) and owner in self._scopes:
            return owner
        raise TypeError(
            f"Owner must be None, a scope tag or an object with adopt(), got {owner!r}"
        )
