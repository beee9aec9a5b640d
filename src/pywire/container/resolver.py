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
"""Lazy construction: recursive resolution, cycle detection and injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from pywire.container.exceptions import (
    CircularDependencyError,
    NoSuchServiceError,
    PluginNotFoundError,
    ServiceConstructionError,
)
from pywire.container.keys import ServiceKey
from pywire.container.registration import Registration
from pywire.container.sources import FunctionFactory, Instance, PluginFactory, TypeFactory
from pywire.container.types import RegistrationState

if TYPE_CHECKING:
    from pywire.container.registry import ServiceRegistry

logger = structlog.get_logger("pywire.container.resolver")


class Resolver:
    """Drives registrations through their construction state machine.

    A registration found in ``CONSTRUCTING`` while it is being resolved means
    the dependency graph loops back on itself; that is reported as a
    :class:`CircularDependencyError` instead of recursing.
    """

    def __init__(self, registry: ServiceRegistry) -> None:
        self._registry = registry
        self._resolving: dict[ServiceKey, None] = {}  # insertion-ordered

    def resolve(self, key: ServiceKey, *, required_by: str | None = None) -> Any:
        reg = self._registry.registration(key)
        if reg is None:
            raise NoSuchServiceError(
                key,
                required_by=required_by,
                suggestions=self._registry.similar_keys(key),
            )

        if reg.state is RegistrationState.CONSTRUCTED:
            return reg.instance

        if reg.state is RegistrationState.CONSTRUCTING:
            raise CircularDependencyError(chain=list(self._resolving), current=key)

        if reg.state is RegistrationState.FAILED:
            raise ServiceConstructionError(
                key, f"construction previously failed and is not retried: {reg.error}"
            ) from reg.error

        return self._construct(reg)

    def inject(self, target: Any) -> None:
        """Resolve and assign every injectable slot of *target*.

        Slots assigned before a failing slot keep their values.
        """
        owner_name = type(target).__qualname__
        for slot in self._registry.metadata.injectable_slots(type(target)):
            try:
                value = self.resolve(slot.key, required_by=f"{owner_name}.{slot.name}")
            except NoSuchServiceError as exc:
                if slot.required or exc.key != slot.key:
                    raise
                value = None
            slot.apply(target, value)

    def _construct(self, reg: Registration) -> Any:
        reg.begin()
        self._resolving[reg.key] = None
        try:
            instance = self._produce(reg)
        except ServiceConstructionError as exc:
            reg.fail(exc)
            logger.warning("service_construction_failed", key=reg.key.name, error=str(exc.reason))
            raise
        except Exception as exc:
            error = ServiceConstructionError(reg.key, f"{type(exc).__name__}: {exc}")
            reg.fail(exc)
            logger.warning("service_construction_failed", key=reg.key.name, error=error.reason)
            raise error from exc
        except BaseException as exc:
            reg.fail(exc)
            raise
        finally:
            self._resolving.pop(reg.key, None)

        reg.complete(instance)
        logger.debug("service_constructed", key=reg.key.name, type=type(instance).__qualname__)
        return instance

    def _produce(self, reg: Registration) -> Any:
        metadata = self._registry.metadata
        source = reg.source

        if isinstance(source, Instance):
            instance = source.obj
        elif isinstance(source, FunctionFactory):
            args = [
                self.resolve(dep, required_by=f"{reg.key} (factory argument {index})")
                for index, dep in enumerate(source.dependencies)
            ]
            instance = source.func(*args)
        elif isinstance(source, TypeFactory):
            instance = metadata.construct_standard(source.type_identity)
            self.inject(instance)
        elif isinstance(source, PluginFactory):
            instance = metadata.construct_standard(self._locate_plugin(reg.key, source))
            self.inject(instance)
        else:
            raise ServiceConstructionError(reg.key, f"unsupported source {source!r}")

        if instance is None:
            raise ServiceConstructionError(reg.key, "source produced None")

        metadata.invoke_post_construct_hook(instance)
        return instance

    def _locate_plugin(self, key: ServiceKey, source: PluginFactory) -> Any:
        locator = self._registry.plugins
        if locator is None:
            raise ServiceConstructionError(key, "no plugin locator is configured")
        try:
            return locator.resolve_plugin(source.category, source.selector)
        except PluginNotFoundError as exc:
            raise ServiceConstructionError(key, exc.reason) from exc
