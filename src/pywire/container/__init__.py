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
"""PyWire service registry — lazy construction, injection and scoped teardown."""

from pywire.container.exceptions import (
    CircularDependencyError,
    NoSuchServiceError,
    PluginNotFoundError,
    ServiceConstructionError,
    ServiceDestructionError,
    ServiceExistsError,
)
from pywire.container.inject import Inject
from pywire.container.keys import ServiceKey
from pywire.container.lifecycle import post_construct, pre_destroy
from pywire.container.metadata import InjectionSlot, MetadataProvider, ReflectionMetadataProvider
from pywire.container.ordering import HIGHEST_PRECEDENCE, LOWEST_PRECEDENCE, order
from pywire.container.plugins import (
    InMemoryPluginLocator,
    ModulePluginLocator,
    PluginLocator,
    plugin,
)
from pywire.container.registration import Registration
from pywire.container.registry import Owner, ServiceRegistry
from pywire.container.sources import FunctionFactory, Instance, PluginFactory, TypeFactory
from pywire.container.types import RegistrationState, Scope, TeardownOrder

__all__ = [
    "CircularDependencyError",
    "FunctionFactory",
    "HIGHEST_PRECEDENCE",
    "InMemoryPluginLocator",
    "Inject",
    "InjectionSlot",
    "Instance",
    "LOWEST_PRECEDENCE",
    "MetadataProvider",
    "ModulePluginLocator",
    "NoSuchServiceError",
    "Owner",
    "PluginFactory",
    "PluginLocator",
    "PluginNotFoundError",
    "ReflectionMetadataProvider",
    "Registration",
    "RegistrationState",
    "Scope",
    "ServiceConstructionError",
    "ServiceDestructionError",
    "ServiceExistsError",
    "ServiceKey",
    "ServiceRegistry",
    "TeardownOrder",
    "TypeFactory",
    "order",
    "plugin",
    "post_construct",
    "pre_destroy",
]
