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
"""RegistryContext — owns a ServiceRegistry for the lifetime of an application."""

from __future__ import annotations

import time
from collections.abc import Iterable
from types import TracebackType
from typing import Any

from pywire.container.keys import KeyLike
from pywire.container.metadata import MetadataProvider
from pywire.container.plugins import PluginLocator
from pywire.container.registry import ServiceRegistry
from pywire.container.types import Scope
from pywire.core.config import Config
from pywire.logging.port import LoggingPort
from pywire.logging.settings import LoggingSettings
from pywire.logging.structlog_adapter import StructlogAdapter


class RegistryContext:
    """Binds a registry's lifetime to application start and stop.

    The context:
    - configures logging from the ``pywire.logging`` section
    - builds the registry from configuration
    - registers the Config object under its class key
    - resolves eager services on ``start()``
    - tears down every scope on ``close()``

    Usage::

        with RegistryContext(Config.from_sources(".")) as ctx:
            ctx.registry.register_type(Database)
            ctx.start(eager=[Database])
            ...
    """

    def __init__(
        self,
        config: Config | None = None,
        metadata: MetadataProvider | None = None,
        plugins: PluginLocator | None = None,
        logging_port: LoggingPort | None = None,
    ) -> None:
        self._config = config if config is not None else Config.defaults()
        self._logging = logging_port or StructlogAdapter()
        self._logging.configure(self._config.bind(LoggingSettings))
        self._logger = self._logging.get_logger("pywire.context")

        self._registry = ServiceRegistry.from_config(self._config, metadata=metadata, plugins=plugins)
        self._registry.register_instance(Config, self._config, scope=Scope.APPLICATION)
        self._started = False
        self._closed = False

    @property
    def config(self) -> Config:
        return self._config

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self, eager: Iterable[KeyLike] = ()) -> None:
        """Mark the context started, constructing the *eager* services first."""
        if self._closed:
            raise RuntimeError("RegistryContext is closed and cannot be restarted")
        began = time.perf_counter()
        keys = list(eager)
        for key in keys:
            self._registry.resolve(key)
        self._started = True
        self._logger.info(
            "context_started",
            eager=len(keys),
            services=len(self._registry),
            elapsed=round(time.perf_counter() - began, 3),
        )

    def close(self) -> None:
        """Tear down all scopes. Calling it again is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._started = False
        try:
            self._registry.teardown_all()
        finally:
            self._logger.info("context_closed")

    def __enter__(self) -> RegistryContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> Any:
        self.close()
        return None
