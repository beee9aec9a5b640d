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
"""StructlogAdapter — default LoggingPort, structlog on top of stdlib logging."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from pywire.logging.settings import LoggingSettings, to_level

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


class StructlogAdapter:
    """Configures structlog and the stdlib root handler from LoggingSettings."""

    def __init__(self) -> None:
        self._settings = LoggingSettings()

    @property
    def settings(self) -> LoggingSettings:
        """Settings applied by the last ``configure`` call."""
        return self._settings

    def configure(self, settings: LoggingSettings) -> None:
        self._settings = settings

        structlog.configure(
            processors=_processors(settings.format),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=to_level(settings.root_level),
            force=True,
        )

        for name, level in settings.module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(to_level(level))


def _processors(fmt: str) -> list[structlog.types.Processor]:
    if fmt == "json":
        # ConsoleRenderer renders exc_info on its own.
        return [*_SHARED_PROCESSORS, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [*_SHARED_PROCESSORS, structlog.dev.ConsoleRenderer()]
