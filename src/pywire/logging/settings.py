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
"""Logging settings bound from the ``pywire.logging`` configuration section."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from pywire.core.config import config_properties


@config_properties(prefix="pywire.logging")
class LoggingSettings(BaseModel):
    """Output format plus log levels keyed by logger name.

    The ``root`` entry of ``level`` sets the root logger; every other entry
    names a logger such as ``pywire.container``.
    """

    format: Literal["console", "json"] = "console"
    level: dict[str, str] = Field(default_factory=lambda: {"root": "INFO"})

    @field_validator("format", mode="before")
    @classmethod
    def _lower_format(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("level", mode="before")
    @classmethod
    def _upper_levels(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(name): str(level).upper() for name, level in value.items()}
        return value

    @property
    def root_level(self) -> str:
        return self.level.get("root", "INFO")

    @property
    def module_levels(self) -> dict[str, str]:
        return {name: level for name, level in self.level.items() if name != "root"}


def to_level(level: str) -> int:
    """Numeric stdlib level for *level*, INFO when the name is unknown."""
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO
