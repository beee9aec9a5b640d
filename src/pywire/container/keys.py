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
"""Service keys — the identity a registration is addressed by."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Union

KeyLike = Union["ServiceKey", str, type]


@dataclass(frozen=True, order=True)
class ServiceKey:
    """Opaque, hashable identifier naming an interface contract or a service type.

    Usage::

        ServiceKey("Logger")
        ServiceKey.of(Logger)          # -> ServiceKey("myapp.logging.Logger")
        ServiceKey.of("Logger")        # -> ServiceKey("Logger")
    """

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Service key name must be a non-empty string, got {self.name!r}")

    @classmethod
    def of(cls, value: KeyLike) -> ServiceKey:
        """Normalize a key, a string or a class into a ServiceKey."""
        if isinstance(value, ServiceKey):
            return value
        if isinstance(value, str):
            return cls(value)
        if inspect.isclass(value):
            return cls(f"{value.__module__}.{value.__qualname__}")
        raise TypeError(
            f"Cannot derive a service key from {value!r}; "
            f"expected ServiceKey, str or class"
        )

    @property
    def short_name(self) -> str:
        """Last dotted component of the name, used in diagnostics."""
        return self.name.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        return self.name
