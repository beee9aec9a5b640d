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
"""Inject marker for property-level dependency injection."""

from __future__ import annotations

from pywire.container.keys import KeyLike, ServiceKey


class Inject:
    """Marks a class attribute as an injectable slot.

    Usage::

        class OrderService:
            repo: OrderRepository = Inject()
            log: Any = Inject("Logger")
            metrics: Metrics = Inject(required=False)

    After the registry constructs an instance with its standard constructor,
    each marked attribute is resolved and assigned via ``setattr``. Without
    an explicit key the key is derived from the attribute's annotation.

    Args:
        key: Service key to resolve. Defaults to the annotated type's key.
        required: If ``False``, an unregistered key leaves the attribute as
            ``None`` instead of failing. Defaults to ``True``.
    """

    __slots__ = ("key", "required")

    def __init__(self, key: KeyLike | None = None, *, required: bool = True) -> None:
        self.key = ServiceKey.of(key) if key is not None else None
        self.required = required

    def __repr__(self) -> str:
        parts: list[str] = []
        if self.key is not None:
            parts.append(repr(self.key.name))
        if not self.required:
            parts.append("required=False")
        return f"Inject({', '.join(parts)})"
