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
"""Plugin precedence — @order decorator and the ranking used to pick a candidate."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T", bound=type)

ORDER_ATTR = "__pywire_order__"

HIGHEST_PRECEDENCE: int = -(2**31)
LOWEST_PRECEDENCE: int = 2**31 - 1
DEFAULT_ORDER: int = 0


def order(value: int) -> Callable[[T], T]:
    """Set the precedence of a plugin class.

    Lower values win when a plugin category is resolved without a selector.
    Undecorated classes rank at ``DEFAULT_ORDER``.
    """
    if not HIGHEST_PRECEDENCE <= value <= LOWEST_PRECEDENCE:
        raise ValueError(f"order value {value} is outside [HIGHEST_PRECEDENCE, LOWEST_PRECEDENCE]")

    def decorator(cls: T) -> T:
        setattr(cls, ORDER_ATTR, value)
        return cls

    return decorator


def get_order(cls: type) -> int:
    return getattr(cls, ORDER_ATTR, DEFAULT_ORDER)


def precedence_key(cls: type) -> tuple[int, str, str]:
    """Rank by ``@order`` first, then module and qualified name so ties are stable."""
    return (get_order(cls), cls.__module__, cls.__qualname__)


def sort_by_precedence(classes: Iterable[type]) -> list[type]:
    return sorted(classes, key=precedence_key)
