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
"""Service registration metadata and its construction state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pywire.container.keys import ServiceKey
from pywire.container.sources import Instance, Source, describe_source
from pywire.container.types import RegistrationState, Scope, ScopeTag


@dataclass
class Registration:
    """Metadata for a registered service.

    ``state`` moves ``UNCONSTRUCTED -> CONSTRUCTING -> CONSTRUCTED`` at most
    once; any failure on the way lands in ``FAILED``, which is terminal.
    """

    key: ServiceKey
    source: Source
    scope: ScopeTag = Scope.APPLICATION
    weak: bool = False
    state: RegistrationState = RegistrationState.UNCONSTRUCTED
    instance: Any = field(default=None, repr=False)
    error: BaseException | None = field(default=None, repr=False)
    sequence: int = 0

    @property
    def held_instance(self) -> Any:
        """The object the registry currently owns for this key, if any."""
        if self.state is RegistrationState.CONSTRUCTED:
            return self.instance
        if isinstance(self.source, Instance):
            return self.source.obj
        return None

    @property
    def description(self) -> str:
        kind = "weak" if self.weak else "strong"
        return f"{kind} {describe_source(self.source)}, scope={self.scope!r}"

    def begin(self) -> None:
        if self.state is not RegistrationState.UNCONSTRUCTED:
            raise RuntimeError(f"Registration '{self.key}' cannot start construction from {self.state.name}")
        self.state = RegistrationState.CONSTRUCTING

    def complete(self, instance: Any) -> None:
        if self.state is not RegistrationState.CONSTRUCTING:
            raise RuntimeError(f"Registration '{self.key}' cannot complete from {self.state.name}")
        self.instance = instance
        self.state = RegistrationState.CONSTRUCTED

    def fail(self, error: BaseException) -> None:
        self.instance = None
        self.error = error
        self.state = RegistrationState.FAILED
