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
"""Container exceptions — registration conflicts and construction failures."""

from __future__ import annotations

from pywire.container.keys import ServiceKey
from pywire.kernel.exceptions import ConflictException, InfrastructureException


class ServiceExistsError(ConflictException):
    """A non-weak registration already occupies the key.

    The rejected registration is never installed and the existing one is
    left untouched.
    """

    def __init__(self, key: ServiceKey, existing: str = "") -> None:
        self.key = key
        self.existing = existing
        message = f"Service '{key}' is already registered"
        if existing:
            message += f" ({existing})"
        message += "; register it as weak to allow overriding"
        super().__init__(message=message, code="SERVICE_EXISTS", context={"key": key.name})


class ServiceConstructionError(InfrastructureException):
    """A service could not be produced.

    Raised when no registration exists, when a dependency cycle is found,
    when a collaborator cannot produce the type, when a factory raises or
    when property injection fails partway.
    """

    def __init__(self, key: ServiceKey | None, reason: str, *, code: str = "SERVICE_CONSTRUCTION") -> None:
        self.key = key
        self.reason = reason
        if key is not None:
            message = f"Failed to construct service '{key}': {reason}"
        else:
            message = f"Failed to construct service: {reason}"
        context = {"key": key.name} if key is not None else {}
        super().__init__(message=message, code=code, context=context)


class NoSuchServiceError(ServiceConstructionError):
    """No registration exists for the requested key."""

    def __init__(
        self,
        key: ServiceKey,
        *,
        required_by: str | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        self.required_by = required_by
        self.suggestions = suggestions or []

        headline = f"No service registered under '{key}'"
        lines = [f"NoSuchServiceError: {headline}"]
        if required_by:
            lines.append("")
            lines.append(f"  Required by: {required_by}")
        if self.suggestions:
            lines.append("")
            lines.append(f"  Similar registered keys: {', '.join(self.suggestions)}")

        super().__init__(key, headline, code="NO_SUCH_SERVICE")
        self.args = ("\n".join(lines),)

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class CircularDependencyError(ServiceConstructionError):
    """A service was requested while it was still being constructed.

    The ``chain`` attribute holds the resolution path in the order the keys
    were entered, ending with the key that closed the cycle.
    """

    def __init__(self, *, chain: list[ServiceKey], current: ServiceKey) -> None:
        self.chain = [*chain, current]
        chain_str = " -> ".join(k.name for k in self.chain)
        headline = f"Circular dependency: {chain_str}"

        lines = [f"CircularDependencyError: {headline}"]
        lines.append("")
        lines.append("  Suggestion: Break the cycle with property injection or a post-construct hook")

        super().__init__(current, headline, code="CIRCULAR_DEPENDENCY")
        self.args = ("\n".join(lines),)

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class PluginNotFoundError(ServiceConstructionError):
    """The plugin locator found no candidate for a category/selector pair."""

    def __init__(self, category: str, selector: str | None = None, *, candidates: list[str] | None = None) -> None:
        self.category = category
        self.selector = selector
        self.candidates = candidates or []
        if selector:
            reason = f"no plugin with key '{selector}' in category '{category}'"
        else:
            reason = f"no plugin in category '{category}'"
        if self.candidates:
            reason += f" (available keys: {', '.join(self.candidates)})"
        super().__init__(None, reason, code="PLUGIN_NOT_FOUND")


class ServiceDestructionError(InfrastructureException):
    """A pre-destroy hook raised while a scope was being torn down.

    Teardown always completes before this is raised; ``errors`` holds every
    failure in the order it happened.
    """

    def __init__(self, scope: object, errors: list[tuple[str, BaseException]]) -> None:
        self.scope = scope
        self.errors = errors
        names = ", ".join(name for name, _ in errors)
        super().__init__(
            message=f"Pre-destroy hooks failed while tearing down scope {scope!r}: {names}",
            code="SERVICE_DESTRUCTION",
            context={"scope": repr(scope)},
        )
