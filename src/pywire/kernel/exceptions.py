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
"""Unified exception hierarchy for PyWire.

All library exceptions inherit from PyWireException, enabling unified
error handling across modules.

Categories:
- BusinessException: Rule violations by the caller (e.g. conflicting registrations)
- InfrastructureException: Failures while producing or releasing services
"""

from __future__ import annotations

# =============================================================================
# Base Exception
# =============================================================================


class PyWireException(Exception):
    """Base exception for all PyWire errors.

    Carries an optional error code and context dict for structured error data.
    Catch PyWireException to handle all library errors, or catch specific
    subclasses for targeted handling.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SERVICE_EXISTS").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(PyWireException):
    """Rule violations caused by the caller."""


class ConflictException(BusinessException):
    """Operation conflicts with current state (e.g. a duplicate registration)."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(PyWireException):
    """Failures while building, wiring or releasing runtime objects."""
