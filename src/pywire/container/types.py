"""Container types and enums."""

from collections.abc import Hashable
from enum import Enum, auto
from typing import Union


class Scope(Enum):
    """Built-in destruction scopes.

    Any other hashable value (typically a string) can be used as a
    caller-defined teardown phase.
    """

    APPLICATION = auto()
    SESSION = auto()
    TRANSIENT = auto()


ScopeTag = Union[Scope, Hashable]


class RegistrationState(Enum):
    """Construction state of a single registration."""

    UNCONSTRUCTED = auto()
    CONSTRUCTING = auto()
    CONSTRUCTED = auto()
    FAILED = auto()


class TeardownOrder(Enum):
    """Order in which a scope's services are destroyed."""

    REVERSE = "reverse"
    REGISTRATION = "registration"
