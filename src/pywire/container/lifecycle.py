"""Lifecycle annotations and hook invocation: @post_construct and @pre_destroy."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable)

POST_CONSTRUCT_ATTR = "__pywire_post_construct__"
PRE_DESTROY_ATTR = "__pywire_pre_destroy__"

POST_CONSTRUCT_NAME = "on_init"
PRE_DESTROY_NAME = "on_destroy"


def post_construct(func: F) -> F:
    """Mark a method to be called once, after construction and injection."""
    setattr(func, POST_CONSTRUCT_ATTR, True)
    return func


def pre_destroy(func: F) -> F:
    """Mark a method to be called when the registry destroys the instance."""
    setattr(func, PRE_DESTROY_ATTR, True)
    return func


def find_hooks(instance: Any, marker: str, conventional_name: str) -> list[Callable[[], Any]]:
    """Return the bound hook methods of *instance*.

    Methods carrying *marker* win; the conventional method name is only
    used when no method is marked.
    """
    cls = type(instance)
    marked = [
        getattr(instance, name)
        for name in dir(cls)
        if getattr(getattr(cls, name, None), marker, False)
    ]
    if marked:
        return marked
    hook = getattr(instance, conventional_name, None)
    if hook is not None and callable(hook):
        return [hook]
    return []


def call_lifecycle_hooks(instance: Any, marker: str, conventional_name: str) -> int:
    """Call every hook of *instance* synchronously, returning how many ran."""
    hooks = find_hooks(instance, marker, conventional_name)
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError(
                f"Lifecycle hook {type(instance).__qualname__}.{hook.__name__} is asynchronous; "
                f"registry hooks must complete synchronously"
            )
    return len(hooks)
