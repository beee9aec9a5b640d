"""Registry settings bound from the ``pywire.registry`` configuration section."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pywire.container.types import TeardownOrder
from pywire.core.config import config_properties


@config_properties(prefix="pywire.registry")
class RegistrySettings(BaseModel):
    """Tunables for :class:`~pywire.container.registry.ServiceRegistry`."""

    model_config = ConfigDict(populate_by_name=True)

    teardown_order: TeardownOrder = Field(default=TeardownOrder.REVERSE, alias="teardown-order")
    thread_safe: bool = Field(default=False, alias="thread-safe")
