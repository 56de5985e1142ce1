"""Database driver layer: provisioning, connections and catalog introspection."""

from adapters.engine import Engine
from adapters.factory import get_driver, register_driver, supported_drivers

__all__ = ["Engine", "get_driver", "register_driver", "supported_drivers"]
