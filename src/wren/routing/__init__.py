"""Mount-point routing: strips the controller prefix before resolution."""

from wren.routing.router import Mount, MountMatch, Router

__all__ = ["Mount", "MountMatch", "Router"]
