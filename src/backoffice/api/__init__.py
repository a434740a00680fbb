"""Back-office API package."""

from backoffice.api.routes import admin_router

__all__ = ["admin_router"]
