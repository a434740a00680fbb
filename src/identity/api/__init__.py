"""Identity domain API package."""

from identity.api.routes import admin_user_router, auth_router

__all__ = ["auth_router", "admin_user_router"]
