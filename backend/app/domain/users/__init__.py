"""User domain."""
from .models import ADMIN_ROLES, LISTING_ROLES, User, UserRole

__all__ = ["ADMIN_ROLES", "LISTING_ROLES", "User", "UserRole"]
