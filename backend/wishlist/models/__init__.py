from wishlist.models.refresh_token import RefreshToken
from wishlist.models.user import User

__all__ = [
    "RefreshToken",
    "User",
]
