from sherp_auth.models.revoked_token import RevokedToken
from sherp_auth.models.user import User

__all__ = [
    "RevokedToken",
    "User",
]
