from dataclasses import dataclass, field
from typing import Any, Dict

import jwt
from fastapi import Depends, HTTPException, Request

from core.settings import settings


@dataclass(frozen=True)
class CurrentAccount:
    """Identity carried by a verified access token.

    Tokens are issued by the auth service; `features` holds the boolean plan
    flags the renderer consults (for example `removeBranding`).
    """
    id: str
    role: str = "user"
    email: str | None = None
    features: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def has_feature(self, name: str) -> bool:
        return self.features.get(name) is True


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify a JWT access token and return its claims.

    Raises:
        HTTPException: If the token is invalid or expired (401)
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")


def get_current_account(request: Request) -> CurrentAccount:
    """Get the currently authenticated account from the Bearer token."""
    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Missing or invalid Authorization header"
        )

    token = auth_header.replace("Bearer ", "")
    decoded = decode_access_token(token)

    sub = decoded.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    features = decoded.get("features")
    return CurrentAccount(
        id=str(sub),
        role=decoded.get("role", "user"),
        email=decoded.get("email"),
        features=features if isinstance(features, dict) else {},
    )


def get_current_account_admin(
    account: CurrentAccount = Depends(get_current_account)
) -> CurrentAccount:
    """Get the currently authenticated account and verify admin role.

    Raises:
        HTTPException: If account is not admin (403)
    """
    if not account.is_admin:
        raise HTTPException(
            status_code=403,
            detail="Admin access required"
        )
    return account
