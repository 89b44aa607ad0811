"""Shopify session token (JWT) verification.

Both the embedded admin app and the customer-account extension send an
HS256 session token signed with the app's API secret, with the app's API
key as audience. ``dest`` is the shop URL and ``sub`` the user (for the
customer-account extension, the customer GID).
"""

from typing import Optional

import jwt

from pet_profiles.config.settings import Settings
from pet_profiles.utils.logger import get_logger

logger = get_logger(__name__)

_ALGORITHM = "HS256"
# Shopify's clocks and ours may drift slightly; tokens live one minute
_LEEWAY_SECONDS = 10


def decode_session_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode and validate a session token. Returns the payload or ``None``."""
    if not token or not settings.shopify.api_secret:
        return None
    try:
        return jwt.decode(
            token,
            settings.shopify.api_secret,
            algorithms=[_ALGORITHM],
            audience=settings.shopify.api_key or None,
            leeway=_LEEWAY_SECONDS,
            options={"verify_aud": bool(settings.shopify.api_key)},
        )
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected session token", reason=str(e))
        return None


def shop_from_dest(dest: Optional[str]) -> str:
    """``https://shop.myshopify.com`` -> ``shop.myshopify.com``."""
    if not dest:
        return ""
    return dest.replace("https://", "").replace("http://", "").rstrip("/")


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()
