"""FastAPI dependencies for the admin API."""

from fastapi import Header, HTTPException, status

from pet_profiles.admin.session_token import bearer_token, decode_session_token, shop_from_dest
from pet_profiles.config.settings import Settings, settings as default_settings

# Will be set by app.py at startup
_settings: Settings = default_settings


def set_settings(value: Settings):
    global _settings
    _settings = value


def get_settings() -> Settings:
    return _settings


def _configured_shop() -> str:
    return shop_from_dest(_settings.shopify.shop_domain)


async def get_current_shop(authorization: str | None = Header(default=None)) -> str:
    """Validate the embedded-admin session token from the Authorization header.

    Returns the shop domain on success; raises 401 otherwise.
    """
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    payload = decode_session_token(token, _settings)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    shop = shop_from_dest(payload.get("dest"))
    if shop != _configured_shop():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token issued for a different shop",
        )
    return shop
