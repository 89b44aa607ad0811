"""App-proxy route the customer-account profile block posts to."""

from fastapi import APIRouter, Header, Response
from fastapi.responses import JSONResponse

from pet_profiles.admin.dependencies import get_settings
from pet_profiles.admin.schemas import ProfileSubmission
from pet_profiles.admin.session_token import bearer_token, decode_session_token, shop_from_dest
from pet_profiles.services.profile_records import extract_local_id
from pet_profiles.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/app-proxy", tags=["app-proxy"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# Will be set by app.py at startup
_submission = None


def set_submission(submission):
    global _submission
    _submission = submission


def _json(body: dict, status_code: int) -> JSONResponse:
    return JSONResponse(content=body, status_code=status_code, headers=CORS_HEADERS)


@router.options("/pet-profile")
async def pet_profile_preflight():
    return Response(
        status_code=204,
        headers={**CORS_HEADERS, "Access-Control-Max-Age": "86400"},
    )


@router.get("/pet-profile")
async def pet_profile_get():
    return Response(content="Not Found", status_code=404, media_type="text/plain")


@router.post("/pet-profile")
async def save_pet_profile(
    body: ProfileSubmission,
    authorization: str | None = Header(default=None),
):
    payload = decode_session_token(bearer_token(authorization), get_settings())
    if not payload or not payload.get("dest") or not payload.get("sub"):
        return _json({"error": "Invalid session token"}, 401)

    shop = shop_from_dest(payload["dest"])
    if shop != shop_from_dest(get_settings().shopify.shop_domain):
        logger.warning("Session token issued for another shop", shop=shop)
        return _json({"error": "Invalid session token"}, 401)

    customer_gid = payload["sub"]
    logger.info(
        "Saving pet profile",
        shop=shop,
        customer_id=extract_local_id(customer_gid),
    )

    result = await _submission.save_profile(customer_gid, body.model_dump())
    if not result.success:
        return _json(result.to_dict(), 500)
    return _json(result.to_dict(), 200)
