"""Settings surface of the customer-account profile block."""

from fastapi import APIRouter

from pet_profiles.admin.dependencies import get_settings
from pet_profiles.admin.schemas import ExtensionField, ExtensionSettingsOut

router = APIRouter(prefix="/api/extension", tags=["extension"])

DEFAULT_HEADING = "Your Pet Profile"

FIELD_LABELS = {
    "pet_type": "Pet Type",
    "stress_level": "Stress Level",
    "drug_usage": "Drug Usage",
    "pet_age": "Pet Age",
    "pet_weight": "Pet Weight",
}


@router.get("/settings", response_model=ExtensionSettingsOut)
async def extension_settings():
    config = get_settings().extension
    hidden = set()
    if not config.show_drug_usage:
        hidden.add("drug_usage")
    if not config.show_weight:
        hidden.add("pet_weight")

    return ExtensionSettingsOut(
        heading=config.heading or DEFAULT_HEADING,
        show_weight=config.show_weight,
        show_drug_usage=config.show_drug_usage,
        fields=[
            ExtensionField(key=key, label=label)
            for key, label in FIELD_LABELS.items()
            if key not in hidden
        ],
    )
