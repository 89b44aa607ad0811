"""Profile routes: table, dashboard summary, dimensions and charts."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from pet_profiles.admin.dependencies import get_current_shop
from pet_profiles.admin.schemas import DashboardSummary, DimensionsOut, ProfileTable
from pet_profiles.services.chart_generator import ChartGenerator
from pet_profiles.services.profile_analytics import DIMENSION_CATEGORIES, generate_dimension_data

router = APIRouter(prefix="/api/profiles", tags=["profiles"])

# Will be set by app.py at startup
_dashboard = None
_charts: Optional[ChartGenerator] = None


def set_dashboard(dashboard, charts: ChartGenerator):
    global _dashboard, _charts
    _dashboard = dashboard
    _charts = charts


def _png(image: Optional[bytes]) -> Response:
    if image is None:
        raise HTTPException(status_code=500, detail="Chart rendering failed")
    return Response(content=image, media_type="image/png")


@router.get("", response_model=ProfileTable)
async def list_profiles(
    query: str = "",
    pet_type: list[str] = Query(default=[]),
    stress_level: list[str] = Query(default=[]),
    has: list[str] = Query(default=[]),
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=250),
    _shop: str = Depends(get_current_shop),
):
    result = await _dashboard.load_profiles()
    return ProfileTable(**_dashboard.build_table(
        result,
        query=query,
        pet_types=pet_type,
        stress_levels=stress_level,
        has_fields=has,
        page=page,
        limit=limit,
    ))


@router.get("/summary", response_model=DashboardSummary)
async def profile_summary(_shop: str = Depends(get_current_shop)):
    result = await _dashboard.load_profiles()
    return DashboardSummary(**_dashboard.build_summary(result))


@router.get("/dimensions", response_model=DimensionsOut)
async def profile_dimensions(_shop: str = Depends(get_current_shop)):
    result = await _dashboard.load_profiles()
    return DimensionsOut(
        error=result.error,
        dimensions=generate_dimension_data(result.records),
    )


@router.get("/dimensions/{attribute}/chart.png")
async def dimension_chart(attribute: str, _shop: str = Depends(get_current_shop)):
    if attribute not in DIMENSION_CATEGORIES:
        raise HTTPException(status_code=404, detail=f"Unknown attribute: {attribute}")
    result = await _dashboard.load_profiles()
    if result.error:
        raise HTTPException(status_code=502, detail=result.error)
    buckets = generate_dimension_data(result.records)[attribute]
    return _png(_charts.generate_dimension_chart(attribute, buckets))


@router.get("/trends/chart.png")
async def trends_chart(_shop: str = Depends(get_current_shop)):
    result = await _dashboard.load_profiles()
    if result.error:
        raise HTTPException(status_code=502, detail=result.error)
    summary = _dashboard.build_summary(result)
    return _png(_charts.generate_trend_chart(summary["monthly_trends"]))
