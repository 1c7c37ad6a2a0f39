import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from pydantic import AnyHttpUrl, BaseModel

from budget_recipes.app.api.deps import (
    enforce_rate_limit,
    get_detailed_cost_calculator,
    get_discovery_pipeline,
)
from budget_recipes.app.services.discovery.budget_selector import parse_budget
from budget_recipes.app.services.discovery.detailed_cost import DetailedCostCalculator
from budget_recipes.app.services.discovery.fetcher import validate_public_url
from budget_recipes.app.services.discovery.models import DetailedCostResult, DiscoveryRequest, DiscoveryResult
from budget_recipes.app.services.discovery.pipeline import DiscoveryPipeline
from budget_recipes.app.services.discovery.query_key import split_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recipes", tags=["discovery"], dependencies=[Depends(enforce_rate_limit)])

ERROR_STATUS = {
    "robots_blocked": status.HTTP_403_FORBIDDEN,
    "access_denied": status.HTTP_404_NOT_FOUND,
    "timeout": status.HTTP_408_REQUEST_TIMEOUT,
}


class DetailedCostRequest(BaseModel):
    url: AnyHttpUrl
    region_hint: Optional[str] = None


@router.get("/discover", response_model=DiscoveryResult)
async def discover_recipes(
    ingredients: str = Query("", description="Comma-separated ingredient names"),
    budget: str = Query("", description="Budget ceiling in CAD; empty for none"),
    allergies: str = Query(""),
    filters: str = Query(""),
    meal_type: Optional[str] = Query(None),
    region_hint: Optional[str] = Query(None),
    detailed_cost_count: int = Query(0, ge=0, le=15),
    pipeline: DiscoveryPipeline = Depends(get_discovery_pipeline),
):
    try:
        parse_budget(budget)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error_code": "invalid_budget", "message": str(exc)},
        )
    request = DiscoveryRequest(
        ingredients=split_csv(ingredients),
        budget=budget,
        allergies=split_csv(allergies),
        filters=split_csv(filters),
        meal_type=meal_type,
        region_hint=region_hint,
        detailed_cost_count=detailed_cost_count,
    )
    return await pipeline.discover(request)


@router.post("/detailed-cost", response_model=DetailedCostResult)
async def detailed_cost(
    payload: DetailedCostRequest,
    calculator: DetailedCostCalculator = Depends(get_detailed_cost_calculator),
):
    url = str(payload.url)
    try:
        validate_public_url(url)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error_code": "invalid_url", "message": str(exc)},
        )
    result = await calculator.calculate(url, payload.region_hint)
    if result.error_code in ERROR_STATUS:
        # The fallback estimate still goes back with the error status.
        return JSONResponse(status_code=ERROR_STATUS[result.error_code], content=result.model_dump(mode="json"))
    return result
