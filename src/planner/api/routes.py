import logging
from functools import partial
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status as http_status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..db.database import get_db
from ..models import Location
from ..planner import PlannerConfig, RoutePlanningError, calculate_smart_route
from .deps import get_api_key, get_settings
from .lookups import find_mover_by_id, list_available_jobs, update_mover_availability
from .models import (
    AvailabilityResponse, AvailabilityUpdateRequest, AvailableJobsResponse,
    SmartRouteData, SmartRouteResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/routes/smart", response_model=SmartRouteResponse, tags=["routes"])
def get_smart_route(
    mover_id: int = Query(..., description="ID of the mover requesting a route"),
    current_lat: float = Query(..., ge=-90, le=90, description="Mover's current latitude"),
    current_lon: float = Query(..., ge=-180, le=180, description="Mover's current longitude"),
    max_duration: Optional[float] = Query(None, gt=0, description="Maximum active route duration in minutes"),
    db: Session = Depends(get_db),
    api_key: dict = Depends(get_api_key)
):
    """
    Calculate an optimized job route for a mover based on their availability
    and current location.
    """
    try:
        config = PlannerConfig.from_settings(get_settings())
    except ValidationError as e:
        logger.exception("Invalid route planner settings")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Invalid route planner settings: {e.error_count()} error(s)"
        )

    try:
        result = calculate_smart_route(
            mover_id=mover_id,
            current_location=Location(lat=current_lat, lon=current_lon),
            find_mover=partial(find_mover_by_id, db),
            list_available_jobs=partial(list_available_jobs, db),
            max_duration=max_duration,
            config=config,
        )
    except RoutePlanningError as e:
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return SmartRouteResponse(
        message=result.message,
        data=SmartRouteData(
            route=result.route,
            metrics=result.metrics,
            start_location=result.start_location,
        ),
    )


@router.get("/jobs/available", response_model=AvailableJobsResponse, tags=["jobs"])
def get_available_jobs(db: Session = Depends(get_db), api_key: dict = Depends(get_api_key)):
    """
    Fetch all jobs still open to movers.
    """
    try:
        jobs = list_available_jobs(db)
        return AvailableJobsResponse(message="Available jobs retrieved successfully", jobs=jobs)
    except Exception as e:
        logger.exception("Error fetching available jobs")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch available jobs: {str(e)}"
        )


@router.get("/movers/{mover_id}/availability", response_model=AvailabilityResponse, tags=["movers"])
def get_mover_availability(
    mover_id: int = Path(..., description="The ID of the mover"),
    db: Session = Depends(get_db),
    api_key: dict = Depends(get_api_key)
):
    """
    Fetch a mover's weekly availability schedule.
    """
    try:
        mover = find_mover_by_id(db, mover_id)
        if mover is None:
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail=f"Mover with ID {mover_id} not found"
            )
        return AvailabilityResponse(mover_id=mover.id, availability=mover.availability)
    except HTTPException:
        # Re-raise HTTP exceptions
        raise
    except Exception as e:
        logger.exception("Error fetching availability for mover %s", mover_id)
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch availability: {str(e)}"
        )


@router.put("/movers/{mover_id}/availability", response_model=AvailabilityResponse, tags=["movers"])
def set_mover_availability(
    mover_id: int = Path(..., description="The ID of the mover"),
    update: AvailabilityUpdateRequest = Body(..., description="The new weekly schedule"),
    db: Session = Depends(get_db),
    api_key: dict = Depends(get_api_key)
):
    """
    Replace a mover's weekly availability schedule.
    """
    try:
        mover = update_mover_availability(db, mover_id, update.availability)
        if mover is None:
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail=f"Mover with ID {mover_id} not found"
            )
        logger.info("Updated availability for mover %s", mover_id)
        return AvailabilityResponse(mover_id=mover.id, availability=mover.availability)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error updating availability for mover %s", mover_id)
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update availability: {str(e)}"
        )
