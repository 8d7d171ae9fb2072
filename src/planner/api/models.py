from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

from ..models import (
    AvailabilitySchedule, CandidateJob, Location, RouteMetrics, RouteStop, validate_schedule
)


# --- API Response Models ---

class SmartRouteData(BaseModel):
    """Route, metrics and start point of a planning request."""
    route: List[RouteStop] = Field(default_factory=list)
    metrics: RouteMetrics
    start_location: Location

class SmartRouteResponse(BaseModel):
    """API response model for GET /routes/smart."""
    message: str
    data: Optional[SmartRouteData] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "message": "Found 1 job(s) in optimized route",
            "data": {
                "route": [
                    {
                        "job_id": 12,
                        "order_id": 7,
                        "student_id": 3,
                        "job_type": "STORAGE",
                        "volume": 1.0,
                        "price": 60.0,
                        "pickup_address": {"lat": 49.2606, "lon": -123.2460, "formatted_address": "2205 Lower Mall, Vancouver"},
                        "dropoff_address": {"lat": 49.2276, "lon": -123.0076, "formatted_address": "4700 Kingsway, Burnaby"},
                        "scheduled_time": "2025-06-02T10:00:00Z",
                        "estimated_start_time": "2025-06-02T10:00:00Z",
                        "estimated_duration": 45.0,
                        "distance_from_previous": 0.8,
                        "travel_time_from_previous": 1.2
                    }
                ],
                "metrics": {
                    "total_earnings": 60.0,
                    "total_jobs": 1,
                    "total_distance": 0.8,
                    "total_duration": 46.2,
                    "earnings_per_hour": 77.92
                },
                "start_location": {"lat": 49.2612, "lon": -123.2500, "formatted_address": None}
            }
        }
    })

class AvailableJobsResponse(BaseModel):
    """API response model for the open job catalog."""
    message: str
    jobs: List[CandidateJob] = Field(default_factory=list)

class AvailabilityResponse(BaseModel):
    """API response model for a mover's weekly schedule."""
    mover_id: int
    availability: Optional[AvailabilitySchedule] = None


# --- API Request Models ---

class AvailabilityUpdateRequest(BaseModel):
    """Request model for replacing a mover's weekly schedule."""
    availability: AvailabilitySchedule

    @field_validator('availability')
    @classmethod
    def check_time_ranges(cls, v):
        return validate_schedule(v)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "availability": {
                "MON": [["09:00", "12:00"], ["13:00", "17:00"]],
                "WED": [["08:30", "16:30"]]
            }
        }
    })
