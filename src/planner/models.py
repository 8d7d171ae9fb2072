from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .availability import DayOfWeek, parse_time_of_day


# --- Enums ---

class JobType(str, Enum):
    STORAGE = 'STORAGE'  # Pickup from student to warehouse
    RETURN = 'RETURN'  # Delivery from warehouse to return address

class JobStatus(str, Enum):
    AVAILABLE = 'AVAILABLE'
    ACCEPTED = 'ACCEPTED'
    AWAITING_STUDENT_CONFIRMATION = 'AWAITING_STUDENT_CONFIRMATION'
    PICKED_UP = 'PICKED_UP'
    IN_STORAGE = 'IN_STORAGE'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'


# --- Availability ---

TimeRange = Tuple[str, str]  # ("HH:MM", "HH:MM"), start strictly before end
AvailabilitySchedule = Dict[DayOfWeek, List[TimeRange]]


def validate_schedule(schedule: Optional[AvailabilitySchedule]) -> Optional[AvailabilitySchedule]:
    """
    Checks every time range of a weekly schedule.

    Raises:
        ValueError: If a time is not in HH:MM format or a range does not
                    start before it ends.
    """
    if schedule is None:
        return None
    for day, ranges in schedule.items():
        for start, end in ranges:
            if parse_time_of_day(start) >= parse_time_of_day(end):
                raise ValueError(f"Start time must be before end time ({day.value} {start}-{end})")
    return schedule


# --- Core Models ---

class Location(BaseModel):
    """A geographic point. Coordinates may be missing on bad job data."""
    lat: Optional[float] = None
    lon: Optional[float] = None
    formatted_address: Optional[str] = None

class Mover(BaseModel):
    """A mover as seen by the route planner."""
    id: int
    name: Optional[str] = None
    availability: Optional[AvailabilitySchedule] = None  # None = never set

    @field_validator('availability')
    @classmethod
    def check_time_ranges(cls, v):
        return validate_schedule(v)

class CandidateJob(BaseModel):
    """An unassigned job offered to movers. Read-only to the planner."""
    id: int
    order_id: int
    student_id: int
    job_type: JobType
    volume: float = Field(ge=0, allow_inf_nan=False)  # Cubic meters
    price: float = Field(ge=0, allow_inf_nan=False)
    pickup_address: Optional[Location] = None
    dropoff_address: Optional[Location] = None
    scheduled_time: datetime  # Pickup must start no later than this

    @field_validator('scheduled_time')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        # Naive timestamps (e.g. from SQLite) are stored in UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# --- Route Planner Output ---

class RouteStop(BaseModel):
    """One accepted job with its timing and distance annotations."""
    model_config = ConfigDict(frozen=True)

    job_id: int
    order_id: int
    student_id: int
    job_type: JobType
    volume: float
    price: float
    pickup_address: Location
    dropoff_address: Location
    scheduled_time: datetime
    estimated_start_time: datetime
    estimated_duration: float  # Handling time, minutes
    distance_from_previous: float  # Kilometers
    travel_time_from_previous: float  # Minutes

class RouteMetrics(BaseModel):
    """Aggregate figures over a built route."""
    total_earnings: float = 0.0
    total_jobs: int = 0
    total_distance: float = 0.0  # Kilometers
    total_duration: float = 0.0  # Minutes, travel + handling
    earnings_per_hour: float = 0.0

class SmartRoute(BaseModel):
    """Result of a planning request."""
    route: List[RouteStop] = Field(default_factory=list)
    metrics: RouteMetrics = Field(default_factory=RouteMetrics)
    start_location: Location

    @property
    def message(self) -> str:
        if not self.route:
            return "No jobs available matching your schedule"
        return f"Found {len(self.route)} job(s) in optimized route"
