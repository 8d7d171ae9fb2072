"""
Smart route planner.

Builds a delivery route for a single mover with a greedy, single forward
pass over time:

1. Drop jobs with unusable pickup/dropoff coordinates or a handling time
   that runs past the end of the calendar.
2. Drop jobs whose scheduled time falls outside the mover's availability.
3. Walk the remaining jobs in scheduled-time order (input order breaks ties)
   and accept the first one the mover can reach before its scheduled time
   without exceeding the optional active-duration budget.
4. Repeat from the accepted job's dropoff until nothing more is feasible.

This is a heuristic, not an optimal scheduler: it never backtracks or
reorders an accepted prefix.
"""

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Iterable, List, NamedTuple, Optional, Tuple

import pytz
from pydantic import BaseModel, Field, field_validator

from .availability import is_within_availability
from .models import (
    AvailabilitySchedule, CandidateJob, Location, Mover, RouteMetrics, RouteStop, SmartRoute
)
from .routing import (
    AVERAGE_SPEED_KMH, BASE_JOB_MINUTES, JOB_MINUTES_PER_M3,
    calculate_distance_km, calculate_travel_time, estimate_job_duration, is_valid_location
)

logger = logging.getLogger(__name__)

MoverLookup = Callable[[int], Optional[Mover]]
JobListing = Callable[[], List[CandidateJob]]


class RoutePlanningError(Exception):
    """Raised when the mover or job collaborators fail during planning."""


class PlannerConfig(BaseModel):
    """Tunable constants of the planner."""
    average_speed_kmh: float = Field(default=AVERAGE_SPEED_KMH, gt=0)
    base_job_minutes: float = Field(default=BASE_JOB_MINUTES, ge=0)
    job_minutes_per_m3: float = Field(default=JOB_MINUTES_PER_M3, ge=0)
    schedule_timezone: str = "UTC"  # Zone the availability schedules are written in
    require_full_slot: bool = False  # Job must also finish inside the availability range

    @field_validator('schedule_timezone')
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"Unknown time zone {v!r}") from e
        return v

    @classmethod
    def from_settings(cls, settings: dict) -> "PlannerConfig":
        return cls(
            average_speed_kmh=settings.get("average_speed_kmh", AVERAGE_SPEED_KMH),
            base_job_minutes=settings.get("base_job_minutes", BASE_JOB_MINUTES),
            job_minutes_per_m3=settings.get("job_minutes_per_m3", JOB_MINUTES_PER_M3),
            schedule_timezone=settings.get("schedule_timezone", "UTC"),
            require_full_slot=settings.get("require_full_slot", False),
        )

    @property
    def schedule_tz(self) -> tzinfo:
        return pytz.timezone(self.schedule_timezone)

    def job_duration(self, volume: float) -> float:
        return estimate_job_duration(volume, self.base_job_minutes, self.job_minutes_per_m3)


class RouteState(NamedTuple):
    """Accumulator threaded through the greedy pass."""
    location: Location  # Where the mover is now
    clock: datetime  # When the mover is free again
    active_minutes: float  # Travel + handling so far, idle waiting excluded
    stops: Tuple[RouteStop, ...] = ()


class CandidateEvaluation(NamedTuple):
    job: CandidateJob
    distance_km: float
    travel_minutes: float
    handling_minutes: float
    arrival_time: datetime
    on_time: bool
    within_budget: bool

    @property
    def feasible(self) -> bool:
        return self.on_time and self.within_budget


# --- Filtering ---

def has_valid_locations(job: CandidateJob) -> bool:
    return is_valid_location(job.pickup_address) and is_valid_location(job.dropoff_address)


def estimated_finish_time(job: CandidateJob, config: PlannerConfig) -> Optional[datetime]:
    """Scheduled time plus handling time, or None if it is past datetime's range."""
    try:
        return job.scheduled_time + timedelta(minutes=config.job_duration(job.volume))
    except (OverflowError, ValueError):
        return None


def filter_candidate_jobs(
    jobs: Iterable[CandidateJob],
    schedule: Optional[AvailabilitySchedule],
    config: Optional[PlannerConfig] = None,
) -> List[CandidateJob]:
    """
    Removes jobs the mover can never take.

    Args:
        jobs: Candidate jobs from the job catalog.
        schedule: The mover's weekly availability.
        config: Planner configuration (time zone, slot rule, durations).

    Returns:
        The jobs with valid pickup/dropoff coordinates and a representable
        finish time whose scheduled time falls within the mover's
        availability, in input order.
    """
    config = config or PlannerConfig()
    tz = config.schedule_tz
    eligible = []
    for job in jobs:
        if not has_valid_locations(job):
            logger.debug(
                "Job %s excluded for missing/invalid location (pickup=%s, dropoff=%s)",
                job.id, job.pickup_address, job.dropoff_address,
            )
            continue
        if estimated_finish_time(job, config) is None:
            logger.warning("Job %s excluded, handling time for volume %s is out of range", job.id, job.volume)
            continue
        duration = config.job_duration(job.volume) if config.require_full_slot else 0
        if not is_within_availability(job.scheduled_time, schedule, tz=tz, duration_minutes=duration):
            logger.debug("Job %s excluded by availability (scheduled %s)", job.id, job.scheduled_time)
            continue
        eligible.append(job)
    return eligible


# --- Greedy pass ---

def evaluate_candidate(
    state: RouteState,
    job: CandidateJob,
    config: PlannerConfig,
    max_duration: Optional[float] = None,
) -> CandidateEvaluation:
    """Computes travel, handling and feasibility of taking `job` next."""
    distance = calculate_distance_km(state.location, job.pickup_address)
    travel = calculate_travel_time(distance, config.average_speed_kmh)
    handling = config.job_duration(job.volume)
    arrival = state.clock + timedelta(minutes=travel)

    within_budget = True
    if max_duration is not None:
        within_budget = state.active_minutes + (handling + travel) <= max_duration

    return CandidateEvaluation(
        job=job,
        distance_km=distance,
        travel_minutes=travel,
        handling_minutes=handling,
        arrival_time=arrival,
        on_time=arrival <= job.scheduled_time,  # Early arrival waits, late arrival is out
        within_budget=within_budget,
    )


def select_next_job(
    state: RouteState,
    remaining: List[CandidateJob],
    config: PlannerConfig,
    max_duration: Optional[float] = None,
) -> Optional[CandidateEvaluation]:
    """Returns the first feasible candidate in `remaining`, or None."""
    for job in remaining:
        evaluation = evaluate_candidate(state, job, config, max_duration)
        if evaluation.feasible:
            return evaluation
    return None


def advance_route_state(state: RouteState, evaluation: CandidateEvaluation) -> RouteState:
    """Accepts the evaluated job and returns the state after completing it."""
    job = evaluation.job
    start_time = job.scheduled_time
    stop = RouteStop(
        job_id=job.id,
        order_id=job.order_id,
        student_id=job.student_id,
        job_type=job.job_type,
        volume=job.volume,
        price=job.price,
        pickup_address=job.pickup_address,
        dropoff_address=job.dropoff_address,
        scheduled_time=job.scheduled_time,
        estimated_start_time=start_time,
        estimated_duration=evaluation.handling_minutes,
        distance_from_previous=evaluation.distance_km,
        travel_time_from_previous=evaluation.travel_minutes,
    )
    return RouteState(
        location=job.dropoff_address,
        clock=start_time + timedelta(minutes=evaluation.handling_minutes),
        active_minutes=state.active_minutes + (evaluation.handling_minutes + evaluation.travel_minutes),
        stops=state.stops + (stop,),
    )


def build_route(
    jobs: Iterable[CandidateJob],
    start_location: Location,
    start_time: datetime,
    max_duration: Optional[float] = None,
    config: Optional[PlannerConfig] = None,
) -> List[RouteStop]:
    """
    Greedily builds a feasible route.

    Jobs are expected to have passed `filter_candidate_jobs` already.

    Args:
        jobs: Eligible candidate jobs.
        start_location: Where the mover starts.
        start_time: When the mover starts (timezone-aware).
        max_duration: Optional budget of active minutes (travel + handling).
        config: Planner configuration.

    Returns:
        Route stops in acceptance order, which is also chronological.
    """
    config = config or PlannerConfig()
    # sorted() is stable, so equal scheduled times keep their input order
    remaining = sorted(jobs, key=lambda j: j.scheduled_time)
    state = RouteState(location=start_location, clock=start_time, active_minutes=0.0)

    while remaining:
        evaluation = select_next_job(state, remaining, config, max_duration)
        if evaluation is None:
            logger.info("No more feasible jobs (%d jobs remaining but none can be reached in time)", len(remaining))
            break
        state = advance_route_state(state, evaluation)
        remaining = [j for j in remaining if j is not evaluation.job]

    return list(state.stops)


# --- Metrics ---

def calculate_route_metrics(route: List[RouteStop]) -> RouteMetrics:
    """Sums earnings, distance and duration over a route."""
    if not route:
        return RouteMetrics()

    total_earnings = sum(stop.price for stop in route)
    total_distance = sum(stop.distance_from_previous for stop in route)
    total_duration = sum(stop.estimated_duration + stop.travel_time_from_previous for stop in route)
    earnings_per_hour = total_earnings / (total_duration / 60) if total_duration > 0 else 0.0

    return RouteMetrics(
        total_earnings=total_earnings,
        total_jobs=len(route),
        total_distance=total_distance,
        total_duration=total_duration,
        earnings_per_hour=earnings_per_hour,
    )


# --- Planning operation ---

def empty_route(location: Location) -> SmartRoute:
    return SmartRoute(route=[], metrics=RouteMetrics(), start_location=location)


def calculate_smart_route(
    mover_id: int,
    current_location: Location,
    find_mover: MoverLookup,
    list_available_jobs: JobListing,
    max_duration: Optional[float] = None,
    now: Optional[datetime] = None,
    config: Optional[PlannerConfig] = None,
) -> SmartRoute:
    """
    Plans a route for a mover starting from their current location.

    Inputs are assumed validated (coordinates in range, positive budget).
    An unknown mover, a mover without availability, or no eligible jobs all
    produce an empty route.

    Raises:
        RoutePlanningError: If either collaborator fails.
    """
    config = config or PlannerConfig()
    start_time = now or datetime.now(timezone.utc)
    if start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=timezone.utc)

    try:
        mover = find_mover(mover_id)
        if mover is None or mover.availability is None:
            logger.warning("Mover %s not found or has no availability", mover_id)
            return empty_route(current_location)
        available_jobs = list_available_jobs()
    except Exception as e:
        logger.exception("Error calculating smart route for mover %s", mover_id)
        raise RoutePlanningError("Failed to calculate smart route") from e

    if not available_jobs:
        logger.info("No available jobs found")
        return empty_route(current_location)

    eligible_jobs = filter_candidate_jobs(available_jobs, mover.availability, config)
    if not eligible_jobs:
        logger.info("No jobs match availability of mover %s", mover_id)
        return empty_route(current_location)

    logger.debug("Building route from %d candidate jobs", len(eligible_jobs))
    route = build_route(eligible_jobs, current_location, start_time, max_duration, config)
    metrics = calculate_route_metrics(route)

    logger.info(
        "Route complete: %d jobs, %.0f minutes total, $%.2f earnings",
        metrics.total_jobs, metrics.total_duration, metrics.total_earnings,
    )
    return SmartRoute(route=route, metrics=metrics, start_location=current_location)
