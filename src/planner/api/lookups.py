import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from planner.db import models as db_models  # Use db_models alias
from planner.models import (
    AvailabilitySchedule, CandidateJob, JobStatus, Location, Mover
)

logger = logging.getLogger(__name__)


def _to_location(lat: Optional[float], lon: Optional[float], address: Optional[str]) -> Location:
    return Location(lat=lat, lon=lon, formatted_address=address)


def convert_job_to_candidate(job: db_models.Job) -> CandidateJob:
    """Convert an SQLAlchemy Job row to the planner's CandidateJob."""
    return CandidateJob(
        id=job.id,
        order_id=job.order_id,
        student_id=job.student_id,
        job_type=job.job_type,
        volume=job.volume,
        price=job.price,
        pickup_address=_to_location(job.pickup_lat, job.pickup_lon, job.pickup_address),
        dropoff_address=_to_location(job.dropoff_lat, job.dropoff_lon, job.dropoff_address),
        scheduled_time=job.scheduled_time,
    )


def find_mover_by_id(db: Session, mover_id: int) -> Optional[Mover]:
    """
    Looks up a mover and their availability schedule.

    Args:
        db: The SQLAlchemy database session.
        mover_id: The ID of the mover.

    Returns:
        The mover, or None if no mover has that ID.
    """
    db_mover = db.get(db_models.Mover, mover_id)
    if db_mover is None:
        return None
    return Mover(id=db_mover.id, name=db_mover.name, availability=db_mover.availability)


def list_available_jobs(db: Session) -> List[CandidateJob]:
    """Fetches all jobs still open to movers, earliest scheduled first."""
    stmt = (
        select(db_models.Job)
        .where(db_models.Job.status == JobStatus.AVAILABLE)
        .order_by(db_models.Job.scheduled_time, db_models.Job.id)
    )
    db_jobs = db.execute(stmt).scalars().all()
    candidates = []
    for job in db_jobs:
        try:
            candidates.append(convert_job_to_candidate(job))
        except ValidationError as e:
            # One malformed row must not hide the rest of the catalog
            logger.warning("Skipping job %s with invalid data: %s", job.id, e)
    return candidates


def update_mover_availability(db: Session, mover_id: int, availability: AvailabilitySchedule) -> Optional[Mover]:
    """
    Replaces a mover's weekly schedule.

    Returns:
        The updated mover, or None if no mover has that ID.
    """
    db_mover = db.get(db_models.Mover, mover_id)
    if db_mover is None:
        return None
    # Stored as plain JSON: {"MON": [["09:00", "17:00"]]}
    db_mover.availability = {
        day.value: [list(time_range) for time_range in ranges]
        for day, ranges in availability.items()
    }
    db.commit()
    db.refresh(db_mover)
    return Mover(id=db_mover.id, name=db_mover.name, availability=db_mover.availability)
