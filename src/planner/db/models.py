from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, JSON
from sqlalchemy.orm import declarative_base

from planner.models import JobStatus, JobType

# Define the base class for all models
Base = declarative_base()

class Mover(Base):
    """SQLAlchemy model for a mover account."""
    __tablename__ = "movers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    # {"MON": [["09:00", "17:00"]], ...}; NULL until the mover sets a schedule
    availability = Column(JSON, nullable=True)


class Job(Base):
    """SQLAlchemy model for a pickup/dropoff job."""
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, nullable=False, index=True)
    student_id = Column(Integer, nullable=False)
    mover_id = Column(Integer, nullable=True)
    job_type = Column(Enum(JobType), nullable=False)
    status = Column(Enum(JobStatus), nullable=False, default=JobStatus.AVAILABLE)
    volume = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    # Coordinates are nullable so bad upstream data can be stored and skipped
    pickup_lat = Column(Float, nullable=True)
    pickup_lon = Column(Float, nullable=True)
    pickup_address = Column(String, nullable=True)
    dropoff_lat = Column(Float, nullable=True)
    dropoff_lon = Column(Float, nullable=True)
    dropoff_address = Column(String, nullable=True)
    scheduled_time = Column(DateTime(timezone=True), nullable=False, index=True)
