from planner.db.models import Base, Mover, Job
from planner.db.database import engine, get_db, SessionLocal

__all__ = [
    'Base',
    'Mover',
    'Job',
    'engine',
    'get_db',
    'SessionLocal'
]
