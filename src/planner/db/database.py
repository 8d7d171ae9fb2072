import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Determine Database URL based on TESTING environment variable
if os.environ.get("TESTING"):
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
    # One shared connection so every session sees the same in-memory database
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    from planner.api.deps import get_settings
    settings = get_settings()
    SQLALCHEMY_DATABASE_URL = settings["database_url"]
    engine = create_engine(SQLALCHEMY_DATABASE_URL)

# Each instance of SessionLocal will be a database session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
