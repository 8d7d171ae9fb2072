import logging

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..db.database import engine
from ..db.models import Base
from .deps import get_settings
from .routes import router as api_router


async def validation_exception_handler(request, exc: RequestValidationError):
    """Reports malformed query parameters and bodies as 422 with pydantic's error list."""
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({"detail": exc.errors(), "body": exc.body}),
    )


def create_app() -> FastAPI:
    """Builds the route planner application on the configured database."""
    settings = get_settings()
    logging.basicConfig(
        level=settings["log_level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Smart Route Planner API",
        description="Greedy route planning for movers",
        version="0.1.0",
    )

    # movers and jobs tables
    Base.metadata.create_all(bind=engine)

    # Mobile and web clients call from arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
