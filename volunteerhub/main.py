from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
import os

from . import routers
from .database import init_db, check_db_connection
from .utils.constants import AppConstants

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="VolunteerHub API",
    description="Volunteer opportunity scheduling and RSVP API",
    version="1.0.0",
)

cors_origins = os.getenv("CORS_ORIGINS")
app.add_middleware(
    CORSMiddleware,
    allow_origins=(
        [origin.strip() for origin in cors_origins.split(",") if origin.strip()]
        if cors_origins
        else AppConstants.DEFAULT_CORS_ORIGINS
    ),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Create missing tables when the app starts"""
    logger.info("Starting VolunteerHub API")
    init_db()


# Include routers
app.include_router(
    routers.opportunities.router,
    prefix="/api/staff/opportunities",
    tags=["opportunities"],
)
app.include_router(routers.catalog.router, prefix="/api/staff", tags=["catalog"])
app.include_router(routers.hours.router, prefix="/api/staff", tags=["hours"])
app.include_router(routers.volunteer.router, prefix="/api/volunteer", tags=["volunteer"])


@app.get("/")
async def root():
    return {"message": "Welcome to VolunteerHub API", "status": "running"}


@app.get("/health")
async def health_check():
    database = check_db_connection()
    return {
        "status": "healthy" if database["sqlalchemy"] else "degraded",
        "service": "volunteerhub-api",
        "version": "1.0.0",
        "database": database,
    }


if __name__ == "__main__":
    uvicorn.run("volunteerhub.main:app", host="0.0.0.0", port=8000, reload=True)
