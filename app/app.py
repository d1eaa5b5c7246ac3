# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.endpoints import applications, auth, ngos, opportunities, profile, suggestions
from app.config import settings
from app.db.database import create_storage, get_storage
from app.db.seed import seed_initial_data
from app.db.storage import Storage
from app.schemas import schemas

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("FastAPI application starting up.")
    storage = create_storage()
    await storage.connect()
    if settings.seed_demo_data:
        await seed_initial_data(storage)
    app.state.storage = storage
    try:
        yield
    finally:
        await storage.close()
        logger.info("FastAPI application shutting down.")


app = FastAPI(
    title="VolunteerConnect Backend API",
    description="API for connecting volunteers with NGOs and their opportunities.",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(ngos.router, prefix="/api/v1")
app.include_router(opportunities.router, prefix="/api/v1")
app.include_router(applications.router, prefix="/api/v1")
app.include_router(suggestions.router, prefix="/api/v1")
app.include_router(profile.router, prefix="/api/v1")


@app.get("/")
async def read_root():
    return {"message": "Welcome to VolunteerConnect Backend API!"}


@app.get("/health", response_model=schemas.HealthStatus)
async def health_check(storage: Storage = Depends(get_storage)):
    try:
        await storage.ping()
    except Exception as e:
        logger.error("Storage health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Storage connection failed: {e}",
        )
    return {"status": "ok", "storage_backend": storage.name, "storage_connection": "successful"}
