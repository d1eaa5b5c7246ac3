# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import logging
import os
from datetime import timedelta

from fastapi import Request

from app.config import settings
from app.db.memory_storage import MemStorage
from app.db.mongo_storage import MongoStorage
from app.db.storage import Storage

logger = logging.getLogger(__name__)

# Safety check: prevent production database access during testing
if os.getenv("TESTING") == "1":
    STORAGE_BACKEND = "memory"
else:
    STORAGE_BACKEND = settings.storage_backend


def create_storage(backend: str = STORAGE_BACKEND) -> Storage:
    """
    Builds the storage backend selected by configuration. The caller is
    responsible for connecting it.
    """
    session_ttl = timedelta(minutes=settings.session_ttl_minutes)
    if backend == "mongodb":
        logger.info("Using MongoDB storage backend")
        return MongoStorage.from_uri(settings.mongodb_uri, settings.mongodb_db, session_ttl=session_ttl)
    if backend == "memory":
        logger.info("Using in-memory storage backend")
        return MemStorage(session_ttl=session_ttl)
    raise ValueError(f"Unknown storage backend: {backend}")


def get_storage(request: Request) -> Storage:
    return request.app.state.storage
