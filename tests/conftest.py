# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import os
import uuid

import mongomock
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

# Safety check to prevent tests from running against a production database
if os.getenv("TESTING") != "1":
    os.environ["TESTING"] = "1"

from app.app import app
from app.db.database import get_storage
from app.db.memory_storage import MemStorage
from app.db.mongo_storage import MongoStorage
from tests.test_helpers import register_and_login


def build_storage(kind: str):
    if kind == "memory":
        return MemStorage()
    return MongoStorage(mongomock.MongoClient(), f"volunteerconnect_test_{uuid.uuid4().hex}")


@pytest_asyncio.fixture(name="storage", params=["memory", "mongodb"])
async def storage_fixture(request):
    """
    Runs the test once against each backend, so both honour the same contract.
    """
    storage = build_storage(request.param)
    await storage.connect()
    try:
        yield storage
    finally:
        await storage.close()


@pytest_asyncio.fixture(name="mongo_storage")
async def mongo_storage_fixture():
    storage = build_storage("mongodb")
    await storage.connect()
    try:
        yield storage
    finally:
        await storage.close()


@pytest.fixture(name="memory_storage")
def memory_storage_fixture():
    return MemStorage()


@pytest.fixture(name="client")
def client_fixture(memory_storage: MemStorage):
    """
    Provides a FastAPI TestClient whose routes use a fresh, empty in-memory store.
    """
    app.dependency_overrides[get_storage] = lambda: memory_storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(name="volunteer_headers")
def volunteer_headers_fixture(client: TestClient):
    return register_and_login(client, "vera")


@pytest.fixture(name="recruiter_headers")
def recruiter_headers_fixture(client: TestClient):
    """
    A recruiter who has already created (and so belongs to) an NGO.
    """
    headers = register_and_login(client, "rita", user_type="recruiter")
    response = client.post(
        "/api/v1/ngos/",
        json={
            "name": "River Keepers",
            "description": "Protecting local rivers.",
            "cause": "Environment",
            "location": "Portland, USA",
            "email": "hello@riverkeepers.org",
        },
        headers=headers,
    )
    assert response.status_code == 201
    return headers
