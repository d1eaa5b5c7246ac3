# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import pytest
from fastapi.testclient import TestClient

from app.db.memory_storage import MemStorage
from tests.test_helpers import ngo_data, opportunity_data, register_and_login

OPPORTUNITY_PAYLOAD = {
    "title": "River Cleanup",
    "description": "Remove litter from the riverbank.",
    "location": "Portland, USA",
    "commitment": "Saturday mornings",
    "skills": ["Teamwork"],
    "start_date": "2024-05-01T09:00:00Z",
    "openings": 12,
}


def test_create_opportunity(client: TestClient, recruiter_headers: dict):
    """
    Tests that a recruiter's opportunity is owned by the recruiter's NGO.
    """
    response = client.post("/api/v1/opportunities/", json=OPPORTUNITY_PAYLOAD, headers=recruiter_headers)

    assert response.status_code == 201
    data = response.json()
    ngo_id = client.get("/api/v1/user", headers=recruiter_headers).json()["ngo_id"]
    assert data["ngo_id"] == ngo_id
    assert data["openings"] == 12
    assert data["remote"] is False
    assert data["deleted"] is False
    assert "created_at" in data


def test_create_opportunity_ignores_client_ngo_id(client: TestClient, recruiter_headers: dict):
    response = client.post(
        "/api/v1/opportunities/", json={**OPPORTUNITY_PAYLOAD, "ngo_id": 77}, headers=recruiter_headers
    )

    assert response.status_code == 201
    assert response.json()["ngo_id"] == 1


def test_create_opportunity_requires_ngo(client: TestClient):
    headers = register_and_login(client, "rob", user_type="recruiter")

    response = client.post("/api/v1/opportunities/", json=OPPORTUNITY_PAYLOAD, headers=headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Recruiter must be associated with an NGO"


def test_create_opportunity_validates_openings(client: TestClient, recruiter_headers: dict):
    response = client.post(
        "/api/v1/opportunities/", json={**OPPORTUNITY_PAYLOAD, "openings": 0}, headers=recruiter_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_read_opportunities_with_filters(client: TestClient, memory_storage: MemStorage):
    school = await memory_storage.create_ngo(ngo_data(name="School", cause="Education"))
    clinic = await memory_storage.create_ngo(ngo_data(name="Clinic", cause="Health"))
    tutor = await memory_storage.create_opportunity(opportunity_data(school.id, title="Tutor"))
    nurse = await memory_storage.create_opportunity(opportunity_data(clinic.id, title="Nurse Aide"))

    response = client.get("/api/v1/opportunities/")
    assert sorted(item["id"] for item in response.json()) == [tutor.id, nurse.id]

    response = client.get("/api/v1/opportunities/", params={"ngo_id": clinic.id})
    assert [item["title"] for item in response.json()] == ["Nurse Aide"]

    response = client.get("/api/v1/opportunities/", params={"cause": "education"})
    assert [item["title"] for item in response.json()] == ["Tutor"]


def test_delete_opportunity_is_soft(client: TestClient, recruiter_headers: dict):
    created = client.post("/api/v1/opportunities/", json=OPPORTUNITY_PAYLOAD, headers=recruiter_headers).json()

    response = client.delete(f"/api/v1/opportunities/{created['id']}", headers=recruiter_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Opportunity deleted successfully"}

    assert client.get("/api/v1/opportunities/").json() == []
    response = client.get(f"/api/v1/opportunities/{created['id']}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Opportunity not found or has been deleted"


@pytest.mark.asyncio
async def test_delete_opportunity_of_another_ngo(
    client: TestClient, recruiter_headers: dict, memory_storage: MemStorage
):
    other_ngo = await memory_storage.create_ngo(ngo_data(name="Elsewhere"))
    foreign = await memory_storage.create_opportunity(opportunity_data(other_ngo.id))

    response = client.delete(f"/api/v1/opportunities/{foreign.id}", headers=recruiter_headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Not authorized to delete this opportunity"
    assert (await memory_storage.get_opportunity(foreign.id)).deleted is False


def test_delete_unknown_opportunity(client: TestClient, recruiter_headers: dict):
    response = client.delete("/api/v1/opportunities/404", headers=recruiter_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Opportunity not found"


def test_read_unknown_opportunity(client: TestClient):
    response = client.get("/api/v1/opportunities/404")

    assert response.status_code == 404
    assert response.json()["detail"] == "Opportunity not found"
