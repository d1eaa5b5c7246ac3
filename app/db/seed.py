# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import logging
from datetime import datetime, timezone

from app.db.models import NgoCreate, OpportunityCreate
from app.db.storage import Storage

logger = logging.getLogger(__name__)


DEMO_NGOS = [
    (
        NgoCreate(
            name="Education for All",
            description="Working to provide quality education to underprivileged children.",
            cause="Education",
            location="New York, USA",
            email="info@educationforall.org",
            phone_number="+1234567890",
            website="www.educationforall.org",
            logo="https://via.placeholder.com/150",
        ),
        dict(
            title="Teaching Assistant",
            description="Help teachers in classrooms with underprivileged children.",
            location="New York, USA",
            remote=False,
            skills=["Teaching", "Patience", "Communication"],
            commitment="10 hours/week",
            start_date=datetime(2023, 9, 1, tzinfo=timezone.utc),
            end_date=datetime(2023, 12, 31, tzinfo=timezone.utc),
            openings=5,
        ),
    ),
    (
        NgoCreate(
            name="Green Earth Initiative",
            description="Focused on environmental conservation and sustainability.",
            cause="Environment",
            location="San Francisco, USA",
            email="info@greenearthinitiative.org",
            phone_number="+1987654321",
            website="www.greenearthinitiative.org",
            logo="https://via.placeholder.com/150",
        ),
        dict(
            title="Environmental Cleanup Organizer",
            description="Organize beach and park cleanup events.",
            location="San Francisco, USA",
            remote=False,
            skills=["Organization", "Leadership", "Environmental Knowledge"],
            commitment="5 hours/week",
            start_date=datetime(2023, 8, 15, tzinfo=timezone.utc),
            end_date=datetime(2023, 11, 15, tzinfo=timezone.utc),
            openings=3,
        ),
    ),
    (
        NgoCreate(
            name="Healthcare Access",
            description="Providing healthcare services to underserved communities.",
            cause="Healthcare",
            location="Chicago, USA",
            email="info@healthcareaccess.org",
            phone_number="+1122334455",
            website="www.healthcareaccess.org",
            logo="https://via.placeholder.com/150",
        ),
        dict(
            title="Medical Camp Assistant",
            description="Assist doctors in medical camps for underserved communities.",
            location="Chicago, USA",
            remote=False,
            skills=["First Aid", "Empathy", "Organization"],
            commitment="8 hours/week",
            start_date=datetime(2023, 10, 1, tzinfo=timezone.utc),
            end_date=datetime(2023, 12, 15, tzinfo=timezone.utc),
            openings=10,
        ),
    ),
]


async def seed_initial_data(storage: Storage) -> bool:
    """
    Populates an empty backend with demo NGOs and one opportunity each.
    Skips entirely if any user or NGO already exists. Returns True if data was inserted.
    """
    if await storage.count_users() > 0 or await storage.count_ngos() > 0:
        logger.info("Database already has data, skipping seed")
        return False

    logger.info("Seeding initial data...")
    for ngo_data, opportunity_data in DEMO_NGOS:
        ngo = await storage.create_ngo(ngo_data)
        await storage.create_opportunity(OpportunityCreate(ngo_id=ngo.id, **opportunity_data))
    logger.info("Seeded %d NGOs with one opportunity each", len(DEMO_NGOS))
    return True
