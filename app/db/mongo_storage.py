# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import logging
import re
from datetime import timedelta
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Type

from anyio import to_thread
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from app.db.exceptions import (
    DuplicateApplicationError,
    DuplicateUserError,
    StorageNotConnectedError,
    UnknownReferenceError,
)
from app.db.models import (
    Application,
    ApplicationCreate,
    ApplicationUpdate,
    AuthSession,
    Ngo,
    NgoCreate,
    NgoUpdate,
    Opportunity,
    OpportunityCreate,
    OpportunityUpdate,
    Suggestion,
    SuggestionCreate,
    SuggestionUpdate,
    User,
    UserCreate,
    UserUpdate,
)
from app.db.storage import (
    SESSION_TTL,
    Storage,
    check_status_transition,
    new_session,
    session_expired,
    utcnow,
)

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "ngos", "opportunities", "applications", "suggestions", "sessions")

NOT_DELETED = {"deleted": {"$ne": True}}


def iexact(value: str) -> Dict[str, str]:
    """
    Case-insensitive whole-string match. The value is escaped so pattern
    characters in user input are matched literally.
    """
    return {"$regex": f"^{re.escape(value)}$", "$options": "i"}


def duplicate_user_field(exc: DuplicateKeyError) -> str:
    key_pattern = (exc.details or {}).get("keyPattern") or {}
    return "email" if "email" in key_pattern else "username"


async def run_blocking(func: Callable, *args, **kwargs):
    """
    Runs a blocking driver call in a worker thread so the event loop keeps serving requests.
    """
    return await to_thread.run_sync(partial(func, *args, **kwargs))


class MongoStorage(Storage):
    """
    MongoDB backend with one collection per entity type.

    MongoDB has no auto-increment, so integer ids are emulated as the highest
    stored id plus one. Two processes creating the same entity type at the
    same moment can read the same maximum and hand out the same id.
    """

    name = "mongodb"

    def __init__(self, client: MongoClient, db_name: str, session_ttl: timedelta = SESSION_TTL):
        self.client = client
        self.db_name = db_name
        self.session_ttl = session_ttl
        self.db = None
        self._collections: Dict[str, Collection] = {}

    @classmethod
    def from_uri(cls, uri: str, db_name: str, session_ttl: timedelta = SESSION_TTL) -> "MongoStorage":
        return cls(MongoClient(uri, tz_aware=True), db_name, session_ttl=session_ttl)

    def _open(self):
        db = self.client[self.db_name]
        collections = {name: db[name] for name in COLLECTIONS}

        users = collections["users"]
        users.create_index([("username", ASCENDING)], unique=True)
        users.create_index([("email", ASCENDING)], unique=True)
        collections["ngos"].create_index([("name", ASCENDING)])
        collections["opportunities"].create_index([("ngo_id", ASCENDING)])
        collections["applications"].create_index([("volunteer_id", ASCENDING)])
        collections["applications"].create_index([("ngo_id", ASCENDING)])
        collections["suggestions"].create_index([("ngo_id", ASCENDING)])
        collections["sessions"].create_index([("sid", ASCENDING)], unique=True)
        collections["sessions"].create_index([("expires_at", ASCENDING)], expireAfterSeconds=0)
        return db, collections

    async def connect(self):
        try:
            self.db, self._collections = await run_blocking(self._open)
        except Exception:
            logger.exception("MongoDB connection error")
            self.db = None
            self._collections = {}
            raise
        logger.info("Connected to MongoDB database '%s'", self.db_name)

    async def close(self):
        await run_blocking(self.client.close)
        self.db = None
        self._collections = {}

    async def ping(self) -> bool:
        await run_blocking(self.client.admin.command, "ping")
        return True

    def _collection(self, name: str) -> Collection:
        if not self._collections:
            raise StorageNotConnectedError()
        return self._collections[name]

    @staticmethod
    def _to_model(model: Type, doc: Optional[Dict[str, Any]]):
        if doc is None:
            return None
        doc = dict(doc)
        doc.pop("_id", None)
        return model(**doc)

    async def _find_one(self, name: str, model: Type, query: Dict[str, Any]):
        doc = await run_blocking(self._collection(name).find_one, query)
        return self._to_model(model, doc)

    async def _find(self, name: str, model: Type, query: Dict[str, Any]) -> List:
        collection = self._collection(name)
        docs = await run_blocking(lambda: list(collection.find(query)))
        return [self._to_model(model, doc) for doc in docs]

    async def _count(self, name: str) -> int:
        return await run_blocking(self._collection(name).count_documents, {})

    async def _next_id(self, name: str) -> int:
        latest = await run_blocking(self._collection(name).find_one, {}, sort=[("id", -1)])
        return latest["id"] + 1 if latest else 1

    async def _insert(self, name: str, model: Type, doc: Dict[str, Any]):
        collection = self._collection(name)
        doc = {"id": await self._next_id(name), **doc}
        await run_blocking(collection.insert_one, doc)
        # Read back so the record matches what later lookups return (BSON datetime precision).
        return await self._find_one(name, model, {"id": doc["id"]})

    async def _update(self, name: str, model: Type, record_id: int, changes: Dict[str, Any]):
        collection = self._collection(name)
        if not changes:
            return await self._find_one(name, model, {"id": record_id})
        doc = await run_blocking(
            collection.find_one_and_update,
            {"id": record_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(model, doc)

    # --- Users ---

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self._find_one("users", User, {"id": user_id})

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self._find_one("users", User, {"username": iexact(username)})

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self._find_one("users", User, {"email": iexact(email)})

    async def create_user(self, user: UserCreate) -> User:
        if await self.get_user_by_username(user.username):
            logger.warning("Rejected duplicate username '%s'", user.username)
            raise DuplicateUserError("username", user.username)
        if await self.get_user_by_email(user.email):
            logger.warning("Rejected duplicate email '%s'", user.email)
            raise DuplicateUserError("email", user.email)
        if user.ngo_id is not None and await self.get_ngo(user.ngo_id) is None:
            raise UnknownReferenceError("NGO", user.ngo_id)

        try:
            return await self._insert("users", User, user.model_dump())
        except DuplicateKeyError as exc:
            field = duplicate_user_field(exc)
            raise DuplicateUserError(field, getattr(user, field)) from exc

    async def update_user(self, user_id: int, user: UserUpdate) -> Optional[User]:
        changes = user.changes()
        if "ngo_id" in changes and await self.get_ngo(changes["ngo_id"]) is None:
            raise UnknownReferenceError("NGO", changes["ngo_id"])
        return await self._update("users", User, user_id, changes)

    async def list_volunteers(self) -> List[User]:
        return await self._find("users", User, {"user_type": "volunteer"})

    async def list_recruiters(self) -> List[User]:
        return await self._find("users", User, {"user_type": "recruiter"})

    async def count_users(self) -> int:
        return await self._count("users")

    # --- NGOs ---

    async def get_ngo(self, ngo_id: int) -> Optional[Ngo]:
        return await self._find_one("ngos", Ngo, {"id": ngo_id})

    async def list_ngos(self) -> List[Ngo]:
        return await self._find("ngos", Ngo, {})

    async def list_ngos_by_cause(self, cause: str) -> List[Ngo]:
        return await self._find("ngos", Ngo, {"cause": iexact(cause)})

    async def create_ngo(self, ngo: NgoCreate) -> Ngo:
        return await self._insert("ngos", Ngo, ngo.model_dump())

    async def update_ngo(self, ngo_id: int, ngo: NgoUpdate) -> Optional[Ngo]:
        return await self._update("ngos", Ngo, ngo_id, ngo.changes())

    async def count_ngos(self) -> int:
        return await self._count("ngos")

    # --- Opportunities ---

    async def get_opportunity(self, opportunity_id: int) -> Optional[Opportunity]:
        return await self._find_one("opportunities", Opportunity, {"id": opportunity_id})

    async def list_opportunities(self) -> List[Opportunity]:
        return await self._find("opportunities", Opportunity, dict(NOT_DELETED))

    async def list_opportunities_by_ngo(self, ngo_id: int) -> List[Opportunity]:
        return await self._find("opportunities", Opportunity, {"ngo_id": ngo_id, **NOT_DELETED})

    async def list_opportunities_by_cause(self, cause: str) -> List[Opportunity]:
        ngo_ids = [ngo.id for ngo in await self.list_ngos_by_cause(cause)]
        return await self._find("opportunities", Opportunity, {"ngo_id": {"$in": ngo_ids}, **NOT_DELETED})

    async def create_opportunity(self, opportunity: OpportunityCreate) -> Opportunity:
        if await self.get_ngo(opportunity.ngo_id) is None:
            raise UnknownReferenceError("NGO", opportunity.ngo_id)

        doc = opportunity.model_dump()
        doc.update(deleted=False, created_at=utcnow())
        return await self._insert("opportunities", Opportunity, doc)

    async def update_opportunity(
        self, opportunity_id: int, opportunity: OpportunityUpdate
    ) -> Optional[Opportunity]:
        return await self._update("opportunities", Opportunity, opportunity_id, opportunity.changes())

    # --- Applications ---

    async def get_application(self, application_id: int) -> Optional[Application]:
        return await self._find_one("applications", Application, {"id": application_id})

    async def list_applications_by_volunteer(self, volunteer_id: int) -> List[Application]:
        return await self._find("applications", Application, {"volunteer_id": volunteer_id})

    async def list_applications_by_ngo(self, ngo_id: int) -> List[Application]:
        return await self._find("applications", Application, {"ngo_id": ngo_id})

    async def list_applications_by_opportunity(self, opportunity_id: int) -> List[Application]:
        return await self._find("applications", Application, {"opportunity_id": opportunity_id})

    async def create_application(self, application: ApplicationCreate) -> Application:
        opportunity = await self.get_opportunity(application.opportunity_id)
        if opportunity is None:
            raise UnknownReferenceError("Opportunity", application.opportunity_id)
        if opportunity.deleted:
            raise UnknownReferenceError("Opportunity", application.opportunity_id, "has been deleted")

        existing = await run_blocking(
            self._collection("applications").find_one,
            {"volunteer_id": application.volunteer_id, "opportunity_id": application.opportunity_id},
        )
        if existing is not None:
            logger.warning(
                "Rejected duplicate application of volunteer %s to opportunity %s",
                application.volunteer_id,
                application.opportunity_id,
            )
            raise DuplicateApplicationError(application.volunteer_id, application.opportunity_id)

        doc = application.model_dump()
        doc.update(ngo_id=opportunity.ngo_id, status="pending", created_at=utcnow())
        return await self._insert("applications", Application, doc)

    async def update_application(
        self, application_id: int, application: ApplicationUpdate
    ) -> Optional[Application]:
        current = await self.get_application(application_id)
        if current is None:
            return None
        changes = application.changes()
        check_status_transition(current.status, changes.get("status"))
        return await self._update("applications", Application, application_id, changes)

    # --- Suggestions ---

    async def get_suggestion(self, suggestion_id: int) -> Optional[Suggestion]:
        return await self._find_one("suggestions", Suggestion, {"id": suggestion_id})

    async def list_suggestions_by_volunteer(self, volunteer_id: int) -> List[Suggestion]:
        return await self._find("suggestions", Suggestion, {"volunteer_id": volunteer_id})

    async def list_suggestions_by_ngo(self, ngo_id: int) -> List[Suggestion]:
        return await self._find("suggestions", Suggestion, {"ngo_id": ngo_id})

    async def create_suggestion(self, suggestion: SuggestionCreate) -> Suggestion:
        if await self.get_ngo(suggestion.ngo_id) is None:
            raise UnknownReferenceError("NGO", suggestion.ngo_id)

        doc = suggestion.model_dump()
        doc["created_at"] = utcnow()
        return await self._insert("suggestions", Suggestion, doc)

    async def update_suggestion(
        self, suggestion_id: int, suggestion: SuggestionUpdate
    ) -> Optional[Suggestion]:
        return await self._update("suggestions", Suggestion, suggestion_id, suggestion.changes())

    # --- Sessions ---

    async def create_session(self, user_id: int) -> AuthSession:
        session = new_session(user_id, self.session_ttl)
        # The TTL monitor may purge an already expired document at any time, so no read-back.
        await run_blocking(self._collection("sessions").insert_one, session.model_dump())
        return session

    async def get_session(self, sid: str) -> Optional[AuthSession]:
        session = await self._find_one("sessions", AuthSession, {"sid": sid})
        # The TTL monitor only runs periodically, so expiry is checked here as well.
        if session is None or session_expired(session):
            return None
        return session

    async def delete_session(self, sid: str) -> bool:
        result = await run_blocking(self._collection("sessions").delete_one, {"sid": sid})
        return result.deleted_count > 0
