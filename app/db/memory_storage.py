# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import logging
from datetime import timedelta
from typing import Callable, Dict, List, Optional

from app.db.exceptions import DuplicateApplicationError, DuplicateUserError, UnknownReferenceError
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


class MemStorage(Storage):
    """
    Process-local backend keeping one dict per entity type.

    Ids come from a per-type counter that starts at 1 and only ever moves
    forward. Records handed out are deep copies, so callers cannot mutate
    stored state behind the store's back.
    """

    name = "memory"

    def __init__(self, session_ttl: timedelta = SESSION_TTL):
        self.session_ttl = session_ttl
        self._users: Dict[int, User] = {}
        self._ngos: Dict[int, Ngo] = {}
        self._opportunities: Dict[int, Opportunity] = {}
        self._applications: Dict[int, Application] = {}
        self._suggestions: Dict[int, Suggestion] = {}
        self._sessions: Dict[str, AuthSession] = {}
        self._next_ids: Dict[str, int] = {
            "users": 1,
            "ngos": 1,
            "opportunities": 1,
            "applications": 1,
            "suggestions": 1,
        }

    def _next_id(self, kind: str) -> int:
        next_id = self._next_ids[kind]
        self._next_ids[kind] = next_id + 1
        return next_id

    @staticmethod
    def _copy(record):
        return record.model_copy(deep=True) if record is not None else None

    def _scan(self, records: Dict, predicate: Callable) -> List:
        return [self._copy(record) for record in records.values() if predicate(record)]

    def _merge(self, records: Dict, record_id: int, changes: dict):
        current = records.get(record_id)
        if current is None:
            return None
        merged = current.model_copy(update=changes, deep=True)
        records[record_id] = merged
        return self._copy(merged)

    # --- Users ---

    async def get_user(self, user_id: int) -> Optional[User]:
        return self._copy(self._users.get(user_id))

    async def get_user_by_username(self, username: str) -> Optional[User]:
        wanted = username.lower()
        matches = self._scan(self._users, lambda user: user.username.lower() == wanted)
        return matches[0] if matches else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.lower()
        matches = self._scan(self._users, lambda user: user.email.lower() == wanted)
        return matches[0] if matches else None

    async def create_user(self, user: UserCreate) -> User:
        if await self.get_user_by_username(user.username):
            logger.warning("Rejected duplicate username '%s'", user.username)
            raise DuplicateUserError("username", user.username)
        if await self.get_user_by_email(user.email):
            logger.warning("Rejected duplicate email '%s'", user.email)
            raise DuplicateUserError("email", user.email)
        if user.ngo_id is not None and user.ngo_id not in self._ngos:
            raise UnknownReferenceError("NGO", user.ngo_id)

        db_user = User(id=self._next_id("users"), **user.model_dump())
        self._users[db_user.id] = db_user
        return self._copy(db_user)

    async def update_user(self, user_id: int, user: UserUpdate) -> Optional[User]:
        changes = user.changes()
        if "ngo_id" in changes and changes["ngo_id"] not in self._ngos:
            raise UnknownReferenceError("NGO", changes["ngo_id"])
        return self._merge(self._users, user_id, changes)

    async def list_volunteers(self) -> List[User]:
        return self._scan(self._users, lambda user: user.user_type == "volunteer")

    async def list_recruiters(self) -> List[User]:
        return self._scan(self._users, lambda user: user.user_type == "recruiter")

    async def count_users(self) -> int:
        return len(self._users)

    # --- NGOs ---

    async def get_ngo(self, ngo_id: int) -> Optional[Ngo]:
        return self._copy(self._ngos.get(ngo_id))

    async def list_ngos(self) -> List[Ngo]:
        return self._scan(self._ngos, lambda ngo: True)

    async def list_ngos_by_cause(self, cause: str) -> List[Ngo]:
        wanted = cause.lower()
        return self._scan(self._ngos, lambda ngo: ngo.cause.lower() == wanted)

    async def create_ngo(self, ngo: NgoCreate) -> Ngo:
        db_ngo = Ngo(id=self._next_id("ngos"), **ngo.model_dump())
        self._ngos[db_ngo.id] = db_ngo
        return self._copy(db_ngo)

    async def update_ngo(self, ngo_id: int, ngo: NgoUpdate) -> Optional[Ngo]:
        return self._merge(self._ngos, ngo_id, ngo.changes())

    async def count_ngos(self) -> int:
        return len(self._ngos)

    # --- Opportunities ---

    async def get_opportunity(self, opportunity_id: int) -> Optional[Opportunity]:
        return self._copy(self._opportunities.get(opportunity_id))

    async def list_opportunities(self) -> List[Opportunity]:
        return self._scan(self._opportunities, lambda opportunity: not opportunity.deleted)

    async def list_opportunities_by_ngo(self, ngo_id: int) -> List[Opportunity]:
        return self._scan(
            self._opportunities,
            lambda opportunity: opportunity.ngo_id == ngo_id and not opportunity.deleted,
        )

    async def list_opportunities_by_cause(self, cause: str) -> List[Opportunity]:
        ngo_ids = {ngo.id for ngo in await self.list_ngos_by_cause(cause)}
        return self._scan(
            self._opportunities,
            lambda opportunity: opportunity.ngo_id in ngo_ids and not opportunity.deleted,
        )

    async def create_opportunity(self, opportunity: OpportunityCreate) -> Opportunity:
        if opportunity.ngo_id not in self._ngos:
            raise UnknownReferenceError("NGO", opportunity.ngo_id)

        db_opportunity = Opportunity(
            id=self._next_id("opportunities"),
            created_at=utcnow(),
            **opportunity.model_dump(),
        )
        self._opportunities[db_opportunity.id] = db_opportunity
        return self._copy(db_opportunity)

    async def update_opportunity(
        self, opportunity_id: int, opportunity: OpportunityUpdate
    ) -> Optional[Opportunity]:
        return self._merge(self._opportunities, opportunity_id, opportunity.changes())

    # --- Applications ---

    async def get_application(self, application_id: int) -> Optional[Application]:
        return self._copy(self._applications.get(application_id))

    async def list_applications_by_volunteer(self, volunteer_id: int) -> List[Application]:
        return self._scan(self._applications, lambda application: application.volunteer_id == volunteer_id)

    async def list_applications_by_ngo(self, ngo_id: int) -> List[Application]:
        return self._scan(self._applications, lambda application: application.ngo_id == ngo_id)

    async def list_applications_by_opportunity(self, opportunity_id: int) -> List[Application]:
        return self._scan(
            self._applications, lambda application: application.opportunity_id == opportunity_id
        )

    async def create_application(self, application: ApplicationCreate) -> Application:
        opportunity = self._opportunities.get(application.opportunity_id)
        if opportunity is None:
            raise UnknownReferenceError("Opportunity", application.opportunity_id)
        if opportunity.deleted:
            raise UnknownReferenceError("Opportunity", application.opportunity_id, "has been deleted")

        already_applied = any(
            existing.opportunity_id == application.opportunity_id
            for existing in self._applications.values()
            if existing.volunteer_id == application.volunteer_id
        )
        if already_applied:
            logger.warning(
                "Rejected duplicate application of volunteer %s to opportunity %s",
                application.volunteer_id,
                application.opportunity_id,
            )
            raise DuplicateApplicationError(application.volunteer_id, application.opportunity_id)

        db_application = Application(
            id=self._next_id("applications"),
            ngo_id=opportunity.ngo_id,
            status="pending",
            created_at=utcnow(),
            **application.model_dump(),
        )
        self._applications[db_application.id] = db_application
        return self._copy(db_application)

    async def update_application(
        self, application_id: int, application: ApplicationUpdate
    ) -> Optional[Application]:
        current = self._applications.get(application_id)
        if current is None:
            return None
        changes = application.changes()
        check_status_transition(current.status, changes.get("status"))
        return self._merge(self._applications, application_id, changes)

    # --- Suggestions ---

    async def get_suggestion(self, suggestion_id: int) -> Optional[Suggestion]:
        return self._copy(self._suggestions.get(suggestion_id))

    async def list_suggestions_by_volunteer(self, volunteer_id: int) -> List[Suggestion]:
        return self._scan(self._suggestions, lambda suggestion: suggestion.volunteer_id == volunteer_id)

    async def list_suggestions_by_ngo(self, ngo_id: int) -> List[Suggestion]:
        return self._scan(self._suggestions, lambda suggestion: suggestion.ngo_id == ngo_id)

    async def create_suggestion(self, suggestion: SuggestionCreate) -> Suggestion:
        if suggestion.ngo_id not in self._ngos:
            raise UnknownReferenceError("NGO", suggestion.ngo_id)

        db_suggestion = Suggestion(
            id=self._next_id("suggestions"), created_at=utcnow(), **suggestion.model_dump()
        )
        self._suggestions[db_suggestion.id] = db_suggestion
        return self._copy(db_suggestion)

    async def update_suggestion(
        self, suggestion_id: int, suggestion: SuggestionUpdate
    ) -> Optional[Suggestion]:
        return self._merge(self._suggestions, suggestion_id, suggestion.changes())

    # --- Sessions ---

    async def create_session(self, user_id: int) -> AuthSession:
        session = new_session(user_id, self.session_ttl)
        self._sessions[session.sid] = session
        return self._copy(session)

    async def get_session(self, sid: str) -> Optional[AuthSession]:
        session = self._sessions.get(sid)
        if session is None:
            return None
        if session_expired(session):
            del self._sessions[sid]
            return None
        return self._copy(session)

    async def delete_session(self, sid: str) -> bool:
        return self._sessions.pop(sid, None) is not None
