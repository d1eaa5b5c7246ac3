# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from app.db.exceptions import InvalidStatusTransitionError
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

SESSION_TTL = timedelta(days=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def check_status_transition(current: str, requested: Optional[str]):
    """
    Applications only leave 'pending'; 'accepted' and 'rejected' are terminal.
    Re-applying the current status is allowed and changes nothing.
    """
    if requested is None or requested == current:
        return
    if current != "pending":
        raise InvalidStatusTransitionError(current, requested)


def new_session(user_id: int, ttl: timedelta) -> AuthSession:
    created_at = utcnow()
    return AuthSession(
        sid=secrets.token_urlsafe(32),
        user_id=user_id,
        created_at=created_at,
        expires_at=created_at + ttl,
    )


def session_expired(session: AuthSession, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    expires_at = session.expires_at
    # BSON datetimes come back naive unless the client is tz_aware
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


class Storage(ABC):
    """
    Persistence contract shared by every backend.

    Lookups return None when nothing matches; they never raise for absence.
    Rule violations raise subclasses of StorageError, while transport failures
    from the underlying driver propagate untouched.
    """

    name: str = "abstract"

    async def connect(self):
        """Prepares the backend for use."""

    async def close(self):
        """Releases any resources held by the backend."""

    async def ping(self) -> bool:
        return True

    # --- Users ---

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def create_user(self, user: UserCreate) -> User: ...

    @abstractmethod
    async def update_user(self, user_id: int, user: UserUpdate) -> Optional[User]: ...

    @abstractmethod
    async def list_volunteers(self) -> List[User]: ...

    @abstractmethod
    async def list_recruiters(self) -> List[User]: ...

    @abstractmethod
    async def count_users(self) -> int: ...

    # --- NGOs ---

    @abstractmethod
    async def get_ngo(self, ngo_id: int) -> Optional[Ngo]: ...

    @abstractmethod
    async def list_ngos(self) -> List[Ngo]: ...

    @abstractmethod
    async def list_ngos_by_cause(self, cause: str) -> List[Ngo]: ...

    @abstractmethod
    async def create_ngo(self, ngo: NgoCreate) -> Ngo: ...

    @abstractmethod
    async def update_ngo(self, ngo_id: int, ngo: NgoUpdate) -> Optional[Ngo]: ...

    @abstractmethod
    async def count_ngos(self) -> int: ...

    # --- Opportunities ---

    @abstractmethod
    async def get_opportunity(self, opportunity_id: int) -> Optional[Opportunity]: ...

    @abstractmethod
    async def list_opportunities(self) -> List[Opportunity]: ...

    @abstractmethod
    async def list_opportunities_by_ngo(self, ngo_id: int) -> List[Opportunity]: ...

    @abstractmethod
    async def list_opportunities_by_cause(self, cause: str) -> List[Opportunity]: ...

    @abstractmethod
    async def create_opportunity(self, opportunity: OpportunityCreate) -> Opportunity: ...

    @abstractmethod
    async def update_opportunity(
        self, opportunity_id: int, opportunity: OpportunityUpdate
    ) -> Optional[Opportunity]: ...

    # --- Applications ---

    @abstractmethod
    async def get_application(self, application_id: int) -> Optional[Application]: ...

    @abstractmethod
    async def list_applications_by_volunteer(self, volunteer_id: int) -> List[Application]: ...

    @abstractmethod
    async def list_applications_by_ngo(self, ngo_id: int) -> List[Application]: ...

    @abstractmethod
    async def list_applications_by_opportunity(self, opportunity_id: int) -> List[Application]: ...

    @abstractmethod
    async def create_application(self, application: ApplicationCreate) -> Application: ...

    @abstractmethod
    async def update_application(
        self, application_id: int, application: ApplicationUpdate
    ) -> Optional[Application]: ...

    # --- Suggestions ---

    @abstractmethod
    async def get_suggestion(self, suggestion_id: int) -> Optional[Suggestion]: ...

    @abstractmethod
    async def list_suggestions_by_volunteer(self, volunteer_id: int) -> List[Suggestion]: ...

    @abstractmethod
    async def list_suggestions_by_ngo(self, ngo_id: int) -> List[Suggestion]: ...

    @abstractmethod
    async def create_suggestion(self, suggestion: SuggestionCreate) -> Suggestion: ...

    @abstractmethod
    async def update_suggestion(
        self, suggestion_id: int, suggestion: SuggestionUpdate
    ) -> Optional[Suggestion]: ...

    # --- Sessions ---

    @abstractmethod
    async def create_session(self, user_id: int) -> AuthSession: ...

    @abstractmethod
    async def get_session(self, sid: str) -> Optional[AuthSession]: ...

    @abstractmethod
    async def delete_session(self, sid: str) -> bool: ...
