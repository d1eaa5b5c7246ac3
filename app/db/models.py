# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

"""
Entity records kept by the storage layer.

Each entity comes in three shapes: the stored record, the creation input
(no id, no server-set fields) and an update patch listing the only fields
that may be changed after creation.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

UserType = Literal["volunteer", "recruiter"]
ApplicationStatus = Literal["pending", "accepted", "rejected"]


class _Patch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def changes(self) -> dict:
        """
        Returns only the fields the caller actually supplied with a value.
        """
        return self.model_dump(exclude_unset=True, exclude_none=True)


# --- Users ---

class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    email: EmailStr
    full_name: str = Field(min_length=1)
    user_type: UserType
    phone_number: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    interests: Optional[List[str]] = None
    ngo_id: Optional[int] = None


class User(BaseModel):
    id: int
    username: str
    password: str
    email: str
    full_name: str
    user_type: UserType
    phone_number: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    interests: Optional[List[str]] = None
    ngo_id: Optional[int] = None


class UserUpdate(_Patch):
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    interests: Optional[List[str]] = None
    ngo_id: Optional[int] = None


# --- NGOs ---

class NgoCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    cause: str = Field(min_length=1)
    location: str = Field(min_length=1)
    email: EmailStr
    phone_number: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None


class Ngo(BaseModel):
    id: int
    name: str
    description: str
    cause: str
    location: str
    email: str
    phone_number: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None


class NgoUpdate(_Patch):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    cause: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None


# --- Opportunities ---

class OpportunityCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    ngo_id: int
    location: str = Field(min_length=1)
    remote: bool = False
    skills: Optional[List[str]] = None
    commitment: str = Field(min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    openings: int = Field(default=1, ge=1)


class Opportunity(BaseModel):
    id: int
    title: str
    description: str
    ngo_id: int
    location: str
    remote: bool = False
    skills: Optional[List[str]] = None
    commitment: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    openings: int = 1
    deleted: bool = False
    created_at: datetime


class OpportunityUpdate(_Patch):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    remote: Optional[bool] = None
    skills: Optional[List[str]] = None
    commitment: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    openings: Optional[int] = Field(default=None, ge=1)
    deleted: Optional[bool] = None


# --- Applications ---

class ApplicationCreate(BaseModel):
    volunteer_id: int
    opportunity_id: int
    message: Optional[str] = None
    resume: Optional[str] = None


class Application(BaseModel):
    id: int
    volunteer_id: int
    opportunity_id: int
    ngo_id: int
    status: ApplicationStatus = "pending"
    message: Optional[str] = None
    resume: Optional[str] = None
    created_at: datetime


class ApplicationUpdate(_Patch):
    status: Optional[ApplicationStatus] = None
    message: Optional[str] = None
    resume: Optional[str] = None


# --- Suggestions ---

class SuggestionCreate(BaseModel):
    volunteer_id: int
    ngo_id: int
    content: str = Field(min_length=1)


class Suggestion(BaseModel):
    id: int
    volunteer_id: int
    ngo_id: int
    content: str
    created_at: datetime


class SuggestionUpdate(_Patch):
    content: Optional[str] = Field(default=None, min_length=1)


# --- Sessions ---

class AuthSession(BaseModel):
    sid: str
    user_id: int
    created_at: datetime
    expires_at: datetime
