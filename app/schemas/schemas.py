# Copyright (c) 2025 Fernando Guerriero Cardoso da Silva.
# SPDX-License-Identifier: MIT
#

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.db.models import ApplicationStatus, UserType


class Token(BaseModel):
    access_token: str
    token_type: str


class UserRegister(BaseModel):
    """
    Self-service sign-up. Recruiters are linked to an NGO only by creating one.
    """

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    email: EmailStr
    full_name: str = Field(min_length=1)
    user_type: UserType
    phone_number: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    interests: Optional[List[str]] = None


class UserPublic(BaseModel):
    id: int
    username: str
    email: str
    full_name: str
    user_type: UserType
    phone_number: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    interests: Optional[List[str]] = None
    ngo_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1)
    phone_number: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    interests: Optional[List[str]] = None


class OpportunityRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1)
    remote: bool = False
    skills: Optional[List[str]] = None
    commitment: str = Field(min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    openings: int = Field(default=1, ge=1)


class ApplicationRequest(BaseModel):
    opportunity_id: int
    message: Optional[str] = None
    resume: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class SuggestionRequest(BaseModel):
    ngo_id: int
    content: str = Field(min_length=1)


class Message(BaseModel):
    message: str


class HealthStatus(BaseModel):
    status: Literal["ok"]
    storage_backend: str
    storage_connection: str
