"""
Database Schemas for Contest Hub

Each document Pydantic model maps to a MongoDB collection:
- User         -> "users"
- Contest      -> "contests"
- Registration -> "registrations"

Field names are camelCase because they are the wire format the client
application reads and writes. Profile-style records accept extra fields
and store them as sent.
"""
from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Optional, Literal

Role = Literal["none", "creator", "admin"]
ContestStatus = Literal["pending", "approved"]


# Users

class TokenRequest(BaseModel):
    """Identity claims signed into the session token."""
    model_config = ConfigDict(extra="allow")

    email: EmailStr = Field(..., description="Email address, the identity key")


class UserUpsert(BaseModel):
    """Profile saved on login. The role is assigned by the server."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(None, description="Display name")
    photo: Optional[str] = Field(None, description="Avatar URL")


class UserUpdate(BaseModel):
    """Admin edit of a user document."""
    model_config = ConfigDict(extra="allow")

    role: Optional[Role] = Field(None, description="New role")


# Contests

class PersonInfo(BaseModel):
    """Embedded person record: creator, participant or winner."""
    model_config = ConfigDict(extra="allow")

    email: EmailStr = Field(..., description="Email address")
    name: Optional[str] = Field(None, description="Display name")
    image: Optional[str] = Field(None, description="Avatar URL")


class Contest(BaseModel):
    name: str = Field(..., description="Contest name")
    price: float = Field(..., ge=0, description="Registration fee in dollars")
    image: Optional[str] = Field(None, description="Cover image URL")
    prizeMoney: float = Field(0, ge=0, description="Prize for the winner in dollars")
    category: str = Field(..., description="Contest category, e.g. 'Article Writing'")
    deadline: str = Field(..., description="ISO-8601 deadline as chosen by the creator")
    taskSubmissionText: Optional[str] = Field(None, description="What participants must submit")
    description: Optional[str] = Field(None, description="Long description")
    creatorInfo: PersonInfo = Field(..., description="Who created the contest")


class ContestUpdate(BaseModel):
    """Creator edit. Only fields present in the request are written."""
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    prizeMoney: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    deadline: Optional[str] = None
    taskSubmissionText: Optional[str] = None
    description: Optional[str] = None


class StatusUpdate(BaseModel):
    status: ContestStatus = Field(..., description="New lifecycle state")


# Registrations and payments

class Registration(BaseModel):
    model_config = ConfigDict(extra="allow")

    contestId: str = Field(..., description="Id of the contest registered for")
    email: EmailStr = Field(..., description="Participant email")
    submission: Optional[str] = Field(None, description="Submitted task, link or text")


class PaymentIntentRequest(BaseModel):
    price: Optional[float] = Field(None, description="Amount in dollars")
