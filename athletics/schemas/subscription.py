from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime


class SubscriptionCreate(BaseModel):
    """Email reminder sign-up"""
    email: str = Field(..., max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    sports: List[str] = Field(..., min_length=1)


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    sports: List[str]
    created_at: datetime
    message: Optional[str] = None


class UnsubscribeRequest(BaseModel):
    """Without sports, the whole subscription is removed"""
    token: str
    sports: Optional[List[str]] = None


class UnsubscribeResponse(BaseModel):
    message: str
    fully_unsubscribed: bool
    remaining_sports: List[str] = Field(default_factory=list)


class SubscriptionSportsResponse(BaseModel):
    sports: List[str]


class PushKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionCreate(BaseModel):
    """Browser PushSubscription.toJSON() plus the sports to follow"""
    endpoint: str = Field(..., min_length=1)
    keys: PushKeys
    sports: List[str] = Field(..., min_length=1)


class PushSubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    endpoint: str
    sports: List[str]
    created_at: datetime
    updated_at: datetime


class PushUnsubscribeRequest(BaseModel):
    endpoint: str
