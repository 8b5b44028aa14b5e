from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from unveil.models.offer import Offer


class CampaignStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELED = "canceled"


# Statuses that end a creator/business relationship
CLOSED_STATUSES = {CampaignStatus.COMPLETED, CampaignStatus.CANCELED}
OPEN_STATUSES = {CampaignStatus.PENDING, CampaignStatus.ACTIVE}


class Campaign(BaseModel):
    id: str
    business_id: str
    user_id: str
    offer_id: Optional[str] = None
    status: CampaignStatus
    created_at: datetime
    expires_at: Optional[datetime] = None


class CreatorProposal(BaseModel):
    offer_id: str
    creator_id: str
    proposed_dates: list[date]
    message: Optional[str] = None


class ProposalResult(BaseModel):
    accepted: bool
    selected_date: Optional[date] = None
    message: str
    campaign_id: Optional[str] = None


class ApplicationStatus(BaseModel):
    applied: bool
    status: Optional[CampaignStatus] = None


class OfferMatch(BaseModel):
    offer: Offer
    score: float
    matches: list[str] = []
