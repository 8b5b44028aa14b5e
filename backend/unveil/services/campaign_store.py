import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from unveil.exceptions import CampaignNotFound, DuplicateProposal
from unveil.models.campaign import OPEN_STATUSES, Campaign, CampaignStatus

logger = logging.getLogger(__name__)


class CampaignRepository(ABC):
    """Storage for campaigns created from creator proposals."""

    @abstractmethod
    def add(self, campaign: Campaign) -> Campaign:
        ...

    @abstractmethod
    def get(self, campaign_id: str) -> Optional[Campaign]:
        ...

    @abstractmethod
    def list_all(self) -> list[Campaign]:
        ...

    @abstractmethod
    def update_status(self, campaign_id: str, status: CampaignStatus) -> Campaign:
        ...

    def list_for_user(self, user_id: str) -> list[Campaign]:
        return [c for c in self.list_all() if c.user_id == user_id]

    def find_open(self, business_id: str, user_id: str) -> Optional[Campaign]:
        """Pending or active campaign between a business and a user, if any."""
        for campaign in self.list_for_user(user_id):
            if campaign.business_id == business_id and campaign.status in OPEN_STATUSES:
                return campaign
        return None

    def add_exclusive(self, campaign: Campaign) -> Campaign:
        """Add a campaign unless the business and user already have an open one."""
        if self.find_open(campaign.business_id, campaign.user_id) is not None:
            raise DuplicateProposal(campaign.business_id, campaign.user_id)
        return self.add(campaign)


class InMemoryCampaignRepository(CampaignRepository):
    """Process-lifetime campaign list. Insertion order is preserved."""

    def __init__(self, campaigns: Optional[list[Campaign]] = None):
        self._campaigns: list[Campaign] = list(campaigns or [])
        self._lock = threading.Lock()

    def add(self, campaign: Campaign) -> Campaign:
        with self._lock:
            self._campaigns.append(campaign)
        return campaign

    def add_exclusive(self, campaign: Campaign) -> Campaign:
        with self._lock:
            for existing in self._campaigns:
                if (
                    existing.business_id == campaign.business_id
                    and existing.user_id == campaign.user_id
                    and existing.status in OPEN_STATUSES
                ):
                    raise DuplicateProposal(campaign.business_id, campaign.user_id)
            self._campaigns.append(campaign)
        return campaign

    def get(self, campaign_id: str) -> Optional[Campaign]:
        for campaign in self._campaigns:
            if campaign.id == campaign_id:
                return campaign
        return None

    def list_all(self) -> list[Campaign]:
        return list(self._campaigns)

    def update_status(self, campaign_id: str, status: CampaignStatus) -> Campaign:
        with self._lock:
            for campaign in self._campaigns:
                if campaign.id == campaign_id:
                    campaign.status = status
                    logger.info("Campaign %s moved to %s", campaign_id, status.value)
                    return campaign
        raise CampaignNotFound(campaign_id)

    def __len__(self) -> int:
        return len(self._campaigns)
