"""
Matching between creators and offers, plus the campaign queries the app
screens rely on.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from unveil.config import Settings, get_settings
from unveil.exceptions import CampaignNotFound, InvalidStatusTransition
from unveil.models.campaign import (
    CLOSED_STATUSES,
    OPEN_STATUSES,
    ApplicationStatus,
    Campaign,
    CampaignStatus,
    OfferMatch,
    ProposalResult,
)
from unveil.models.offer import Offer
from unveil.models.user import User
from unveil.services.campaign_store import CampaignRepository, InMemoryCampaignRepository
from unveil.services.catalog import OfferCatalog
from unveil.services.proposals import DecisionPolicy, ProposalService
from unveil.services.scoring import ScoringService

logger = logging.getLogger(__name__)


class MatchingService:
    def __init__(
        self,
        catalog: OfferCatalog,
        repository: Optional[CampaignRepository] = None,
        scoring: Optional[ScoringService] = None,
        policy: Optional[DecisionPolicy] = None,
        settings: Optional[Settings] = None,
        proposals: Optional[ProposalService] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog
        self.repository = repository or InMemoryCampaignRepository()
        self.scoring = scoring or ScoringService.from_settings(self.settings)
        self.proposals = proposals or ProposalService(
            catalog=self.catalog,
            repository=self.repository,
            policy=policy,
            settings=self.settings,
        )

    # ----- Matching -----

    def get_all_offers(self) -> list[Offer]:
        return self.catalog.all()

    def _closed_business_ids(self, user_id: str) -> set[str]:
        """Businesses whose relationship with the user already ended."""
        return {
            c.business_id
            for c in self.repository.list_for_user(user_id)
            if c.status in CLOSED_STATUSES
        }

    def _candidate_offers(self, user: User) -> list[Offer]:
        closed = self._closed_business_ids(user.id)
        return [o for o in self.catalog if o.business_id not in closed]

    def get_matching_offers(self, user: Optional[User]) -> list[Offer]:
        """Offers scoring at least feed_min_score, best first."""
        if user is None:
            return []

        scored = [
            (offer, self.scoring.score_offer(offer, user))
            for offer in self._candidate_offers(user)
        ]
        scored = [item for item in scored if item[1] >= self.settings.feed_min_score]
        # sorted() is stable, equal scores keep catalog order
        scored = sorted(scored, key=lambda item: item[1], reverse=True)
        return [offer for offer, _ in scored]

    def get_matching_offers_with_details(self, user: Optional[User]) -> list[OfferMatch]:
        """Like get_matching_offers, with scores and match reasons and a lower threshold."""
        if user is None:
            return []

        results = []
        for offer in self._candidate_offers(user):
            score = self.scoring.score_offer(offer, user)
            if score < self.settings.detail_min_score:
                continue
            results.append(OfferMatch(
                offer=offer,
                score=score,
                matches=self.scoring.explain_offer(offer, user),
            ))
        return sorted(results, key=lambda m: m.score, reverse=True)

    # ----- Proposals -----

    async def submit_proposal(
        self,
        offer_id: str,
        creator_id: str,
        proposed_dates: list[date],
        message: Optional[str] = None,
    ) -> ProposalResult:
        return await self.proposals.simulate_business_response(
            offer_id, creator_id, proposed_dates, message
        )

    simulate_business_response = submit_proposal

    def _transition(self, campaign_id: str, target: CampaignStatus) -> Campaign:
        campaign = self.repository.get(campaign_id)
        if campaign is None:
            raise CampaignNotFound(campaign_id)
        if campaign.status not in OPEN_STATUSES:
            raise InvalidStatusTransition(campaign_id, campaign.status.value, target.value)
        return self.repository.update_status(campaign_id, target)

    def complete_campaign(self, campaign_id: str) -> Campaign:
        return self._transition(campaign_id, CampaignStatus.COMPLETED)

    def cancel_campaign(self, campaign_id: str) -> Campaign:
        return self._transition(campaign_id, CampaignStatus.CANCELED)

    # ----- Queries -----

    def get_offer_by_id(self, offer_id: str) -> Optional[Offer]:
        return self.catalog.get(offer_id)

    def get_campaign_by_id(self, campaign_id: str) -> Optional[Campaign]:
        return self.repository.get(campaign_id)

    def get_user_campaigns(self, user_id: str) -> list[Campaign]:
        return self.repository.list_for_user(user_id)

    def get_user_application_status(self, offer_id: str, user_id: str) -> ApplicationStatus:
        """Status of the user's current (not completed/canceled) campaign with the offer's business."""
        offer = self.get_offer_by_id(offer_id)
        if offer is None:
            return ApplicationStatus(applied=False)

        for campaign in self.repository.list_for_user(user_id):
            if campaign.business_id == offer.business_id and campaign.status not in CLOSED_STATUSES:
                return ApplicationStatus(applied=True, status=campaign.status)
        return ApplicationStatus(applied=False)

    def has_user_applied_to_offer(self, offer_id: str, user_id: str) -> bool:
        return self.get_user_application_status(offer_id, user_id).applied

    def get_applied_offers_by_user(self, user_id: str) -> list[str]:
        """Ids of every offer from a business the user has a campaign with.

        Matches by business, so sibling offers of the one actually applied
        to are reported as well.
        """
        business_ids = {c.business_id for c in self.repository.list_for_user(user_id)}
        return [o.id for o in self.catalog if o.business_id in business_ids]
