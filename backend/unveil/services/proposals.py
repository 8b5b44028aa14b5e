from __future__ import annotations

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from unveil.config import Settings, get_settings
from unveil.exceptions import DuplicateProposal, InvalidProposal, OfferNotFound
from unveil.models.campaign import (
    Campaign,
    CampaignStatus,
    CreatorProposal,
    ProposalResult,
)
from unveil.services.campaign_store import CampaignRepository
from unveil.services.catalog import OfferCatalog

logger = logging.getLogger(__name__)

MAX_PROPOSED_DATES = 2

REJECTION_MESSAGE = "El negocio ha seleccionado a otro creador para esta oferta."


@dataclass
class Decision:
    accepted: bool
    selected_date: Optional[date] = None


class DecisionPolicy(ABC):
    """Decides how a business answers a creator proposal."""

    @abstractmethod
    def decide(self, proposal: CreatorProposal) -> Decision:
        ...


class AlternatingPolicy(DecisionPolicy):
    """Accepts and rejects on alternate calls, whoever the creator is.

    Development stand-in for a real business decision. The first proposed
    date is picked on acceptance.
    """

    def __init__(self, start_accepting: bool = True):
        self._accept_next = start_accepting

    def decide(self, proposal: CreatorProposal) -> Decision:
        accepted = self._accept_next
        self._accept_next = not self._accept_next
        selected = proposal.proposed_dates[0] if accepted else None
        return Decision(accepted=accepted, selected_date=selected)


def _format_date(value: date) -> str:
    return f"{value.day}/{value.month}/{value.year}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProposalService:
    """Simulated business answers to creator proposals.

    ``clock`` stamps campaigns; ``today`` is the creator's local calendar
    day, which proposed dates are checked against.
    """

    def __init__(
        self,
        catalog: OfferCatalog,
        repository: CampaignRepository,
        policy: Optional[DecisionPolicy] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow,
        today: Callable[[], date] = date.today,
    ):
        self.catalog = catalog
        self.repository = repository
        self.policy = policy or AlternatingPolicy()
        self.settings = settings or get_settings()
        self.clock = clock
        self.today = today
        self._pending: set[asyncio.Future] = set()

    def _check_open_campaign(self, business_id: str, creator_id: str) -> None:
        if not self.settings.enforce_single_open_campaign:
            return
        if self.repository.find_open(business_id, creator_id) is not None:
            raise DuplicateProposal(business_id, creator_id)

    def validate(self, proposal: CreatorProposal) -> str:
        """Check a proposal and return the business id it targets."""
        offer = self.catalog.get(proposal.offer_id)
        if offer is None:
            raise OfferNotFound(proposal.offer_id)

        dates = proposal.proposed_dates
        if not dates:
            raise InvalidProposal("at least one date must be proposed")
        if len(dates) > MAX_PROPOSED_DATES:
            raise InvalidProposal(f"at most {MAX_PROPOSED_DATES} dates can be proposed")
        today = self.today()
        if any(d < today for d in dates):
            raise InvalidProposal("proposed dates cannot be in the past")

        self._check_open_campaign(offer.business_id, proposal.creator_id)
        return offer.business_id

    async def simulate_business_response(
        self,
        offer_id: str,
        creator_id: str,
        proposed_dates: list[date],
        message: Optional[str] = None,
    ) -> ProposalResult:
        """Answer a proposal after a simulated delay and record the campaign.

        The answer is recorded even if the caller stops waiting for it.
        """
        proposal = CreatorProposal(
            offer_id=offer_id,
            creator_id=creator_id,
            proposed_dates=proposed_dates,
            message=message,
        )
        try:
            business_id = self.validate(proposal)
        except (InvalidProposal, DuplicateProposal) as e:
            logger.warning("Proposal from %s for %s refused: %s", creator_id, offer_id, e)
            raise

        response = asyncio.ensure_future(self._respond(proposal, business_id))
        self._pending.add(response)
        response.add_done_callback(self._response_done)
        return await asyncio.shield(response)

    def _response_done(self, response: asyncio.Future) -> None:
        self._pending.discard(response)
        if response.cancelled():
            return
        error = response.exception()
        if error is not None:
            logger.warning("Proposal response failed: %s", error)

    async def wait_pending(self) -> None:
        """Wait for answers still being simulated."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _respond(self, proposal: CreatorProposal, business_id: str) -> ProposalResult:
        if self.settings.response_delay_seconds > 0:
            await asyncio.sleep(self.settings.response_delay_seconds)

        # No awaits from here on: check, decide and record run as one step
        self._check_open_campaign(business_id, proposal.creator_id)
        decision = self.policy.decide(proposal)
        campaign = self._record_campaign(proposal, business_id, decision.accepted)

        if decision.accepted:
            result_message = (
                "¡El negocio ha aceptado tu propuesta para "
                f"{_format_date(decision.selected_date)}!"
            )
        else:
            result_message = REJECTION_MESSAGE

        logger.info(
            "Proposal from %s for offer %s %s (campaign %s)",
            proposal.creator_id,
            proposal.offer_id,
            "accepted" if decision.accepted else "rejected",
            campaign.id,
        )
        return ProposalResult(
            accepted=decision.accepted,
            selected_date=decision.selected_date,
            message=result_message,
            campaign_id=campaign.id,
        )

    def _record_campaign(
        self, proposal: CreatorProposal, business_id: str, accepted: bool
    ) -> Campaign:
        created_at = self.clock()
        millis = int(created_at.timestamp() * 1000)
        campaign = Campaign(
            id=f"campaign_{millis}_{uuid.uuid4().hex[:6]}",
            business_id=business_id,
            user_id=proposal.creator_id,
            offer_id=proposal.offer_id,
            status=CampaignStatus.ACTIVE if accepted else CampaignStatus.REJECTED,
            created_at=created_at,
            expires_at=created_at + timedelta(days=self.settings.campaign_ttl_days),
        )
        if self.settings.enforce_single_open_campaign and accepted:
            return self.repository.add_exclusive(campaign)
        return self.repository.add(campaign)
