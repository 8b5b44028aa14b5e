import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from unveil.config import Settings
from unveil.exceptions import DuplicateProposal, InvalidProposal, OfferNotFound
from unveil.models.campaign import ApplicationStatus, CampaignStatus, CreatorProposal
from unveil.services.campaign_store import InMemoryCampaignRepository
from unveil.services.matching import MatchingService
from unveil.services.proposals import AlternatingPolicy, ProposalService


def upcoming(days=7):
    return date.today() + timedelta(days=days)


def test_alternating_policy_flips_every_call():
    policy = AlternatingPolicy()
    proposal = CreatorProposal(offer_id="o", creator_id="u", proposed_dates=[date(2030, 1, 5)])
    decisions = [policy.decide(proposal) for _ in range(4)]
    assert [d.accepted for d in decisions] == [True, False, True, False]
    assert decisions[0].selected_date == date(2030, 1, 5)
    assert decisions[1].selected_date is None


def test_alternating_policy_can_start_rejecting():
    policy = AlternatingPolicy(start_accepting=False)
    proposal = CreatorProposal(offer_id="o", creator_id="u", proposed_dates=[date(2030, 1, 5)])
    assert policy.decide(proposal).accepted is False


@pytest.mark.asyncio
async def test_accepted_proposal_creates_active_campaign(service):
    first, second = upcoming(3), upcoming(5)
    result = await service.submit_proposal("o_remote", "user_1", [first, second])

    assert result.accepted is True
    assert result.selected_date == first
    assert result.message == (
        f"¡El negocio ha aceptado tu propuesta para {first.day}/{first.month}/{first.year}!"
    )

    campaign = service.get_campaign_by_id(result.campaign_id)
    assert campaign.status == CampaignStatus.ACTIVE
    assert campaign.business_id == "b_1"
    assert campaign.user_id == "user_1"
    assert campaign.offer_id == "o_remote"
    assert campaign.id.startswith("campaign_")
    assert campaign.expires_at - campaign.created_at == timedelta(days=30)

    assert service.get_user_application_status("o_remote", "user_1") == ApplicationStatus(
        applied=True, status=CampaignStatus.ACTIVE
    )


@pytest.mark.asyncio
async def test_decisions_alternate_across_users(service):
    outcomes = []
    for creator in ("user_1", "user_2", "user_2", "user_3"):
        result = await service.submit_proposal("o_event", creator, [upcoming()])
        outcomes.append(result.accepted)
    assert outcomes == [True, False, True, False]
    assert len(service.repository) == 4


@pytest.mark.asyncio
async def test_rejected_proposal_is_recorded(service):
    await service.submit_proposal("o_event", "user_1", [upcoming()])
    result = await service.simulate_business_response("o_remote", "user_2", [upcoming()])

    assert result.accepted is False
    assert result.selected_date is None
    assert result.message == "El negocio ha seleccionado a otro creador para esta oferta."
    assert service.get_user_application_status("o_remote", "user_2") == ApplicationStatus(
        applied=True, status=CampaignStatus.REJECTED
    )
    assert service.get_applied_offers_by_user("user_2") == ["o_remote", "o_youtube"]


@pytest.mark.asyncio
async def test_unknown_offer_raises(service):
    with pytest.raises(OfferNotFound):
        await service.submit_proposal("missing", "user_1", [upcoming()])
    assert len(service.repository) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("dates", [
    [],
    [upcoming(1), upcoming(2), upcoming(3)],
    [date.today() - timedelta(days=3)],
])
async def test_invalid_dates_raise(service, dates):
    with pytest.raises(InvalidProposal):
        await service.submit_proposal("o_remote", "user_1", dates)
    assert len(service.repository) == 0


@pytest.mark.asyncio
async def test_invalid_proposal_does_not_flip_policy(service):
    with pytest.raises(InvalidProposal):
        await service.submit_proposal("o_remote", "user_1", [])
    result = await service.submit_proposal("o_remote", "user_1", [upcoming()])
    assert result.accepted is True


@pytest.mark.asyncio
async def test_duplicates_allowed_by_default(service):
    await service.submit_proposal("o_remote", "user_1", [upcoming()])
    await service.submit_proposal("o_remote", "user_1", [upcoming()])
    await service.submit_proposal("o_youtube", "user_1", [upcoming()])
    assert len(service.get_user_campaigns("user_1")) == 3


@pytest.mark.asyncio
async def test_single_open_campaign_can_be_enforced(catalog):
    settings = Settings(
        response_delay_seconds=0, enforce_single_open_campaign=True, _env_file=None,
    )
    service = MatchingService(catalog=catalog, settings=settings)

    await service.submit_proposal("o_remote", "user_1", [upcoming()])
    with pytest.raises(DuplicateProposal):
        await service.submit_proposal("o_youtube", "user_1", [upcoming()])

    # A rejected campaign does not block a new proposal
    rejected = await service.submit_proposal("o_event", "user_1", [upcoming()])
    assert rejected.accepted is False
    accepted = await service.submit_proposal("o_event", "user_1", [upcoming()])
    assert accepted.accepted is True


@pytest.mark.asyncio
async def test_response_uses_configured_clock_and_ttl(catalog):
    fixed = datetime(2030, 3, 1, 10, 0, tzinfo=timezone.utc)
    settings = Settings(response_delay_seconds=0, campaign_ttl_days=10, _env_file=None)
    repository = InMemoryCampaignRepository()
    proposals = ProposalService(
        catalog=catalog,
        repository=repository,
        settings=settings,
        clock=lambda: fixed,
        today=lambda: date(2030, 3, 1),
    )

    result = await proposals.simulate_business_response(
        "o_remote", "user_1", [date(2030, 3, 1)]
    )
    campaign = repository.get(result.campaign_id)
    assert campaign.created_at == fixed
    assert campaign.expires_at == datetime(2030, 3, 11, 10, 0, tzinfo=timezone.utc)
    assert campaign.id.startswith(f"campaign_{int(fixed.timestamp() * 1000)}_")

    with pytest.raises(InvalidProposal):
        await proposals.simulate_business_response("o_remote", "user_1", [date(2030, 2, 28)])


@pytest.mark.asyncio
async def test_campaign_ids_are_unique(service):
    results = [await service.submit_proposal("o_remote", "user_1", [upcoming()]) for _ in range(5)]
    assert len({r.campaign_id for r in results}) == 5


@pytest.mark.asyncio
async def test_concurrent_proposals_respect_single_open_campaign(catalog):
    settings = Settings(
        response_delay_seconds=0.05, enforce_single_open_campaign=True, _env_file=None,
    )
    service = MatchingService(catalog=catalog, settings=settings)

    results = await asyncio.gather(
        service.submit_proposal("o_remote", "user_1", [upcoming()]),
        service.submit_proposal("o_youtube", "user_1", [upcoming()]),
        service.submit_proposal("o_remote", "user_1", [upcoming()]),
        return_exceptions=True,
    )

    assert results[0].accepted is True
    assert isinstance(results[1], DuplicateProposal)
    assert isinstance(results[2], DuplicateProposal)
    campaigns = service.get_user_campaigns("user_1")
    assert [c.status for c in campaigns] == [CampaignStatus.ACTIVE]


@pytest.mark.asyncio
async def test_abandoned_proposal_is_still_recorded(catalog):
    settings = Settings(response_delay_seconds=0.05, _env_file=None)
    service = MatchingService(catalog=catalog, settings=settings)

    caller = asyncio.ensure_future(service.submit_proposal("o_remote", "user_1", [upcoming()]))
    await asyncio.sleep(0.01)
    caller.cancel()
    await service.proposals.wait_pending()

    assert caller.cancelled()
    campaigns = service.get_user_campaigns("user_1")
    assert [c.status for c in campaigns] == [CampaignStatus.ACTIVE]
    # The toggle moved on, so the next answer is a rejection
    result = await service.submit_proposal("o_event", "user_1", [upcoming()])
    assert result.accepted is False


@pytest.mark.asyncio
async def test_proposal_for_local_today_is_accepted_after_utc_midnight(catalog):
    # 01:00 UTC on 2 March is still 1 March in Santiago
    settings = Settings(response_delay_seconds=0, _env_file=None)
    repository = InMemoryCampaignRepository()
    proposals = ProposalService(
        catalog=catalog,
        repository=repository,
        settings=settings,
        clock=lambda: datetime(2030, 3, 2, 1, 0, tzinfo=timezone.utc),
        today=lambda: date(2030, 3, 1),
    )

    result = await proposals.simulate_business_response("o_remote", "user_1", [date(2030, 3, 1)])
    assert result.accepted is True
    assert result.selected_date == date(2030, 3, 1)
