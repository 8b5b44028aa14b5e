import pytest

from unveil.config import Settings
from unveil.models.offer import Offer
from unveil.models.user import SocialMediaProfile, User, UserStats
from unveil.services.campaign_store import InMemoryCampaignRepository
from unveil.services.catalog import OfferCatalog
from unveil.services.matching import MatchingService
from unveil.services.proposals import AlternatingPolicy


@pytest.fixture
def settings():
    return Settings(response_delay_seconds=0, _env_file=None)


@pytest.fixture
def user():
    return User(
        id="user_1",
        full_name="Camila Rojas",
        email="camila@example.com",
        country="Chile",
        city="Santiago",
        social_media=[
            SocialMediaProfile(platform="Instagram", username="camirojas"),
            SocialMediaProfile(platform="TikTok", username="cami.rojas"),
        ],
        stats=UserStats(campaigns=3, level="Intermedio"),
        interests=["Gastronomía", "Viajes"],
        content_types=["reel", "story"],
    )


@pytest.fixture
def offers():
    return [
        # 1.0: everything satisfied
        Offer(
            id="o_remote", business_id="b_1", title="Remote food review",
            category="Gastronomía", required_level="Principiante", is_remote=True,
        ),
        # 0.85: no platform match
        Offer(
            id="o_youtube", business_id="b_1", title="YouTube review",
            category="Gastronomía", is_remote=True, platforms_required=["YouTube"],
        ),
        # hard exclusion: level too high
        Offer(
            id="o_advanced", business_id="b_2", title="Advanced only",
            category="Viajes", required_level="Avanzado", is_remote=True,
        ),
        # hard exclusion: category not in interests
        Offer(
            id="o_fashion", business_id="b_3", title="Fashion haul",
            category="Moda", is_remote=True,
        ),
        # 1.0: same city event, ties with o_remote
        Offer(
            id="o_event", business_id="b_4", title="Launch event",
            category="Viajes", country="Chile", city="Santiago",
            must_attend_event=True, exclusive=True,
        ),
        # 0.55: only level, interest and exclusive count
        Offer(
            id="o_far", business_id="b_5", title="Lima tasting",
            category="Gastronomía", country="Perú", city="Lima",
            must_attend_event=True, platforms_required=["YouTube"],
            content_type=["post"],
        ),
    ]


@pytest.fixture
def catalog(offers):
    return OfferCatalog(offers)


@pytest.fixture
def repository():
    return InMemoryCampaignRepository()


@pytest.fixture
def service(catalog, repository, settings):
    return MatchingService(
        catalog=catalog,
        repository=repository,
        policy=AlternatingPolicy(),
        settings=settings,
    )
