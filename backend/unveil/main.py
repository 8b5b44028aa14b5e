import logging
from typing import Optional

from unveil.config import Settings, get_settings
from unveil.services.campaign_store import CampaignRepository, InMemoryCampaignRepository
from unveil.services.catalog import OfferCatalog
from unveil.services.matching import MatchingService
from unveil.services.proposals import AlternatingPolicy, DecisionPolicy
from unveil.services.scoring import ScoringService

logger = logging.getLogger(__name__)


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_matching_service(
    settings: Optional[Settings] = None,
    catalog: Optional[OfferCatalog] = None,
    repository: Optional[CampaignRepository] = None,
    policy: Optional[DecisionPolicy] = None,
) -> MatchingService:
    """Wire the matching engine from settings. Call once at app start."""
    settings = settings or get_settings()
    catalog = catalog or OfferCatalog.from_json(settings.catalog_path or None)

    service = MatchingService(
        catalog=catalog,
        repository=repository or InMemoryCampaignRepository(),
        scoring=ScoringService.from_settings(settings),
        policy=policy or AlternatingPolicy(),
        settings=settings,
    )
    logger.info("%s ready with %d offers", settings.app_name, len(catalog))
    return service
