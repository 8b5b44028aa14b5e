import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional

from unveil.models.offer import Offer

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent / "data" / "offers.json"


class OfferCatalog:
    """Read-only, ordered collection of offers."""

    def __init__(self, offers: Iterable[Offer]):
        self._offers = list(offers)

    @classmethod
    def from_json(cls, path: Optional[str] = None) -> "OfferCatalog":
        """Load a catalog from a JSON list of offers (bundled sample if no path)."""
        source = Path(path) if path else DEFAULT_CATALOG_PATH
        with open(source, encoding="utf-8") as f:
            raw = json.load(f)
        offers = [Offer.model_validate(item) for item in raw]
        logger.info("Loaded %d offers from %s", len(offers), source)
        return cls(offers)

    def all(self) -> list[Offer]:
        return list(self._offers)

    def get(self, offer_id: str) -> Optional[Offer]:
        for offer in self._offers:
            if offer.id == offer_id:
                return offer
        return None

    def __iter__(self) -> Iterator[Offer]:
        return iter(self._offers)

    def __len__(self) -> int:
        return len(self._offers)
