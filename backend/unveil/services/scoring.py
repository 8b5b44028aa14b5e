from __future__ import annotations

import logging
from typing import Optional

from unveil.config import Settings
from unveil.models.offer import Offer, level_index
from unveil.models.user import User

logger = logging.getLogger(__name__)


def _fuzzy_match(tag: str, interest: str) -> bool:
    tag_lower = tag.lower()
    interest_lower = interest.lower()
    return tag_lower in interest_lower or interest_lower in tag_lower


def _share(required: list[str], available: list[str]) -> float:
    matched = sum(1 for item in required if item in available)
    return matched / len(required)


class ScoringService:
    """Offer/creator compatibility in the 0-1 range.

    Level and category are hard requirements: failing either returns 0
    right away. Every other criterion only adds (part of) its weight.
    """

    def __init__(
        self,
        level_weight: float = 0.25,
        interest_weight: float = 0.25,
        location_weight: float = 0.15,
        platforms_weight: float = 0.15,
        content_type_weight: float = 0.10,
        must_attend_event_weight: float = 0.05,
        exclusive_weight: float = 0.05,
        country_share: float = 0.6,
        city_share: float = 0.4,
    ):
        self.level_weight = level_weight
        self.interest_weight = interest_weight
        self.location_weight = location_weight
        self.platforms_weight = platforms_weight
        self.content_type_weight = content_type_weight
        self.must_attend_event_weight = must_attend_event_weight
        self.exclusive_weight = exclusive_weight
        self.country_share = country_share
        self.city_share = city_share

        total = (
            level_weight + interest_weight + location_weight + platforms_weight
            + content_type_weight + must_attend_event_weight + exclusive_weight
        )
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Scoring weights must add up to 1.0, got {total}")

    @classmethod
    def from_settings(cls, settings: Settings) -> ScoringService:
        return cls(
            level_weight=settings.level_weight,
            interest_weight=settings.interest_weight,
            location_weight=settings.location_weight,
            platforms_weight=settings.platforms_weight,
            content_type_weight=settings.content_type_weight,
            must_attend_event_weight=settings.must_attend_event_weight,
            exclusive_weight=settings.exclusive_weight,
            country_share=settings.country_share,
            city_share=settings.city_share,
        )

    @staticmethod
    def meets_level(offer: Offer, user: User) -> bool:
        if offer.required_level is None:
            return True
        return level_index(offer.required_level) <= level_index(user.stats.level)

    @staticmethod
    def meets_category(offer: Offer, user: User) -> bool:
        if not offer.category:
            return True
        return offer.category in user.interests

    def calculate_location_score(self, offer: Offer, user: User) -> float:
        if offer.is_remote:
            return self.location_weight

        score = 0.0
        if offer.country and user.country and offer.country == user.country:
            score += self.location_weight * self.country_share
            # City only counts on top of a country match
            if offer.city and user.city and offer.city == user.city:
                score += self.location_weight * self.city_share
        return score

    def calculate_platforms_score(self, offer: Offer, user: User) -> float:
        if not offer.platforms_required:
            return self.platforms_weight
        return _share(offer.platforms_required, user.platforms) * self.platforms_weight

    def calculate_content_type_score(self, offer: Offer, user: User) -> float:
        # A creator who never declared content types is not penalised
        if not offer.content_type or user.content_types is None:
            return self.content_type_weight
        return _share(offer.content_type, user.content_types) * self.content_type_weight

    def calculate_event_score(self, offer: Offer, user: User) -> float:
        if not offer.must_attend_event:
            return self.must_attend_event_weight
        if offer.city and user.city and offer.city == user.city:
            return self.must_attend_event_weight
        return 0.0

    def calculate_exclusive_score(self, offer: Offer, user: User) -> float:
        # No creator-side exclusivity preference exists yet
        return self.exclusive_weight

    def score_offer(self, offer: Offer, user: User) -> float:
        """Weighted compatibility score, 0 when a hard requirement fails."""
        if not self.meets_level(offer, user):
            return 0.0
        if not self.meets_category(offer, user):
            return 0.0

        score = (
            self.level_weight
            + self.interest_weight
            + self.calculate_location_score(offer, user)
            + self.calculate_platforms_score(offer, user)
            + self.calculate_content_type_score(offer, user)
            + self.calculate_event_score(offer, user)
            + self.calculate_exclusive_score(offer, user)
        )
        # Drops float noise from adding weights so ties and thresholds compare exactly
        score = round(score, 9)
        logger.debug("Score for %s: %s", offer.title, score)
        return score

    def explain_offer(self, offer: Offer, user: User) -> list[str]:
        """Human readable reasons for every criterion the creator satisfies."""
        matches: list[str] = []

        if offer.required_level is not None and self.meets_level(offer, user):
            matches.append(f"Nivel: {user.stats.level}")

        if offer.category:
            if offer.category in user.interests:
                matches.append(f"Categoría: {offer.category}")
            else:
                related = self.related_tags(offer.custom_tags, user.interests)
                if related:
                    matches.append(f"Tags relacionados: {', '.join(related)}")

        if offer.is_remote:
            matches.append("Trabajo remoto")
        elif offer.country and user.country and offer.country == user.country:
            if offer.city and user.city and offer.city == user.city:
                matches.append(f"Misma ciudad: {offer.city}")
            else:
                matches.append(f"Mismo país: {offer.country}")

        if offer.platforms_required:
            platforms = [p for p in offer.platforms_required if p in user.platforms]
            if platforms:
                matches.append(f"Plataformas: {', '.join(platforms)}")

        if offer.content_type and user.content_types is not None:
            content = [c for c in offer.content_type if c in user.content_types]
            if content:
                matches.append(f"Contenido: {', '.join(content)}")

        if offer.must_attend_event is not None:
            if offer.must_attend_event:
                if offer.city and user.city and offer.city == user.city:
                    matches.append("Evento en tu ciudad")
            else:
                matches.append("No requiere asistencia presencial")

        if offer.exclusive:
            matches.append("Requiere exclusividad")
        elif offer.exclusive is False:
            matches.append("No requiere exclusividad")

        return matches

    @staticmethod
    def related_tags(
        custom_tags: Optional[list[str]], interests: list[str]
    ) -> list[str]:
        """Custom tags that loosely match any interest (substring, either way)."""
        if not custom_tags:
            return []
        return [
            tag for tag in custom_tags
            if any(_fuzzy_match(tag, interest) for interest in interests)
        ]
