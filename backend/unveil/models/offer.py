from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Level(str, Enum):
    PRINCIPIANTE = "Principiante"
    INTERMEDIO = "Intermedio"
    AVANZADO = "Avanzado"


# Lowest to highest
LEVEL_ORDER = [Level.PRINCIPIANTE, Level.INTERMEDIO, Level.AVANZADO]


def level_index(level: str) -> int:
    """Position of a level in LEVEL_ORDER, -1 when unrecognized."""
    for i, tier in enumerate(LEVEL_ORDER):
        if level == tier:
            return i
    return -1


class Incentive(BaseModel):
    type: str  # e.g. "Cena", "Hospedaje", "Descuento"
    description: str
    value: Optional[float] = None


class Offer(BaseModel):
    id: str
    business_id: str
    business_name: str = ""
    title: str
    description: str = ""
    category: Optional[str] = None  # e.g. "Gastronomía", "Moda", "Viajes"
    required_level: Optional[Level] = None
    incentive: Optional[Incentive] = None
    status: str = "active"  # active/pending/completed/rejected
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    deadline: Optional[datetime] = None

    # Eligibility
    country: Optional[str] = None
    city: Optional[str] = None
    is_remote: Optional[bool] = None
    platforms_required: Optional[list[str]] = None
    content_type: Optional[list[str]] = None
    must_attend_event: Optional[bool] = None
    exclusive: Optional[bool] = None
    min_followers: Optional[int] = None
    age_range: Optional[tuple[int, int]] = None
    gender_required: Optional[str] = None  # male/female/any
    languages_required: Optional[list[str]] = None
    custom_tags: Optional[list[str]] = None

    # Reward
    reward_type: Optional[str] = None  # monetary/exchange/gift/experience
    reward_value: Optional[float] = None
    reward_currency: Optional[str] = None

    max_applicants: Optional[int] = None
    available_slots: Optional[int] = None
    is_urgent: Optional[bool] = None
