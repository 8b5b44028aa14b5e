from typing import Optional

from pydantic import BaseModel


class SocialMediaProfile(BaseModel):
    platform: str
    username: str


class UserReview(BaseModel):
    text_review: str
    business_id: str
    stars: int


class UserStats(BaseModel):
    campaigns: int = 0
    reviews: list[UserReview] = []
    # Free text on purpose: unknown values rank below every tier
    level: str = "Principiante"


class User(BaseModel):
    id: str
    full_name: str = ""
    email: str = ""
    role: str = "creator"  # guest/creator/business
    country: Optional[str] = None
    city: Optional[str] = None
    social_media: list[SocialMediaProfile] = []
    stats: UserStats = UserStats()
    interests: list[str] = []
    content_types: Optional[list[str]] = None  # post, story, video, reel...
    gender: Optional[str] = None
    birth_date: Optional[str] = None
    languages: Optional[list[str]] = None

    @property
    def platforms(self) -> list[str]:
        return [s.platform for s in self.social_media]
