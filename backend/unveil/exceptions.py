class MatchingError(Exception):
    """Base class for matching engine errors."""


class OfferNotFound(MatchingError):
    def __init__(self, offer_id: str):
        self.offer_id = offer_id
        super().__init__(f"Offer not found: {offer_id}")


class CampaignNotFound(MatchingError):
    def __init__(self, campaign_id: str):
        self.campaign_id = campaign_id
        super().__init__(f"Campaign not found: {campaign_id}")


class InvalidProposal(MatchingError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid proposal: {reason}")


class DuplicateProposal(MatchingError):
    def __init__(self, business_id: str, user_id: str):
        self.business_id = business_id
        self.user_id = user_id
        super().__init__(
            f"User {user_id} already has an open campaign with business {business_id}"
        )


class InvalidStatusTransition(MatchingError):
    def __init__(self, campaign_id: str, current: str, target: str):
        self.campaign_id = campaign_id
        self.current = current
        self.target = target
        super().__init__(
            f"Campaign {campaign_id} cannot move from {current} to {target}"
        )
