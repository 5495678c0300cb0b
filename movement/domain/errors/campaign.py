"""Campaign errors."""

from __future__ import annotations

from movement.domain.exceptions import MovementError


class CampaignNotFoundError(MovementError):
    """Raised when a campaign id is not present in the read model."""

    def __init__(self, campaign_id: str) -> None:
        self.campaign_id = campaign_id
        super().__init__(f"Campaign not found: {campaign_id}")


class UnauthorizedUpdateError(MovementError):
    """Raised when a campaign update is issued by a key other than the creator.

    Never propagated out of ingestion: the update is discarded and counted.

    Attributes:
        campaign_id: Campaign the update targeted.
        issuer_key: Key that signed the update.
        creator_key: Key that owns the campaign.
    """

    def __init__(self, campaign_id: str, issuer_key: str, creator_key: str) -> None:
        self.campaign_id = campaign_id
        self.issuer_key = issuer_key
        self.creator_key = creator_key
        super().__init__(
            f"Update to campaign {campaign_id} by {issuer_key} rejected: "
            f"campaign is owned by {creator_key}"
        )


class CampaignAlreadyExistsError(MovementError):
    """Raised when submitting a campaign whose slug is already taken."""

    def __init__(self, campaign_id: str) -> None:
        self.campaign_id = campaign_id
        super().__init__(f"Campaign already exists: {campaign_id}")
