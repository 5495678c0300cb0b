"""Action attestation domain model.

An attestation asserts that an actor took action on a campaign without
revealing what the action was. Once accepted it is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class AttestationKey:
    """Anti-replay identity of an attestation.

    No two accepted attestations may share this key, across all time.
    """

    actor_key: str
    campaign_id: str
    nonce: str


@dataclass(frozen=True, eq=True)
class ActionAttestation:
    """An action attestation parsed from a kind 31102 event.

    Attributes:
        campaign_id: Campaign slug (``d`` tag).
        campaign_event_id: Parent campaign event reference (``e`` tag).
        actor_key: Key that signed the attestation.
        timestamp: Action timestamp (unix seconds).
        nonce: Single-use random token.
        event_id: Id of the attestation event.
        rep_count: Number of representatives contacted, if reported.
    """

    campaign_id: str
    campaign_event_id: str
    actor_key: str
    timestamp: int
    nonce: str
    event_id: str
    rep_count: int | None = None

    def __post_init__(self) -> None:
        """Validate attestation fields."""
        if self.rep_count is not None and self.rep_count < 0:
            raise ValueError("rep_count must be non-negative")

    @property
    def key(self) -> AttestationKey:
        """The (actor, campaign, nonce) identity of this attestation."""
        return AttestationKey(
            actor_key=self.actor_key,
            campaign_id=self.campaign_id,
            nonce=self.nonce,
        )
