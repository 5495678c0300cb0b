"""Event schema: raw relay envelopes and the typed variants parsed from them.

Relays deliver Nostr-style events: an envelope (id, pubkey, created_at,
kind, tags, content) where ``tags`` is a loosely typed list of string
arrays. The validator turns each envelope into exactly one closed variant
below. Unrecognized tag names are carried as ``extra_tags`` and never cause
a validation failure.

Kind discriminators are reused verbatim from the wire protocol:
- 31100: Campaign
- 31101: Campaign update
- 31102: Action attestation
- 1 / 6 / 7: Comment / repost (share) / reaction social signals
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from movement.domain.models.attestation import ActionAttestation
from movement.domain.models.campaign import Campaign, CampaignUpdate

CAMPAIGN_KIND = 31100
CAMPAIGN_UPDATE_KIND = 31101
ACTION_ATTESTATION_KIND = 31102

COMMENT_KIND = 1
REPOST_KIND = 6
REACTION_KIND = 7

Tag = tuple[str, ...]


class SocialSignalType(str, Enum):
    """Lightweight social signal referencing a campaign event."""

    SHARE = "share"
    REACTION = "reaction"
    COMMENT = "comment"


SOCIAL_SIGNAL_KINDS: dict[int, SocialSignalType] = {
    REPOST_KIND: SocialSignalType.SHARE,
    REACTION_KIND: SocialSignalType.REACTION,
    COMMENT_KIND: SocialSignalType.COMMENT,
}


@dataclass(frozen=True)
class RawEvent:
    """Structurally valid event envelope.

    Attributes:
        id: Event id (hex digest in the wire protocol).
        pubkey: Issuer key. Signature is verified upstream.
        created_at: Envelope timestamp (unix seconds).
        kind: Kind discriminator.
        tags: Tags with every element coerced to str.
        content: Event content.
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: tuple[Tag, ...]
    content: str = ""

    def first_tag(self, name: str) -> str | None:
        """Return the value of the first tag called ``name``, if any."""
        for tag in self.tags:
            if tag[0] == name and len(tag) > 1:
                return tag[1]
        return None

    def all_tags(self, name: str) -> list[str]:
        """Return the values of every tag called ``name``, in order."""
        return [tag[1] for tag in self.tags if tag[0] == name and len(tag) > 1]

    def tags_except(self, names: frozenset[str]) -> tuple[Tag, ...]:
        """Return the tags whose name is not in ``names``."""
        return tuple(tag for tag in self.tags if tag[0] not in names)


@dataclass(frozen=True)
class CampaignEvent:
    """A valid kind 31100 event."""

    raw: RawEvent
    campaign: Campaign
    extra_tags: tuple[Tag, ...] = ()


@dataclass(frozen=True)
class CampaignUpdateEvent:
    """A valid kind 31101 event."""

    raw: RawEvent
    update: CampaignUpdate
    extra_tags: tuple[Tag, ...] = ()


@dataclass(frozen=True)
class ActionAttestationEvent:
    """A valid kind 31102 event."""

    raw: RawEvent
    attestation: ActionAttestation
    extra_tags: tuple[Tag, ...] = ()


@dataclass(frozen=True)
class SocialSignalEvent:
    """A share, reaction, or comment referencing a campaign event.

    Attributes:
        raw: Source envelope.
        signal_type: Which social counter this feeds.
        campaign_event_id: Referenced campaign event id (``e`` tag).
    """

    raw: RawEvent
    signal_type: SocialSignalType
    campaign_event_id: str

    @property
    def event_id(self) -> str:
        return self.raw.id


@dataclass(frozen=True)
class UnrecognizedEvent:
    """Structurally valid envelope of a kind this engine does not consume."""

    raw: RawEvent


ParsedEvent = Union[
    CampaignEvent,
    CampaignUpdateEvent,
    ActionAttestationEvent,
    SocialSignalEvent,
    UnrecognizedEvent,
]
