"""Event validator for raw relay events.

Relays are untrusted: they duplicate, reorder, and occasionally deliver
garbage. This module turns a raw envelope (a mapping decoded from relay
JSON) into exactly one typed variant, or raises MalformedEventError.

Rules:
- The envelope must carry id, pubkey, created_at, kind and tags
- Tag names must be strings; numeric tag values are coerced to str
- Unrecognized tags are extension data, never a failure
- Unrecognized kinds yield UnrecognizedEvent, never a failure
- Attestations must not leak location or representative identity; a
  postal code is rejected in content and in any free-text tag value

The validator is pure: no I/O, no clocks, no logging. Counting and
logging rejected events is the ingestion service's job.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final

from movement.domain.errors.event import MalformedEventError
from movement.domain.models.attestation import ActionAttestation
from movement.domain.models.campaign import (
    Campaign,
    CampaignCategory,
    CampaignStatus,
    CampaignUpdate,
    TargetLevel,
)
from movement.domain.models.events import (
    ACTION_ATTESTATION_KIND,
    CAMPAIGN_KIND,
    CAMPAIGN_UPDATE_KIND,
    SOCIAL_SIGNAL_KINDS,
    ActionAttestationEvent,
    CampaignEvent,
    CampaignUpdateEvent,
    ParsedEvent,
    RawEvent,
    SocialSignalEvent,
    Tag,
    UnrecognizedEvent,
)

DEFAULT_MIN_NONCE_LENGTH: Final[int] = 32

# Tags that would identify where an actor lives or whom they contacted.
FORBIDDEN_ATTESTATION_TAGS: Final[frozenset[str]] = frozenset(
    {
        "address",
        "zip",
        "zipcode",
        "postal_code",
        "rep",
        "rep_id",
        "rep_name",
        "representative",
        "email",
        "phone",
    }
)

ZIP_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\b\d{5}(?:-\d{4})?\b")
_INTEGER_PATTERN: Final[re.Pattern[str]] = re.compile(r"^-?\d+$")

CAMPAIGN_TAGS: Final[frozenset[str]] = frozenset(
    {
        "d",
        "title",
        "category",
        "target_level",
        "alt",
        "created_at",
        "updated_at",
        "status",
        "image",
        "video",
        "link",
    }
)
CAMPAIGN_UPDATE_TAGS: Final[frozenset[str]] = frozenset(
    {"d", "alt", "status", "updated_at", "milestone"}
)
ATTESTATION_TAGS: Final[frozenset[str]] = frozenset(
    {"e", "d", "timestamp", "nonce", "alt", "rep_count"}
)
# Machine-generated attestation tags; every other tag value is free text.
_ATTESTATION_STRUCTURAL_TAGS: Final[frozenset[str]] = ATTESTATION_TAGS - {"alt"}

_CATEGORY_VALUES: Final[frozenset[str]] = frozenset(c.value for c in CampaignCategory)
_LEVEL_VALUES: Final[frozenset[str]] = frozenset(level.value for level in TargetLevel)
_STATUS_VALUES: Final[frozenset[str]] = frozenset(s.value for s in CampaignStatus)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_raw_event(raw: Mapping[str, Any]) -> RawEvent:
    """Check the envelope shape and normalize tags.

    Args:
        raw: Decoded relay event.

    Returns:
        RawEvent with tags coerced to tuples of str.

    Raises:
        MalformedEventError: If any envelope field is missing or mistyped.
    """
    if not isinstance(raw, Mapping):
        raise MalformedEventError("envelope_not_object")

    event_id = raw.get("id")
    kind = raw.get("kind")
    if not isinstance(event_id, str) or not event_id:
        raise MalformedEventError("missing_field:id", kind=kind if _is_int(kind) else None)
    if not _is_int(kind):
        raise MalformedEventError("invalid_field:kind", event_id=event_id)

    pubkey = raw.get("pubkey")
    if not isinstance(pubkey, str) or not pubkey:
        raise MalformedEventError("missing_field:pubkey", event_id, kind)

    created_at = raw.get("created_at")
    if not _is_int(created_at) or created_at < 0:
        raise MalformedEventError("invalid_field:created_at", event_id, kind)

    content = raw.get("content", "")
    if content is None:
        content = ""
    if not isinstance(content, str):
        raise MalformedEventError("invalid_field:content", event_id, kind)

    raw_tags = raw.get("tags")
    if not isinstance(raw_tags, list):
        raise MalformedEventError("invalid_field:tags", event_id, kind)

    tags: list[Tag] = []
    for raw_tag in raw_tags:
        if not isinstance(raw_tag, list) or not raw_tag:
            raise MalformedEventError("invalid_tag", event_id, kind)
        name = raw_tag[0]
        if not isinstance(name, str) or not name:
            raise MalformedEventError("invalid_tag_name", event_id, kind)
        values: list[str] = [name]
        for value in raw_tag[1:]:
            if isinstance(value, str):
                values.append(value)
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                values.append(str(value))
            else:
                raise MalformedEventError(f"invalid_tag_value:{name}", event_id, kind)
        tags.append(tuple(values))

    return RawEvent(
        id=event_id,
        pubkey=pubkey,
        created_at=created_at,
        kind=kind,
        tags=tuple(tags),
        content=content,
    )


class EventValidator:
    """Classifies raw relay events into typed variants.

    Example:
        >>> validator = EventValidator()
        >>> parsed = validator.classify(raw_event)
        >>> if isinstance(parsed, ActionAttestationEvent):
        ...     handle(parsed.attestation)
    """

    def __init__(self, min_nonce_length: int = DEFAULT_MIN_NONCE_LENGTH) -> None:
        """Initialize the validator.

        Args:
            min_nonce_length: Minimum attestation nonce length in characters.
        """
        if min_nonce_length < 1:
            raise ValueError("min_nonce_length must be at least 1")
        self._min_nonce_length = min_nonce_length

    @property
    def min_nonce_length(self) -> int:
        return self._min_nonce_length

    def classify(self, raw: Mapping[str, Any]) -> ParsedEvent:
        """Validate a raw event and return its typed variant.

        Args:
            raw: Decoded relay event.

        Returns:
            One of CampaignEvent, CampaignUpdateEvent, ActionAttestationEvent,
            SocialSignalEvent, or UnrecognizedEvent.

        Raises:
            MalformedEventError: If the event fails validation for its kind.
        """
        event = parse_raw_event(raw)

        if event.kind == CAMPAIGN_KIND:
            return self._parse_campaign(event)
        if event.kind == CAMPAIGN_UPDATE_KIND:
            return self._parse_update(event)
        if event.kind == ACTION_ATTESTATION_KIND:
            return self._parse_attestation(event)
        if event.kind in SOCIAL_SIGNAL_KINDS:
            return self._parse_social_signal(event)
        return UnrecognizedEvent(raw=event)

    def _parse_campaign(self, event: RawEvent) -> CampaignEvent:
        campaign_id = self._require(event, "d")
        title = self._require(event, "title")
        alt = self._require(event, "alt")

        categories = frozenset(
            CampaignCategory(value)
            for value in event.all_tags("category")
            if value in _CATEGORY_VALUES
        )
        if not categories:
            raise MalformedEventError("no_valid_category", event.id, event.kind)

        levels = frozenset(
            TargetLevel(value)
            for value in event.all_tags("target_level")
            if value in _LEVEL_VALUES
        )
        if not levels:
            raise MalformedEventError("no_valid_target_level", event.id, event.kind)

        # Declared status is checked but not applied; status comes from updates.
        self._optional_status(event)

        created_at = self._optional_int(event, "created_at")
        if created_at is None:
            created_at = event.created_at

        campaign = Campaign(
            id=campaign_id,
            creator_key=event.pubkey,
            title=title,
            categories=categories,
            target_levels=levels,
            created_at=created_at,
            updated_at=created_at,
            event_id=event.id,
            description=event.content,
            alt=alt,
            image=event.first_tag("image") or None,
            video=event.first_tag("video") or None,
            links=tuple(link for link in event.all_tags("link") if link),
        )
        return CampaignEvent(
            raw=event,
            campaign=campaign,
            extra_tags=event.tags_except(CAMPAIGN_TAGS),
        )

    def _parse_update(self, event: RawEvent) -> CampaignUpdateEvent:
        campaign_id = self._require(event, "d")
        self._require(event, "alt")

        updated_at = self._optional_int(event, "updated_at")
        if updated_at is None:
            updated_at = event.created_at

        update = CampaignUpdate(
            campaign_id=campaign_id,
            issuer_key=event.pubkey,
            updated_at=updated_at,
            event_id=event.id,
            message=event.content,
            status=self._optional_status(event),
            milestone=event.first_tag("milestone") or None,
        )
        return CampaignUpdateEvent(
            raw=event,
            update=update,
            extra_tags=event.tags_except(CAMPAIGN_UPDATE_TAGS),
        )

    def _parse_attestation(self, event: RawEvent) -> ActionAttestationEvent:
        for tag in event.tags:
            name = tag[0].lower()
            if name in FORBIDDEN_ATTESTATION_TAGS:
                raise MalformedEventError(
                    f"forbidden_tag:{tag[0]}", event.id, event.kind
                )
            if name in _ATTESTATION_STRUCTURAL_TAGS:
                continue
            if any(ZIP_CODE_PATTERN.search(value) for value in tag[1:]):
                raise MalformedEventError(
                    f"tag_contains_postal_code:{tag[0]}", event.id, event.kind
                )
        if ZIP_CODE_PATTERN.search(event.content):
            raise MalformedEventError("content_contains_postal_code", event.id, event.kind)

        campaign_event_id = self._require(event, "e")
        campaign_id = self._require(event, "d")
        self._require(event, "alt")

        timestamp = self._optional_int(event, "timestamp")
        if timestamp is None:
            raise MalformedEventError("missing_tag:timestamp", event.id, event.kind)
        if timestamp < 0:
            raise MalformedEventError("invalid_tag:timestamp", event.id, event.kind)

        nonce = self._require(event, "nonce")
        if len(nonce) < self._min_nonce_length:
            raise MalformedEventError("nonce_too_short", event.id, event.kind)

        rep_count = self._optional_int(event, "rep_count")
        if rep_count is not None and rep_count < 0:
            raise MalformedEventError("invalid_tag:rep_count", event.id, event.kind)

        attestation = ActionAttestation(
            campaign_id=campaign_id,
            campaign_event_id=campaign_event_id,
            actor_key=event.pubkey,
            timestamp=timestamp,
            nonce=nonce,
            event_id=event.id,
            rep_count=rep_count,
        )
        return ActionAttestationEvent(
            raw=event,
            attestation=attestation,
            extra_tags=event.tags_except(ATTESTATION_TAGS),
        )

    def _parse_social_signal(self, event: RawEvent) -> SocialSignalEvent:
        campaign_event_id = self._require(event, "e")
        return SocialSignalEvent(
            raw=event,
            signal_type=SOCIAL_SIGNAL_KINDS[event.kind],
            campaign_event_id=campaign_event_id,
        )

    @staticmethod
    def _require(event: RawEvent, name: str) -> str:
        value = event.first_tag(name)
        if value is None or not value.strip():
            raise MalformedEventError(f"missing_tag:{name}", event.id, event.kind)
        return value

    @staticmethod
    def _optional_int(event: RawEvent, name: str) -> int | None:
        value = event.first_tag(name)
        if value is None:
            return None
        value = value.strip()
        if not _INTEGER_PATTERN.match(value):
            raise MalformedEventError(f"invalid_tag:{name}", event.id, event.kind)
        return int(value)

    @staticmethod
    def _optional_status(event: RawEvent) -> CampaignStatus | None:
        value = event.first_tag("status")
        if value is None:
            return None
        if value not in _STATUS_VALUES:
            raise MalformedEventError("invalid_tag:status", event.id, event.kind)
        return CampaignStatus(value)
