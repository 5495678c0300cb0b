"""Builders for raw relay events.

Each builder returns the dict a relay would deliver, with deterministic
ids derived from the arguments so that building the same event twice
yields an identical redelivery.
"""

from __future__ import annotations

from typing import Any

from movement.domain.models.events import (
    ACTION_ATTESTATION_KIND,
    CAMPAIGN_KIND,
    CAMPAIGN_UPDATE_KIND,
)

K1 = "npub-k1"
K2 = "npub-k2"
K3 = "npub-k3"

SLUG = "save-park"


def campaign_event_id(slug: str = SLUG, pubkey: str = K1, created_at: int = 1000) -> str:
    return f"campaign:{slug}:{pubkey}:{created_at}"


def campaign_event(
    slug: str = SLUG,
    pubkey: str = K1,
    created_at: int = 1000,
    *,
    event_id: str | None = None,
    title: str = "Save the park",
    categories: tuple[str, ...] = ("environment",),
    target_levels: tuple[str, ...] = ("local",),
    content: str = "Keep the riverside park green.",
    extra_tags: tuple[list[Any], ...] = (),
) -> dict[str, Any]:
    tags: list[list[Any]] = [
        ["d", slug],
        ["title", title],
        ["alt", f"Campaign: {title}"],
    ]
    tags += [["category", c] for c in categories]
    tags += [["target_level", t] for t in target_levels]
    tags += list(extra_tags)
    return {
        "id": event_id or campaign_event_id(slug, pubkey, created_at),
        "pubkey": pubkey,
        "created_at": created_at,
        "kind": CAMPAIGN_KIND,
        "tags": tags,
        "content": content,
    }


def update_event(
    slug: str = SLUG,
    pubkey: str = K1,
    updated_at: int = 2000,
    *,
    status: str | None = None,
    event_id: str | None = None,
    milestone: str | None = None,
) -> dict[str, Any]:
    tags: list[list[Any]] = [
        ["d", slug],
        ["alt", "Campaign update"],
        ["updated_at", str(updated_at)],
    ]
    if status is not None:
        tags.append(["status", status])
    if milestone is not None:
        tags.append(["milestone", milestone])
    return {
        "id": event_id or f"update:{slug}:{pubkey}:{updated_at}:{status}",
        "pubkey": pubkey,
        "created_at": updated_at,
        "kind": CAMPAIGN_UPDATE_KIND,
        "tags": tags,
        "content": "Progress report",
    }


def attestation_event(
    slug: str = SLUG,
    actor: str = K2,
    timestamp: int = 1050,
    nonce: str = "n1",
    *,
    event_id: str | None = None,
    parent_event_id: str | None = None,
    content: str = "",
    extra_tags: tuple[list[Any], ...] = (),
) -> dict[str, Any]:
    tags: list[list[Any]] = [
        ["e", parent_event_id or campaign_event_id(slug)],
        ["d", slug],
        ["alt", "Action taken on campaign"],
        ["timestamp", str(timestamp)],
        ["nonce", nonce],
    ]
    tags += list(extra_tags)
    return {
        "id": event_id or f"attestation:{slug}:{actor}:{nonce}",
        "pubkey": actor,
        "created_at": timestamp,
        "kind": ACTION_ATTESTATION_KIND,
        "tags": tags,
        "content": content,
    }


def social_event(
    kind: int,
    parent_event_id: str,
    event_id: str,
    pubkey: str = K3,
    created_at: int = 1100,
) -> dict[str, Any]:
    return {
        "id": event_id,
        "pubkey": pubkey,
        "created_at": created_at,
        "kind": kind,
        "tags": [["e", parent_event_id]],
        "content": "",
    }
