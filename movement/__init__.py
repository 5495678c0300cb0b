"""
Movement Engine - Civic campaign event ingestion and read model.

Consumes signed campaign, update, attestation, and social events delivered
redundantly and out of order by untrusted relays, and maintains a
consistent derived read model: campaign records, ranked feeds, per-campaign
action metrics, and refundable anti-spam stake state.

Operating Principles:
- Relays are untrusted: duplicates and reordering are normal
- One identity, rate-limited: sybil resistance lives in the stake layer
- Nothing in the core is fatal: every event gets a typed outcome
- Replicas converge once they observe the same event set
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
