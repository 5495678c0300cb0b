"""
Application layer - Use cases and orchestration.

This layer contains:
- Ports (interfaces to infrastructure and collaborators)
- Services (ingestion pipeline, guards, aggregator, escrow, queries)

Depends on the domain layer only; infrastructure is reached through ports.
"""
