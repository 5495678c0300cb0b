"""Stub implementations of collaborator ports."""

from movement.infrastructure.stubs.token_custody_stub import TokenCustodyStub

__all__ = ["TokenCustodyStub"]
