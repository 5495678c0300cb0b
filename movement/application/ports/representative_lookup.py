"""Representative Lookup Port - resolve elected officials for a location.

The lookup is an opaque remote service. Postal codes passed here never
leave the caller's side of the boundary in any broadcast event.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from movement.domain.models.representative import Representative


@runtime_checkable
class RepresentativeLookupPort(Protocol):
    """Protocol for representative lookup by postal code."""

    async def lookup(self, postal_code: str) -> list[Representative]:
        """Find representatives for a postal code.

        Args:
            postal_code: 5-digit US ZIP code.

        Returns:
            Representatives at every level the provider knows about.

        Raises:
            InvalidPostalCodeError: If the postal code is not 5 digits.
            RepresentativeLookupError: If the provider cannot be reached
                or returns an unusable response.
        """
        ...
