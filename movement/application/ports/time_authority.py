"""Time Authority Protocol - interface for timestamp provisioning.

Services that need the current time inject a TimeAuthorityProtocol instead
of calling time.time() directly. Event timestamps are unix seconds, so the
authority speaks unix seconds too.

For production:
    Use SystemTimeAuthority from movement.infrastructure.adapters.time

For testing:
    Use FakeTimeAuthority from tests/helpers/fake_time_authority.py
"""

from abc import ABC, abstractmethod


class TimeAuthorityProtocol(ABC):
    """Abstract interface for time authority.

    Example usage:
        class MyService:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            def process(self) -> None:
                now = self._time.now()  # NOT time.time()
    """

    @abstractmethod
    def now(self) -> int:
        """Return the current time as whole unix seconds."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return monotonic clock value for measuring elapsed time.

        Returns:
            Monotonically increasing float value (in seconds).

        Note:
            Use this for durations and timeouts, not for timestamps.
        """
        ...
