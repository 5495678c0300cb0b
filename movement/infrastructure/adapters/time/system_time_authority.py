"""System clock implementation of TimeAuthorityProtocol."""

import time

from movement.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Wall clock in whole unix seconds, plus the process monotonic clock."""

    def now(self) -> int:
        return int(time.time())

    def monotonic(self) -> float:
        return time.monotonic()
