"""Canonical selection of counted action attestations.

For one (actor, campaign) pair, the counted attestations come from a
greedy sweep in (timestamp, nonce) order: a candidate is counted when
fewer than ``limit`` counted candidates lie strictly within
``window_seconds`` before it. The result depends only on the candidate
set, so replicas that receive the same attestations in any order count
the same ones.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass

# (timestamp, nonce); unique per (actor, campaign) once admitted.
ActionCandidate = tuple[int, str]


@dataclass(frozen=True)
class ActionCountingRule:
    """Spacing rule for counted actions.

    Attributes:
        window_seconds: Minimum spacing a counted action imposes.
        limit: Counted actions allowed inside one window.
    """

    window_seconds: int
    limit: int

    def __post_init__(self) -> None:
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if self.limit < 1:
            raise ValueError("limit must be at least 1")

    def extend(
        self,
        counted: list[ActionCandidate],
        candidates: Iterable[ActionCandidate],
    ) -> list[ActionCandidate]:
        """Continue the sweep after an already settled prefix.

        Args:
            counted: Counted candidates, sorted, all preceding ``candidates``.
            candidates: Remaining candidates in ascending order.

        Returns:
            ``counted`` followed by the candidates this sweep counts.
        """
        result = list(counted)
        timestamps = [timestamp for timestamp, _ in result]
        for candidate in candidates:
            timestamp = candidate[0]
            recent = len(timestamps) - bisect_right(
                timestamps, timestamp - self.window_seconds
            )
            if recent < self.limit:
                result.append(candidate)
                timestamps.append(timestamp)
        return result

    def select(self, candidates: Iterable[ActionCandidate]) -> list[ActionCandidate]:
        """Counted subset of a full candidate set."""
        return self.extend([], sorted(candidates))
