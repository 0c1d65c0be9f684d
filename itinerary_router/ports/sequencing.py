"""Sequencing port - Visiting order of a set of stops."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol, Sequence, TypeVar

if TYPE_CHECKING:
    from ..domain.models import GeoPoint

P = TypeVar("P", bound="GeoPoint")


class RouteSequencerPort(Protocol):
    """Port for stop ordering.

    Implementation: routing/sequencer.py (ClusteredRouteSequencer)
    """

    def sequence(self, origin: GeoPoint, points: Sequence[P]) -> List[P]:
        """Return a permutation of ``points`` forming a short tour from ``origin``.

        Never fails; empty input yields an empty list.
        """
        ...
