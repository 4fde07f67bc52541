"""Per zone state shared by the retrieval pump and the entities of a zone."""

import logging
from collections.abc import Callable
from typing import Protocol

from .write_buffer import CoalescingWriteBuffer
from .zone import ZoneStatus

_LOGGER = logging.getLogger(__name__)


class ZoneObserver(Protocol):
    """Receives the status of a zone whenever the thermostat reports it."""

    def apply_zone_status(self, status: ZoneStatus) -> None:
        """Apply the merged status of the zone."""


class ZoneState:
    """The write buffer, the last reported status and the observers of one zone."""

    def __init__(self, zone_id: int, buffer: CoalescingWriteBuffer):
        """Create a new zone state."""
        self.zone_id: int = zone_id
        self.buffer: CoalescingWriteBuffer = buffer
        self.status: ZoneStatus = ZoneStatus()
        self._observers: list[ZoneObserver] = []

    def add_observer(self, observer: ZoneObserver) -> Callable[[], None]:
        """Add an observer of this zone.

        Returns:
            Callable[[], None]: Removes the observer again.

        """

        self._observers.append(observer)

        def remove() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return remove

    def apply_status(self, update: ZoneStatus) -> ZoneStatus:
        """Merge `update` into the known status and forward the result to all observers."""

        self.status = self.status.merged_with(update)
        for observer in list(self._observers):
            observer.apply_zone_status(self.status)

        return self.status


class ZoneRegistry:
    """All zones managed by one integration instance, keyed by zone id."""

    def __init__(self, zones: list[ZoneState]):
        """Create a new zone registry."""
        self._zones: dict[int, ZoneState] = {zone.zone_id: zone for zone in zones}

    def get(self, zone_id: int) -> ZoneState | None:
        """Return the state of `zone_id`, or `None` if that zone is not managed."""
        return self._zones.get(zone_id)

    def __getitem__(self, zone_id: int) -> ZoneState:
        return self._zones[zone_id]

    def __iter__(self):
        return iter(self._zones.values())

    @property
    def zone_ids(self) -> list[int]:
        """Return the ids of all managed zones."""
        return list(self._zones)

    def statuses(self) -> dict[int, ZoneStatus]:
        """Return the known status of every zone."""
        return {zone_id: zone.status for zone_id, zone in self._zones.items()}
