"""Errors for the lennox_s40 integration."""

from homeassistant.exceptions import HomeAssistantError

from custom_components.lennox_s40.const import HoldArmMethod


class LennoxS40Error(HomeAssistantError):
    """Base error for lennox_s40 integration."""


class TransportError(LennoxS40Error):
    """Exception to indicate a call to the thermostat failed, either on the network or with a non-2xx status."""

    def __init__(self, message: str, status: int | None = None):
        """Create a new TransportError.

        Args:
            message (str): The error message.
            status (int | None): The HTTP status, or `None` if no response was received.

        """
        super().__init__(message)
        self.status: int | None = status


class ProtocolPartialFailure(LennoxS40Error):
    """Exception to indicate a schedule period was written, but none of the hold arm methods succeeded.

    This error is never raised by the write protocol, it is logged and reported as a diagnostic.
    """

    def __init__(self, zone_id: int, schedule_id: int, errors: dict[HoldArmMethod, Exception]):
        """Create a new ProtocolPartialFailure.

        Args:
            zone_id (int): The zone that was written.
            schedule_id (int): The hold schedule the period was written to.
            errors (dict[HoldArmMethod, Exception]): The error of each attempted hold arm method.

        """
        super().__init__(
            f"Wrote hold schedule {schedule_id} for zone {zone_id}, but could not arm the hold: "
            + ", ".join(f"{method}: {err}" for method, err in errors.items())
        )
        self.zone_id: int = zone_id
        self.schedule_id: int = schedule_id
        self.errors: dict[HoldArmMethod, Exception] = errors


class ConfigurationError(LennoxS40Error):
    """Exception to indicate a required configuration parameter is missing or invalid."""


class LennoxServiceException(LennoxS40Error):
    """Exception to indicate that a service call failed, although it was used correctly."""
