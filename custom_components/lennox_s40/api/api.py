"""Lennox S40 local API transport."""

import logging
import time
from collections.abc import Mapping
from typing import Any, Self

import aiohttp
from homeassistant.const import CONF_HOST
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.util.json import json_loads

from custom_components.lennox_s40.const import (
    CONF_CLIENT_ID,
    CONF_LOG_BODIES,
    CONF_LONG_POLL_SECONDS,
    CONF_VERIFY_TLS,
    DEFAULT_CLIENT_ID,
    DEFAULT_LOG_BODIES,
    DEFAULT_LONG_POLL_SECONDS,
    DEFAULT_VERIFY_TLS,
    LCC_TARGET_ID,
    LOG_BODY_MAX_LENGTH,
    LONG_POLL_TIMEOUT_MARGIN_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
    RETRIEVE_MESSAGE_COUNT,
    TOPIC_SCHEDULES,
    TOPIC_ZONES,
    SystemMode,
)
from custom_components.lennox_s40.errors import TransportError

from .zone import SetpointPair

_LOGGER = logging.getLogger(__name__)


class LccApi:
    """Talk to the Lennox Comfort Control (LCC) message bus of an S40 thermostat.

    The thermostat keeps two sessions per client: one on the message bus and one on the endpoint.
    Commands are published to the bus, and everything the thermostat has to say, including the
    result of a command, is delivered asynchronously through `async_retrieve`.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        client_id: str = DEFAULT_CLIENT_ID,
        long_poll_seconds: int = DEFAULT_LONG_POLL_SECONDS,
        log_bodies: bool = DEFAULT_LOG_BODIES,
    ):
        """Create a new API instance.

        Args:
            session (aiohttp.ClientSession): The HTTP session to use. TLS verification is a property of the session.
            host (str): The host name or IP address of the thermostat.
            client_id (str): The identifier this client registers itself with.
            long_poll_seconds (int): How long the thermostat may hold a retrieve request.
            log_bodies (bool): Whether to log request and response bodies.

        """
        self._session = session
        self._base_url = f"https://{host}"
        self._client_id = client_id
        self._long_poll_seconds = long_poll_seconds
        self._log_bodies = log_bodies
        self._last_message_id: int = 0

    @classmethod
    def create(cls, hass: HomeAssistant, config: Mapping[str, Any]) -> Self:
        """Create a new LccApi instance from the config entry data."""

        return cls(
            session=async_get_clientsession(
                hass, verify_ssl=config.get(CONF_VERIFY_TLS, DEFAULT_VERIFY_TLS)
            ),
            host=config[CONF_HOST],
            client_id=config.get(CONF_CLIENT_ID, DEFAULT_CLIENT_ID),
            long_poll_seconds=config.get(CONF_LONG_POLL_SECONDS, DEFAULT_LONG_POLL_SECONDS),
            log_bodies=config.get(CONF_LOG_BODIES, DEFAULT_LOG_BODIES),
        )

    def _next_message_id(self) -> int:
        """Return a message id that is higher than every id returned before."""

        self._last_message_id = max(int(time.time() * 1000), self._last_message_id + 1)
        return self._last_message_id

    def _preview(self, body: Any) -> str:
        return str(body)[:LOG_BODY_MAX_LENGTH]

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, str] | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> tuple[int, Any]:
        """Perform an HTTP request against the thermostat.

        Returns:
            tuple[int, Any]: The HTTP status and the decoded JSON body, or `None` if the body is empty.

        Raises:
            TransportError: If the request fails or the status is outside 2xx.

        """

        url = f"{self._base_url}{path}"
        _LOGGER.debug("HTTP %s %s", method, path)
        if self._log_bodies and json is not None:
            _LOGGER.debug("HTTP %s %s body=%s", method, path, self._preview(json))

        try:
            async with self._session.request(
                method,
                url,
                json=json,
                params=params,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                raw = await resp.read()
                try:
                    body = raw.decode()
                except UnicodeDecodeError as e:
                    raise TransportError(
                        f"{method} {path} returned a body that is not valid UTF-8", status=resp.status
                    ) from e

                if self._log_bodies:
                    _LOGGER.debug(
                        "HTTP %s %s -> %s, body=%s", method, path, resp.status, self._preview(body)
                    )

                if not 200 <= resp.status < 300:
                    raise TransportError(
                        f"{method} {path} failed with HTTP status {resp.status}", status=resp.status
                    )

                if resp.status == 204 or not body.strip():
                    return resp.status, None

                try:
                    return resp.status, json_loads(body)
                except ValueError:
                    _LOGGER.debug("HTTP %s %s returned a non-JSON body", method, path)
                    return resp.status, body
        except (aiohttp.ClientError, TimeoutError) as e:
            raise TransportError(f"{method} {path} failed: {e!r}") from e

    async def _async_open(self, path: str) -> bool:
        try:
            await self._request("POST", path)
        except TransportError as e:
            # Some firmware versions accept commands without an open session.
            _LOGGER.warning("Could not open session %s: %s", path, e)
            return False

        _LOGGER.info("Opened session %s", path)
        return True

    async def async_connect(self) -> bool:
        """Open or refresh the message bus session.

        Returns:
            bool: `True` if the session was opened, `False` if that failed. Failure is not fatal.

        """
        return await self._async_open(f"/Messages/{self._client_id}/Connect")

    async def async_connect_endpoint(self) -> bool:
        """Open or refresh the endpoint session.

        Returns:
            bool: `True` if the session was opened, `False` if that failed. Failure is not fatal.

        """
        return await self._async_open(f"/Endpoints/{self._client_id}/Connect")

    async def async_close(self) -> None:
        """Disconnect the endpoint session. Failures are logged and ignored."""

        try:
            await self._request("POST", f"/Endpoints/{self._client_id}/Disconnect")
        except TransportError as e:
            _LOGGER.warning("Could not disconnect from %s: %s", self._base_url, e)

    def _envelope(self, message_type: str, json_path: str, data: dict[str, Any] | None = None):
        envelope: dict[str, Any] = {
            "MessageId": self._next_message_id(),
            "MessageType": message_type,
            "SenderId": self._client_id,
            "TargetId": LCC_TARGET_ID,
            "AdditionalParameters": {"JSONPath": json_path},
        }
        if data is not None:
            envelope["data"] = data

        return envelope

    async def async_publish(self, topic: str, payload: Any) -> Any:
        """Publish a command to the message bus.

        Args:
            topic (str): The top level resource the command is about, `zones` or `schedules`.
            payload (Any): The value of the resource, usually a list of partial objects with an `id`.

        Returns:
            Any: The decoded response body, if any.

        Raises:
            TransportError: If the command was not accepted.

        """

        _, body = await self._request(
            "POST", "/Messages/Publish", json=self._envelope("Command", topic, {topic: payload})
        )
        return body

    async def async_request_data(self, paths: list[str]) -> None:
        """Ask the thermostat to send the current state of the resources in `paths`.

        The state is not part of the response: it arrives later through `async_retrieve`.

        Raises:
            TransportError: If the request was not accepted.

        """

        await self._request(
            "POST",
            "/Messages/RequestData",
            json=self._envelope("RequestData", "1;" + ";".join(paths)),
        )

    async def async_retrieve(
        self, max_count: int = RETRIEVE_MESSAGE_COUNT, timeout_seconds: int | None = None
    ) -> list[dict[str, Any]]:
        """Wait for messages from the thermostat.

        The thermostat holds the request for up to `timeout_seconds`, unless messages are queued already.

        Args:
            max_count (int): The maximum number of messages to return.
            timeout_seconds (int | None): The long poll duration, defaults to the configured duration.

        Returns:
            list[dict[str, Any]]: The messages, oldest first. Empty if the thermostat had nothing to say.

        Raises:
            TransportError: If the request failed.

        """

        poll_seconds = self._long_poll_seconds if timeout_seconds is None else timeout_seconds
        _, body = await self._request(
            "GET",
            f"/Messages/{self._client_id}/Retrieve",
            params={
                "Direction": "Oldest-to-Newest",
                "MessageCount": str(max_count),
                "StartTime": "1",
                "LongPollingTimeout": str(poll_seconds),
            },
            timeout=poll_seconds + LONG_POLL_TIMEOUT_MARGIN_SECONDS,
        )

        if not isinstance(body, dict):
            return []

        messages = body.get("messages")
        if not isinstance(messages, list):
            return []

        return [message for message in messages if isinstance(message, dict)]

    async def async_write_schedule_period(
        self, schedule_id: int, period_id: int, period: SetpointPair
    ) -> None:
        """Replace the setpoints of one period of a schedule.

        Raises:
            TransportError: If the command was not accepted.

        """

        await self.async_publish(
            TOPIC_SCHEDULES,
            [
                {
                    "id": schedule_id,
                    "schedule": {
                        "periods": [
                            {"id": period_id, "period": {"hsp": period.heat, "csp": period.cool}}
                        ]
                    },
                }
            ],
        )

    @staticmethod
    def _hold(schedule_id: int) -> dict[str, Any]:
        return {
            "scheduleId": schedule_id,
            "exceptionType": "hold",
            "enabled": True,
            "expirationMode": "nextPeriod",
            "expiresOn": "0",
        }

    async def async_arm_hold_config(self, zone_id: int, schedule_id: int, pair: SetpointPair) -> None:
        """Arm a hold on `schedule_id` by toggling the schedule hold in the zone configuration."""

        await self.async_publish(
            TOPIC_ZONES, [{"id": zone_id, "config": {"scheduleHold": self._hold(schedule_id)}}]
        )

    async def async_arm_hold_command(
        self, zone_id: int, schedule_id: int, pair: SetpointPair
    ) -> None:
        """Arm a hold on `schedule_id` with a zone command that carries the setpoints."""

        await self.async_publish(
            TOPIC_ZONES,
            [
                {
                    "id": zone_id,
                    "command": {
                        "scheduleHold": self._hold(schedule_id),
                        "hsp": pair.heat,
                        "csp": pair.cool,
                    },
                }
            ],
        )

    async def async_arm_hold_status(self, zone_id: int, schedule_id: int, pair: SetpointPair) -> None:
        """Arm a hold on `schedule_id` by setting the schedule hold in the zone status."""

        await self.async_publish(
            TOPIC_ZONES, [{"id": zone_id, "status": {"scheduleHold": self._hold(schedule_id)}}]
        )

    async def async_set_zone_mode(self, zone_id: int, mode: SystemMode) -> None:
        """Set the system mode of a zone.

        Raises:
            TransportError: If the command was not accepted.

        """

        await self.async_publish(
            TOPIC_ZONES, [{"id": zone_id, "status": {"period": {"systemMode": str(mode)}}}]
        )

