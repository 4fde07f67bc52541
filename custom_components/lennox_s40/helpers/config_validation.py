"""Helpers for config validation that are not in the HA helpers."""

import voluptuous as vol


def zone_ids(value: str | int | list) -> list[int]:
    """Validate a list of zone ids.

    Accepts a list of integers, a single integer or a comma separated string like `"0, 1, 2"`.

    Returns:
        list[int]: The distinct zone ids, sorted.

    Raises:
        vol.Invalid: If a zone id is not a non-negative integer, or if no zone ids are given.

    """

    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, list):
        parts = value
    else:
        parts = [value]

    ids: set[int] = set()
    for part in parts:
        if isinstance(part, bool) or (isinstance(part, float) and not part.is_integer()):
            raise vol.Invalid(f"Invalid zone id {part}")

        try:
            zone_id = int(part)
        except (TypeError, ValueError) as e:
            raise vol.Invalid(f"Invalid zone id {part}") from e

        if zone_id < 0:
            raise vol.Invalid(f"Zone id must not be negative, got {zone_id}")
        ids.add(zone_id)

    if not ids:
        raise vol.Invalid("At least one zone id is required")

    return sorted(ids)


def zone_ids_to_str(ids: list[int]) -> str:
    """Format zone ids the way they are entered in the config flow."""

    return ", ".join(str(zone_id) for zone_id in ids)
