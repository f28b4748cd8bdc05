import logging
from typing import Mapping

from nethermind.calllink.exceptions import EncodeError
from nethermind.calllink.types.transaction import TransportParams
from nethermind.calllink.utils import parse_int_text

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("encoding")

# Transport field -> accepted input keys.  The short keys are the ones written by the authoring form
TRANSPORT_FIELDS: dict[str, tuple[str, ...]] = {
    "gas": ("gas",),
    "max_fee_per_gas": ("maxFeePerGas", "maxgas"),
    "max_priority_fee_per_gas": ("maxPriorityFeePerGas", "maxpriogas"),
    "value": ("value",),
}

TRANSPORT_KEYS = frozenset(key for keys in TRANSPORT_FIELDS.values() for key in keys)


def transport_params(inputs: Mapping[str, str]) -> TransportParams:
    """
    Extracts transaction submission parameters from descriptor inputs.  These values configure the transaction
    and are never passed to the ABI encoder.  Missing or empty values are returned as None, and are left for the
    wallet to estimate.

    :raises EncodeError: keyed by the transport field if a value is not a non-negative integer
    """
    parsed: dict[str, int | None] = {}
    for field_name, keys in TRANSPORT_FIELDS.items():
        parsed[field_name] = None
        for key in keys:
            raw = inputs.get(key)
            if raw is None or raw.strip() == "":
                continue

            try:
                value = parse_int_text(raw)
            except ValueError as e:
                raise EncodeError(key, f"'{raw}' is not a base-10 or 0x prefixed hex integer") from e
            if value < 0:
                raise EncodeError(key, f"{value} cannot be negative")

            parsed[field_name] = value
            break

    logger.debug(f"Parsed transport parameters: {parsed}")
    return TransportParams(**parsed)
