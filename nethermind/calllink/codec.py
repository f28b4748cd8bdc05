import base64
import json
import logging
from dataclasses import asdict
from typing import Any
from urllib.parse import quote, unquote, urlsplit

from nethermind.calllink.config import CallLinkConfig
from nethermind.calllink.exceptions import DecodeError, DecodeErrorKind
from nethermind.calllink.types.descriptor import CallDescriptor
from nethermind.calllink.utils import snake_to_camel

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("codec")

TOKEN_PLACEHOLDER = ":txData"

REQUIRED_FIELDS = ("contractAddress", "chainId", "functionName")

# Descriptor field -> accepted JSON types.  Optional fields also accept null, and fall back to their defaults
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "contract_address": (str,),
    "chain_id": (int,),
    "rpc_url": (str,),
    "function_name": (str,),
    "function_inputs": (dict,),
    "output_type": (list,),
    "is_read_only": (bool,),
    "abi": (str,),
    "data": (str,),
}

# camelCase wire key -> descriptor field.  Any other spelling of a field name is an unknown key
_WIRE_FIELDS: dict[str, str] = {snake_to_camel(name): name for name in _FIELD_TYPES}


def encode_token(descriptor: CallDescriptor) -> str:
    """
    Encodes a CallDescriptor into a URL path segment.  The descriptor is serialized to canonical JSON with sorted
    camelCase keys and non-ASCII text escaped, base64 encoded, and percent escaped.  Equal descriptors always
    produce equal tokens, and any python string, including lone surrogates, survives the round trip.

    :param descriptor: Descriptor to encode
    :return: URL safe token
    """
    wire = {snake_to_camel(name): value for name, value in asdict(descriptor).items()}
    canonical = json.dumps(wire, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    token = quote(base64.b64encode(canonical.encode("ascii")).decode("ascii"), safe="")

    logger.debug(f"Encoded {descriptor.function_name} descriptor into {len(token)} character token")
    return token


def decode_token(token: str, placeholder: str = TOKEN_PLACEHOLDER) -> CallDescriptor:
    """
    Decodes a token produced by :func:`encode_token`.  Tokens are untrusted input, so required fields and field
    types are validated after decoding.

    :param token: Token from the route parameter.  May already be unescaped by the router
    :param placeholder: Unsubstituted route parameter literal
    :return: CallDescriptor that shares no state with any other holder
    :raises DecodeError: with kind placeholder, malformed, or missing_fields
    """
    if token == placeholder:
        logger.warning(f"Invalid URL parameter: {placeholder}")
        raise DecodeError(DecodeErrorKind.placeholder, "Invalid transaction URL.  Please check your link.")

    try:
        unescaped = unquote(token, errors="strict")
        wire = json.loads(base64.b64decode(unescaped, validate=True).decode("utf-8"))
    except ValueError as e:
        logger.warning(f"Failed to decode transaction token: {e}")
        raise DecodeError(
            DecodeErrorKind.malformed, "Invalid transaction data.  This link appears to be corrupted or malformed."
        ) from e

    if not isinstance(wire, dict):
        logger.warning(f"Transaction token decoded to {type(wire).__name__} instead of an object")
        raise DecodeError(DecodeErrorKind.malformed, "Transaction data must be a JSON object")

    missing = [key for key in REQUIRED_FIELDS if not wire.get(key)]
    if missing:
        logger.warning(f"Decoded transaction missing required fields: {missing}")
        raise DecodeError(
            DecodeErrorKind.missing_fields, f"Transaction data is missing required fields: {', '.join(missing)}"
        )

    return CallDescriptor(**_wire_to_fields(wire))


def create_shareable_link(descriptor: CallDescriptor, config: CallLinkConfig | None = None) -> str:
    """
    Creates a link to the transaction page for a descriptor

    >>> create_shareable_link(descriptor, CallLinkConfig(base_url="https://app.example"))
    'https://app.example/transaction/eyJhYmkiOm51bGws...'
    """
    config = config or CallLinkConfig()
    link = f"{config.base_url.rstrip('/')}{config.route_prefix}{encode_token(descriptor)}"

    logger.info(
        f"Created transaction link for {descriptor.function_name} on {descriptor.contract_address} "
        f"(chain {descriptor.chain_id})"
    )
    return link


def token_from_link(link: str) -> str:
    """
    Returns the token from a transaction link.  Bare tokens are returned unchanged

    :raises DecodeError: if the link has no final path segment
    """
    token = urlsplit(link.strip()).path.rstrip("/").rsplit("/", 1)[-1]
    if not token:
        raise DecodeError(DecodeErrorKind.malformed, "Transaction data not found in URL")
    return token


def decode_link(link: str, config: CallLinkConfig | None = None) -> CallDescriptor:
    """Decodes the descriptor from a transaction link or bare token"""
    config = config or CallLinkConfig()
    return decode_token(token_from_link(link), placeholder=config.placeholder)


def _wire_to_fields(wire: dict[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key, value in wire.items():
        name = _WIRE_FIELDS.get(key)
        if name is None:
            logger.debug(f"Ignoring unknown transaction field {key}")
            continue
        if value is None and name in ("rpc_url", "function_inputs", "output_type", "is_read_only", "abi", "data"):
            continue

        expected = _FIELD_TYPES[name]
        if not isinstance(value, expected) or (expected == (int,) and isinstance(value, bool)):
            raise DecodeError(DecodeErrorKind.malformed, f"Transaction field {key} has invalid type")
        fields[name] = value

    function_inputs = fields.get("function_inputs", {})
    if not all(isinstance(v, str) for v in function_inputs.values()):
        raise DecodeError(DecodeErrorKind.malformed, "Transaction function inputs must be strings")
    if not all(isinstance(t, str) for t in fields.get("output_type", [])):
        raise DecodeError(DecodeErrorKind.malformed, "Transaction output types must be strings")

    return fields
