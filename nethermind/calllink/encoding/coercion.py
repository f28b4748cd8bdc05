import json
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

from eth_abi.grammar import normalize
from eth_utils import to_checksum_address

from nethermind.calllink.exceptions import EncodeError
from nethermind.calllink.types.abi import AbiParameter
from nethermind.calllink.utils import is_address_shaped, parse_int_text

ARRAY_PATTERN = re.compile(r"^(.+)\[(\d*)\]$")
INT_PATTERN = re.compile(r"^(u?)int(\d*)$")
FIXED_PATTERN = re.compile(r"^(u?)fixed(?:(\d+)x(\d+))?$")
FIXED_BYTES_PATTERN = re.compile(r"^bytes(\d+)$")


def coerce_value(abi_type: str, value: Any, param: str, components: Sequence[AbiParameter] = ()) -> Any:
    """
    Coerces a string input into the python value eth_abi expects for abi_type.  Arrays & tuples are passed as
    JSON text, and their elements are coerced recursively.  Elements of arrays & tuples can be JSON strings,
    numbers, booleans, arrays, or objects.

    :param abi_type: Type string from the ABI, ie ``uint256``, ``address[]``, ``tuple[2]``
    :param value: String input, or an element decoded from a JSON array/object
    :param param: Parameter path used in error messages
    :param components: Tuple components of the parameter
    :raises EncodeError: if the value cannot be coerced.  No default is ever substituted
    """
    abi_type = normalize(abi_type)

    if array_match := ARRAY_PATTERN.match(abi_type):
        return _coerce_array(array_match.group(1), array_match.group(2), value, param, components)

    if abi_type == "tuple":
        return _coerce_tuple(value, param, components)

    if abi_type == "bool":
        return _coerce_bool(value, param)

    if abi_type == "address":
        if not is_address_shaped(value):
            raise EncodeError(param, f"'{value}' is not a 20 byte hex address")
        return to_checksum_address(value)

    if abi_type == "string":
        if not isinstance(value, str):
            raise EncodeError(param, f"expected string, got {type(value).__name__}")
        return value

    if abi_type == "bytes":
        return _coerce_bytes(value, param)

    if bytes_match := FIXED_BYTES_PATTERN.match(abi_type):
        size = int(bytes_match.group(1))
        data = _coerce_bytes(value, param)
        if len(data) > size:
            raise EncodeError(param, f"{len(data)} bytes exceeds the size of {abi_type}")
        return data

    if int_match := INT_PATTERN.match(abi_type):
        bits = int(int_match.group(2) or 256)
        if bits % 8 or not 8 <= bits <= 256:
            raise EncodeError(param, f"unsupported ABI type {abi_type}")
        return _coerce_int(value, param, signed=int_match.group(1) == "", bits=bits)

    if fixed_match := FIXED_PATTERN.match(abi_type):
        return _coerce_fixed(value, param, signed=fixed_match.group(1) == "")

    raise EncodeError(param, f"unsupported ABI type {abi_type}")


def _coerce_int(value: Any, param: str, signed: bool, bits: int) -> int:
    if isinstance(value, bool):
        raise EncodeError(param, "expected integer, got boolean")

    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = parse_int_text(value)
        except ValueError as e:
            raise EncodeError(param, f"'{value}' is not a base-10 or 0x prefixed hex integer") from e
    else:
        raise EncodeError(param, f"expected integer, got {type(value).__name__}")

    lower, upper = (-(2 ** (bits - 1)), 2 ** (bits - 1) - 1) if signed else (0, 2**bits - 1)
    if not lower <= parsed <= upper:
        raise EncodeError(param, f"{parsed} is out of range for {'int' if signed else 'uint'}{bits}")
    return parsed


def _coerce_bool(value: Any, param: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        match value.strip().lower():
            case "true":
                return True
            case "false":
                return False
    raise EncodeError(param, f"'{value}' is not true or false")


def _coerce_bytes(value: Any, param: str) -> bytes:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise EncodeError(param, f"'{value}' is not 0x prefixed hex")
    try:
        return bytes.fromhex(value[2:])
    except ValueError as e:
        raise EncodeError(param, f"'{value}' is not valid hex") from e


def _coerce_fixed(value: Any, param: str, signed: bool) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise EncodeError(param, f"expected decimal, got {type(value).__name__}")
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise EncodeError(param, f"'{value}' is not a decimal number") from e

    if not parsed.is_finite():
        raise EncodeError(param, f"'{value}' is not a finite decimal")
    if not signed and parsed < 0:
        raise EncodeError(param, f"{value} is negative for an unsigned fixed type")
    return parsed


def _load_json_container(value: Any, param: str) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise EncodeError(param, f"expected JSON array or object, got '{value}'") from e


def _coerce_array(
    element_type: str, size: str, value: Any, param: str, components: Sequence[AbiParameter]
) -> list[Any]:
    items = _load_json_container(value, param)
    if not isinstance(items, list):
        raise EncodeError(param, f"expected JSON array for {element_type}[{size}]")
    if size and len(items) != int(size):
        raise EncodeError(param, f"expected {size} elements, got {len(items)}")

    return [coerce_value(element_type, item, f"{param}[{idx}]", components) for idx, item in enumerate(items)]


def _coerce_tuple(value: Any, param: str, components: Sequence[AbiParameter]) -> tuple[Any, ...]:
    items = _load_json_container(value, param)

    if isinstance(items, dict):
        missing = [c.name for c in components if c.name not in items]
        if missing:
            raise EncodeError(f"{param}.{missing[0]}", "missing value")
        ordered = [items[c.name] for c in components]
    elif isinstance(items, list):
        if len(items) != len(components):
            raise EncodeError(param, f"expected {len(components)} tuple components, got {len(items)}")
        ordered = items
    else:
        raise EncodeError(param, "expected JSON array or object for tuple")

    return tuple(
        coerce_value(comp.type, item, f"{param}.{comp.name or idx}", comp.components)
        for idx, (comp, item) in enumerate(zip(components, ordered, strict=True))
    )
