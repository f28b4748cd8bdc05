import re
from typing import Any, Mapping, Sequence

from eth_abi.grammar import normalize

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address_shaped(value: Any) -> bool:
    """
    Checks that value is a 0x prefixed, 20 byte hex string.  Checksums are not validated

    >>> is_address_shaped("0xa9D1e08C7793af67e9d92fe308d5697FB81d3E43")
    True
    >>> is_address_shaped("0xabc")
    False
    """
    return isinstance(value, str) and ADDRESS_PATTERN.match(value) is not None


def collapse_if_tuple(abi_params: Mapping[str, Any]) -> str:
    """
    Converts a tuple from a dict to a parenthesized list of its types.

    >>> collapse_if_tuple(
    ...     {
    ...         'components': [
    ...             {'name': 'anAddress', 'type': 'address'},
    ...             {'name': 'anInt', 'type': 'uint256'},
    ...             {'name': 'someBytes', 'type': 'bytes'},
    ...         ],
    ...         'type': 'tuple',
    ...     }
    ... )
    '(address,uint256,bytes)'
    """

    typ = abi_params["type"]
    if not isinstance(typ, str):
        raise TypeError(f"The 'type' must be a string, but got {typ} of type {type(typ)}")

    if not typ.startswith("tuple"):
        return typ

    delimited = ",".join(collapse_if_tuple(c) for c in abi_params.get("components", []))
    # Whatever comes after "tuple" is the array dims, one of "", "[]", or "[k]"
    array_dim = typ[5:]
    return f"({delimited}){array_dim}"


def abi_to_signature(name: str, abi_inputs: Sequence[Mapping[str, Any]]) -> str:
    """
    Converts a function name and its ABI inputs to a canonical signature.  Type aliases like ``uint`` and
    ``fixed`` are expanded, since selectors are hashed from the canonical types.

    >>> abi_to_signature("transferFrom", [{"name": "to", "type": "address"}, {"name": "value", "type": "uint256"}])
    'transferFrom(address,uint256)'
    >>> abi_to_signature("deposit", [{"name": "amount", "type": "uint"}, {"name": "rate", "type": "fixed"}])
    'deposit(uint256,fixed128x18)'

    """
    collapsed = [normalize(collapse_if_tuple(abi_input)) for abi_input in abi_inputs]
    return f"{name}({','.join(collapsed)})"


def snake_to_camel(name: str) -> str:
    """
    Converts snake case to lower camel case

    >>> snake_to_camel("contract_address")
    'contractAddress'
    >>> snake_to_camel("abi")
    'abi'
    """
    first, *rest = name.split("_")
    return first + "".join(part.capitalize() for part in rest)


def parse_int_text(value: str) -> int:
    """
    Parses base-10 or 0x prefixed hexadecimal integer text.  A leading ``-`` is accepted, and range checks are
    left to the caller.  Raises ValueError for anything else, including empty strings and python's
    underscore separators.
    """
    raw = value.strip()
    negative = raw.startswith("-")
    digits = raw[1:] if negative else raw

    if digits[:2].lower() == "0x":
        base, digits = 16, digits[2:]
    else:
        base = 10

    allowed = "0123456789abcdefABCDEF" if base == 16 else "0123456789"
    if not digits or not all(c in allowed for c in digits):
        raise ValueError(f"'{value}' is not a base-10 or 0x prefixed hex integer")

    parsed = int(digits, base)
    return -parsed if negative else parsed
