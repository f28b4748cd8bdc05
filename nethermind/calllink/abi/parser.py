import json
import logging
from typing import Any

from eth_abi.grammar import normalize

from nethermind.calllink.exceptions import AmbiguousFunctionError, ParseError, ValidationError
from nethermind.calllink.types.abi import (
    AbiDocument,
    AbiEntry,
    AbiEntryType,
    AbiParameter,
    FunctionSignature,
    StateMutability,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("abi")


def parse_abi(source: str) -> AbiDocument:
    """
    Parses ABI JSON text into an AbiDocument.  An empty array, or an ABI without any functions is valid, and
    parses to a document with zero callable functions.

    :param source: JSON text of a contract ABI
    :return: AbiDocument with entries in source order
    :raises ParseError: if the text is not a JSON array of objects, or a function entry is malformed
    """
    try:
        abi_data = json.loads(source)
    except (json.JSONDecodeError, TypeError) as e:
        logger.debug(f"Failed to parse ABI JSON: {e}")
        raise ParseError(f"ABI is not valid JSON: {e}") from e

    return parse_abi_data(abi_data)


def parse_abi_data(abi_data: Any) -> AbiDocument:
    """
    Parses an already decoded ABI into an AbiDocument.  Entries are tagged by their ``type`` field, and only
    function entries are parsed into FunctionSignatures

    :param abi_data: list of ABI entry dicts
    """
    if not isinstance(abi_data, list):
        raise ParseError(f"ABI must be a JSON array of entries, got {type(abi_data).__name__}")

    entries: list[FunctionSignature | AbiEntry] = []
    for index, abi_entry in enumerate(abi_data):
        if not isinstance(abi_entry, dict):
            raise ParseError(f"ABI entry {index} must be an object, got {type(abi_entry).__name__}")

        entry_type = AbiEntryType.from_tag(abi_entry.get("type"))
        match entry_type:
            case AbiEntryType.function:
                entries.append(_parse_function(abi_entry, index))
            case _:
                name = abi_entry.get("name")
                entries.append(
                    AbiEntry(entry_type=entry_type, name=name if isinstance(name, str) else None, raw=dict(abi_entry))
                )

    document = AbiDocument(entries=tuple(entries))
    logger.debug(f"Parsed ABI with {len(document)} entries and {len(document.functions)} functions")
    return document


def list_functions(document: AbiDocument) -> list[FunctionSignature]:
    """Returns all callable functions in source order.  Overloaded functions are all returned"""
    return document.functions


def select_function(document: AbiDocument, function: str) -> FunctionSignature:
    """
    Selects a function by full signature, ie ``transfer(address,uint256)``, or by name.  Selecting an overloaded
    function by name raises an AmbiguousFunctionError instead of guessing which overload was intended.

    :param document: Parsed ABI
    :param function: Function name or canonical signature
    :raises ValidationError: if no function matches
    :raises AmbiguousFunctionError: if more than one function has the name
    """
    if "(" in function:
        name, _, types = function.replace(" ", "").partition("(")
        signature = f"{name}({normalize(types)}"
        matches = [f for f in document.functions if f.signature == signature]
    else:
        matches = [f for f in document.functions if f.name == function]

    if not matches:
        raise ValidationError("function", f"Function {function} not found in ABI")
    if len(matches) > 1:
        raise AmbiguousFunctionError(function, [f.signature for f in matches])

    return matches[0]


def _parse_function(abi_entry: dict[str, Any], index: int) -> FunctionSignature:
    name = abi_entry.get("name")
    if not isinstance(name, str) or not name:
        raise ParseError(f"Function entry {index} has no name")

    return FunctionSignature(
        name=name,
        inputs=_parse_parameters(abi_entry.get("inputs", []), f"{name}.inputs"),
        outputs=_parse_parameters(abi_entry.get("outputs", []), f"{name}.outputs"),
        state_mutability=_parse_mutability(abi_entry, name),
    )


def _parse_parameters(params: Any, location: str) -> tuple[AbiParameter, ...]:
    if params is None:
        return ()
    if not isinstance(params, list):
        raise ParseError(f"{location} must be a list of parameters")

    return tuple(_parse_parameter(param, f"{location}[{idx}]") for idx, param in enumerate(params))


def _parse_parameter(param: Any, location: str) -> AbiParameter:
    if not isinstance(param, dict):
        raise ParseError(f"{location} must be an object")

    name, typ, internal_type = param.get("name", ""), param.get("type"), param.get("internalType")
    if not isinstance(name, str):
        raise ParseError(f"{location} name must be a string")
    if not isinstance(typ, str) or not typ:
        raise ParseError(f"{location} type must be a non-empty string")
    if internal_type is not None and not isinstance(internal_type, str):
        raise ParseError(f"{location} internalType must be a string")

    components = _parse_parameters(param.get("components"), f"{location}.components")
    if typ.startswith("tuple") and not components:
        raise ParseError(f"{location} is a tuple without components")

    return AbiParameter(name=name, type=typ, components=components, internal_type=internal_type)


def _parse_mutability(abi_entry: dict[str, Any], name: str) -> StateMutability:
    state_mutability = abi_entry.get("stateMutability")
    if state_mutability is not None:
        try:
            return StateMutability(state_mutability)
        except ValueError as e:
            raise ParseError(f"Function {name} has invalid stateMutability {state_mutability}") from e

    # Pre 0.4.16 ABIs only have the constant & payable flags
    if abi_entry.get("constant") is True:
        return StateMutability.view
    if abi_entry.get("payable") is True:
        return StateMutability.payable
    return StateMutability.nonpayable
