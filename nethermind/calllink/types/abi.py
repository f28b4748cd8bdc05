import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from eth_abi.grammar import normalize
from eth_utils.abi import function_signature_to_4byte_selector

from nethermind.calllink.utils import abi_to_signature, collapse_if_tuple

# pylint: disable=invalid-name


class AbiEntryType(Enum):
    """Type tag of an ABI entry.  Only ``function`` entries are callable"""

    function = "function"
    event = "event"
    error = "error"
    constructor = "constructor"
    fallback = "fallback"
    receive = "receive"
    other = "other"

    @classmethod
    def from_tag(cls, tag: Any) -> "AbiEntryType":
        """Maps the raw ``type`` value of an ABI entry to an entry type.  Missing or unknown tags map to other"""
        try:
            return cls(tag)
        except ValueError:
            return cls.other


class StateMutability(Enum):
    """Mutability class of an ABI function"""

    pure = "pure"
    view = "view"
    nonpayable = "nonpayable"
    payable = "payable"

    @property
    def is_read_only(self) -> bool:
        """Pure and view functions are queried with eth_call, and never signed"""
        return self in (StateMutability.pure, StateMutability.view)


@dataclass(frozen=True, slots=True)
class AbiParameter:
    """Single input or output parameter of an ABI function"""

    name: str
    type: str
    components: tuple["AbiParameter", ...] = ()
    internal_type: str | None = None

    @property
    def canonical_type(self) -> str:
        """
        Type string used in signatures and by eth_abi.  Tuples are collapsed to ``(t1,t2)`` form, and aliases are
        expanded, so ``uint`` hashes into the selector as ``uint256``
        """
        return normalize(collapse_if_tuple(self.to_abi_json()))

    def to_abi_json(self) -> dict[str, Any]:
        """Returns the parameter as an ABI JSON dict"""
        abi_json: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.internal_type is not None:
            abi_json["internalType"] = self.internal_type
        if self.components:
            abi_json["components"] = [c.to_abi_json() for c in self.components]
        return abi_json


@dataclass(frozen=True, slots=True)
class FunctionSignature:
    """
    Callable function parsed from an ABI document.  Immutable once parsed, and safe to share between
    any number of call flows.
    """

    name: str
    inputs: tuple[AbiParameter, ...]
    outputs: tuple[AbiParameter, ...]
    state_mutability: StateMutability

    @property
    def signature(self) -> str:
        """Canonical signature, ie ``transfer(address,uint256)``"""
        return abi_to_signature(self.name, [i.to_abi_json() for i in self.inputs])

    @property
    def selector(self) -> bytes:
        """4 byte function selector"""
        return function_signature_to_4byte_selector(self.signature)

    @property
    def input_names(self) -> list[str]:
        return [i.name for i in self.inputs]

    @property
    def input_types(self) -> list[str]:
        return [i.canonical_type for i in self.inputs]

    @property
    def output_types(self) -> list[str]:
        return [o.canonical_type for o in self.outputs]

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability.is_read_only

    def to_abi_json(self) -> dict[str, Any]:
        """Returns the function as an ABI JSON entry"""
        return {
            "type": AbiEntryType.function.value,
            "name": self.name,
            "inputs": [i.to_abi_json() for i in self.inputs],
            "outputs": [o.to_abi_json() for o in self.outputs],
            "stateMutability": self.state_mutability.value,
        }

    def to_abi_text(self) -> str:
        """Compact JSON text of a single entry ABI containing only this function"""
        return json.dumps([self.to_abi_json()], separators=(",", ":"))


@dataclass(frozen=True)
class AbiEntry:
    """
    Non-callable ABI entry (event, error, constructor, fallback, receive, or an unrecognized tag).
    Retained so the document mirrors its source, but exposes no callable fields.
    """

    entry_type: AbiEntryType
    name: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class AbiDocument:
    """Ordered entries of a parsed ABI.  Function names are not unique when a contract has overloads"""

    entries: tuple[FunctionSignature | AbiEntry, ...] = ()

    @property
    def functions(self) -> list[FunctionSignature]:
        return [e for e in self.entries if isinstance(e, FunctionSignature)]

    def __len__(self) -> int:
        return len(self.entries)
