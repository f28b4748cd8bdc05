from dataclasses import dataclass
from enum import Enum
from typing import Any, NotRequired, TypedDict

from eth_typing import ChecksumAddress

# pylint: disable=invalid-name


class TransactionRequest(TypedDict):
    """
    Request handed to the wallet for state changing calls.  Gas fields are left out when the author did not
    provide them, and the wallet estimates them instead.
    """

    to: ChecksumAddress
    value: int
    data: str
    chainId: int
    gas: NotRequired[int]
    maxFeePerGas: NotRequired[int]
    maxPriorityFeePerGas: NotRequired[int]


class CallRequest(TypedDict):
    """Request handed to the RPC provider for read-only calls"""

    to: ChecksumAddress
    data: str


@dataclass(frozen=True, slots=True)
class TransportParams:
    """Transaction submission parameters carried alongside the function inputs of a descriptor"""

    gas: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    value: int | None = None


class TransactionState(Enum):
    """States of a single call flow"""

    idle = "idle"
    building = "building"
    awaiting_signature = "awaiting_signature"
    awaiting_confirmation = "awaiting_confirmation"
    settled = "settled"
    failed = "failed"

    def pretty(self):
        """Returns a pretty version of the state"""
        return self.value.replace("_", " ").title()


@dataclass
class ExecutionResult:
    """Outcome of a settled call flow"""

    is_read_only: bool
    return_value: Any = None
    """ Decoded return value of a read-only call """

    transaction_hash: str | None = None
    receipt: dict[str, Any] | None = None
