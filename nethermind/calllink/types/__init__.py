from .abi import AbiDocument, AbiEntry, AbiEntryType, AbiParameter, FunctionSignature, StateMutability
from .descriptor import CallDescriptor
from .networks import SUPPORTED_CHAINS, ChainOption
from .transaction import (
    CallRequest,
    ExecutionResult,
    TransactionRequest,
    TransactionState,
    TransportParams,
)
