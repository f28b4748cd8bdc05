import logging
from typing import Any, Protocol

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from web3 import Web3

from nethermind.calllink.abi import parse_abi, select_function
from nethermind.calllink.config import CallLinkConfig
from nethermind.calllink.descriptor import validate_descriptor
from nethermind.calllink.encoding import build_call_payload, decode_return_value, transport_params
from nethermind.calllink.exceptions import TransactionFailed, ValidationError
from nethermind.calllink.types.abi import FunctionSignature
from nethermind.calllink.types.descriptor import CallDescriptor
from nethermind.calllink.types.transaction import (
    CallRequest,
    ExecutionResult,
    TransactionRequest,
    TransactionState,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("adapter")


class ExecutionAdapter(Protocol):
    """
    Wallet & RPC boundary.  Signing, key management, and transport to the node all happen behind this protocol.
    """

    def call(self, request: CallRequest) -> bytes:
        """Executes a read-only call, and returns the raw return data"""
        raise NotImplementedError()

    def send_transaction(self, request: TransactionRequest) -> str:
        """Signs & submits a transaction, and returns the 0x prefixed transaction hash"""
        raise NotImplementedError()

    def wait_for_receipt(self, transaction_hash: str) -> dict[str, Any]:
        """Waits for the transaction to be mined, and returns its receipt"""
        raise NotImplementedError()


def build_transaction_request(descriptor: CallDescriptor, payload: bytes) -> TransactionRequest:
    """
    Builds the request handed to the wallet for state changing calls.  Gas parameters and the native value are
    read from the transport fields of the descriptor inputs.  Gas parameters that were not provided are left out
    of the request.

    :raises EncodeError: keyed by the transport field if it is not an integer
    """
    params = transport_params(descriptor.function_inputs)

    request: TransactionRequest = {
        "to": to_checksum_address(descriptor.contract_address),
        "value": params.value or 0,
        "data": "0x" + payload.hex(),
        "chainId": descriptor.chain_id,
    }
    if params.gas is not None:
        request["gas"] = params.gas
    if params.max_fee_per_gas is not None:
        request["maxFeePerGas"] = params.max_fee_per_gas
    if params.max_priority_fee_per_gas is not None:
        request["maxPriorityFeePerGas"] = params.max_priority_fee_per_gas

    return request


def build_call_request(descriptor: CallDescriptor, payload: bytes) -> CallRequest:
    """Builds the request handed to the RPC provider for read-only calls"""
    return {"to": to_checksum_address(descriptor.contract_address), "data": "0x" + payload.hex()}


def resolve_signature(descriptor: CallDescriptor) -> FunctionSignature | None:
    """
    Rebuilds the FunctionSignature from the ABI carried by the descriptor.  Returns None if the descriptor has
    no ABI.

    :raises ParseError: if the ABI text is malformed
    :raises ValidationError: if the function is not in the ABI, or is ambiguous
    """
    if not descriptor.abi:
        return None
    return select_function(parse_abi(descriptor.abi), descriptor.function_name)


def resolve_payload(descriptor: CallDescriptor) -> bytes:
    """
    Returns the call payload for a descriptor.  Payloads are encoded from the descriptor's ABI & inputs, and
    precomputed calldata is only used for descriptors without an ABI.

    :raises ValidationError: if the descriptor has neither an ABI nor calldata, or the calldata is not hex
    :raises EncodeError: if an input cannot be coerced to its parameter type
    """
    signature = resolve_signature(descriptor)
    if signature is not None:
        return build_call_payload(signature, descriptor.function_inputs)

    if descriptor.data:
        try:
            return bytes.fromhex(descriptor.data.removeprefix("0x"))
        except ValueError as e:
            raise ValidationError("data", f"Calldata {descriptor.data} is not valid hex") from e

    raise ValidationError("abi", "Descriptor has neither an ABI nor calldata to execute")


class TransactionFlow:
    """
    Drives a single descriptor through the call flow:

        ``idle -> building -> awaiting_signature -> awaiting_confirmation -> settled | failed``

    Read-only calls skip signing & mining, and go from building straight to settled or failed.  Errors from the
    core and from the adapter move the flow to failed, and are re-raised unchanged.
    """

    descriptor: CallDescriptor
    adapter: ExecutionAdapter

    state: TransactionState
    history: list[TransactionState]
    """ Every state the flow has entered, in order """

    payload: bytes | None = None
    result: ExecutionResult | None = None
    error: Exception | None = None

    def __init__(self, descriptor: CallDescriptor, adapter: ExecutionAdapter):
        self.descriptor = descriptor.copy()
        self.adapter = adapter
        self.state = TransactionState.idle
        self.history = [TransactionState.idle]

    def _transition(self, state: TransactionState):
        logger.debug(f"{self.descriptor.function_name} flow: {self.state.pretty()} -> {state.pretty()}")
        self.state = state
        self.history.append(state)

    def execute(self) -> ExecutionResult:
        """
        Builds the payload and executes the call through the adapter

        :return: ExecutionResult with the decoded return value for read-only calls, or the transaction hash and
            receipt for state changing calls
        """
        if self.state != TransactionState.idle:
            raise RuntimeError(f"Flow for {self.descriptor.function_name} was already executed")

        self._transition(TransactionState.building)
        try:
            validate_descriptor(self.descriptor)
            self.payload = resolve_payload(self.descriptor)

            if self.descriptor.is_read_only:
                self.result = self._execute_call(self.payload)
            else:
                self.result = self._execute_transaction(self.payload)
        except Exception as e:
            self.error = e
            self._transition(TransactionState.failed)
            logger.error(f"Call to {self.descriptor.function_name} failed: {e}")
            raise

        self._transition(TransactionState.settled)
        return self.result

    def _execute_call(self, payload: bytes) -> ExecutionResult:
        raw = self.adapter.call(build_call_request(self.descriptor, payload))
        return ExecutionResult(
            is_read_only=True, return_value=decode_return_value(raw, self.descriptor.output_type)
        )

    def _execute_transaction(self, payload: bytes) -> ExecutionResult:
        request = build_transaction_request(self.descriptor, payload)

        self._transition(TransactionState.awaiting_signature)
        transaction_hash = self.adapter.send_transaction(request)
        logger.info(f"Submitted {self.descriptor.function_name} transaction {transaction_hash}")

        self._transition(TransactionState.awaiting_confirmation)
        receipt = self.adapter.wait_for_receipt(transaction_hash)
        if receipt.get("status") == 0:
            raise TransactionFailed(transaction_hash)

        return ExecutionResult(is_read_only=False, transaction_hash=transaction_hash, receipt=receipt)


class Web3ExecutionAdapter:
    """
    ExecutionAdapter backed by a web3.py connection.  Transactions are sent with ``eth_sendTransaction``, so
    signing is done by the node or the injected wallet provider.
    """

    w3: Web3  # pylint: disable=invalid-name
    from_address: ChecksumAddress | None
    receipt_timeout: float

    def __init__(self, w3: Web3, from_address: str | None = None, receipt_timeout: float = 120):
        self.w3 = w3
        self.from_address = to_checksum_address(from_address) if from_address else None
        self.receipt_timeout = receipt_timeout

    @classmethod
    def from_descriptor(
        cls, descriptor: CallDescriptor, config: CallLinkConfig | None = None, **kwargs
    ) -> "Web3ExecutionAdapter":
        """
        Connects to the RPC URL of the descriptor, falling back to the configured default for its chain

        :raises ValidationError: if no RPC URL is known for the chain
        """
        config = config or CallLinkConfig()
        rpc_url = config.rpc_url_for(descriptor.chain_id, descriptor.rpc_url)
        logger.info(f"Connecting to RPC {rpc_url} for chain {descriptor.chain_id}")
        return cls(Web3(Web3.HTTPProvider(rpc_url)), **kwargs)

    def call(self, request: CallRequest) -> bytes:
        return bytes(self.w3.eth.call({"to": request["to"], "data": request["data"]}))  # type: ignore[typeddict-item]

    def send_transaction(self, request: TransactionRequest) -> str:
        transaction = dict(request)
        transaction["from"] = self.from_address or self.w3.eth.accounts[0]

        transaction_hash = self.w3.eth.send_transaction(transaction)  # type: ignore[arg-type]
        return Web3.to_hex(transaction_hash)

    def wait_for_receipt(self, transaction_hash: str) -> dict[str, Any]:
        receipt = self.w3.eth.wait_for_transaction_receipt(
            transaction_hash, timeout=self.receipt_timeout  # type: ignore[arg-type]
        )
        return dict(receipt)
