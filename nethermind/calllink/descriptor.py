import logging
from typing import Mapping

from nethermind.calllink.exceptions import ValidationError
from nethermind.calllink.types.abi import FunctionSignature
from nethermind.calllink.types.descriptor import CallDescriptor
from nethermind.calllink.utils import is_address_shaped

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("descriptor")


def build_descriptor(
    contract_address: str,
    chain_id: int,
    rpc_url: str,
    signature: FunctionSignature | None,
    inputs: Mapping[str, str],
) -> CallDescriptor:
    """
    Builds a CallDescriptor from form input.  Checks are run in order, and the first failure is raised:

        * contract_address is not empty
        * a function is selected
        * every parameter of the function has an entry in inputs.  Empty strings are accepted

    Argument values are not type checked here.  Values that cannot be coerced to their ABI types raise an
    EncodeError when the call payload is built.

    :param contract_address: hex address of the target contract
    :param chain_id: chain ID of the target network
    :param rpc_url: RPC URL.  Pass an empty string to use the network default
    :param signature: Selected function
    :param inputs: Mapping of parameter names to string values.  Can also contain transport fields
    :raises ValidationError: keyed by ``contractAddress``, ``function``, or the missing parameter name
    """
    if not contract_address:
        raise ValidationError("contractAddress", "Contract address is required")

    if signature is None:
        raise ValidationError("function", "Select a function to execute")

    for param in signature.inputs:
        if param.name not in inputs:
            raise ValidationError(param.name, f'Parameter "{param.name}" is required')

    descriptor = CallDescriptor(
        contract_address=contract_address,
        chain_id=chain_id,
        rpc_url=rpc_url,
        function_name=signature.name,
        function_inputs=dict(inputs),
        output_type=signature.output_types,
        is_read_only=signature.is_read_only,
        abi=signature.to_abi_text(),
    )
    logger.debug(f"Built descriptor for {signature.signature} on {contract_address} (chain {chain_id})")
    return descriptor


def validate_descriptor(descriptor: CallDescriptor) -> CallDescriptor:
    """
    Checks the shape of a descriptor received from another party.  Addresses are only checked for length and
    hex characters, not checksums.

    :raises ValidationError: keyed by ``contractAddress`` or ``chainId``
    """
    if not is_address_shaped(descriptor.contract_address):
        raise ValidationError(
            "contractAddress", f"Contract address {descriptor.contract_address} is not a 20 byte hex address"
        )
    if isinstance(descriptor.chain_id, bool) or not isinstance(descriptor.chain_id, int) or descriptor.chain_id <= 0:
        raise ValidationError("chainId", f"Chain ID must be a positive integer, got {descriptor.chain_id}")

    return descriptor
