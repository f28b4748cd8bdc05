import copy
from dataclasses import dataclass, field


@dataclass
class CallDescriptor:
    """
    Canonical description of a single contract call.  Built by the author from a form and an ABI, serialized
    into a transaction token, and decoded by the viewer into an independent copy.  All argument values are
    strings, and are only coerced to their ABI types when the call payload is encoded.
    """

    contract_address: str
    """ 0x prefixed, 20 byte hex address of the target contract """

    chain_id: int
    """ Chain ID of the target network """

    function_name: str
    """ Name of the function to call """

    rpc_url: str = ""
    """ RPC URL for the network.  Empty string uses the default RPC for chain_id """

    function_inputs: dict[str, str] = field(default_factory=dict)
    """
    Mapping of parameter name to string value.  Also carries the transport fields gas, maxgas, maxpriogas,
    and value, which are used for transaction submission and never ABI encoded
    """

    output_type: list[str] = field(default_factory=list)
    """ Expected return types.  Only used for read-only calls """

    is_read_only: bool = False
    """ If True, the call is executed with eth_call instead of a signed transaction """

    abi: str | None = None
    """ JSON text of the function's ABI entry, used by the viewer to rebuild the FunctionSignature """

    data: str = ""
    """ Optional precomputed 0x calldata """

    def copy(self) -> "CallDescriptor":
        """Returns an independent copy that shares no mutable state with this descriptor"""
        return copy.deepcopy(self)
