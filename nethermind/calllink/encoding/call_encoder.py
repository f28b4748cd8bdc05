import logging
from typing import Any, Callable, Mapping, Sequence

from eth_abi import decode as eth_abi_decode
from eth_abi import encode as eth_abi_encode
from eth_abi import is_encodable
from eth_abi.exceptions import (
    ABITypeError,
    DecodingError,
    InsufficientDataBytes,
    NoEntriesFound,
    NonEmptyPaddingBytes,
    ParseError,
)
from eth_utils import to_checksum_address

from nethermind.calllink.exceptions import DecodeError, DecodeErrorKind, EncodeError
from nethermind.calllink.types.abi import FunctionSignature

from .coercion import coerce_value

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("encoding")


def apply_formatters(
    decoding_result: Sequence[Any], types: Sequence[str], formatters: Mapping[str, Callable[[Any], Any]]
) -> list[Any]:
    """
    Applies formatters to a decoding result.

    :param decoding_result: List of values returned from ABI Decoding
    :param types: List of types for each entry in decoding_result
    :param formatters: Mapping of ABI type to formatter function
    """
    formatted_values = []
    for value, typ in zip(decoding_result, types, strict=True):
        formatter = formatters.get(typ)
        if formatter is not None:
            formatted_values.append(formatter(value))
        else:
            formatted_values.append(value)

    return formatted_values


def decode_abi_from_types(types: Sequence[str], data: bytes | bytearray) -> tuple[Any, ...]:
    """
    Decodes ABI data from types and data bytes.  Never returns a partial result.

    :raises DecodeError: with kind return_decode_failure if the data does not decode to types
    """
    try:
        return eth_abi_decode(list(types), bytes(data))
    except InsufficientDataBytes as e:
        logger.debug(f"Insufficient data bytes while decoding {data.hex()} for types {types}")
        raise DecodeError(DecodeErrorKind.return_decode_failure, f"Insufficient data bytes for types {types}") from e
    except NonEmptyPaddingBytes as e:
        logger.debug(f"Non-empty padding bytes while decoding {data.hex()} for types {types}")
        raise DecodeError(DecodeErrorKind.return_decode_failure, f"Non-empty padding bytes for types {types}") from e
    except (DecodingError, OverflowError) as e:
        logger.debug(f"{e.__class__.__name__} while decoding {data.hex()} for types {types}: {e}")
        raise DecodeError(DecodeErrorKind.return_decode_failure, f"Invalid encoding for types {types}: {e}") from e
    except (ABITypeError, NoEntriesFound, ParseError) as e:
        logger.debug(f"Invalid types {types} for decoding: {e}")
        raise DecodeError(DecodeErrorKind.return_decode_failure, f"Invalid output types {types}: {e}") from e


class FunctionCallEncoder:
    """
    Encodes calls to a single ABI function.  Stores the precomputed selector & types of the function, and keeps no
    state between calls, so a single encoder can serve any number of concurrent call flows.
    """

    signature: FunctionSignature
    function_signature: str
    selector: bytes

    _input_types: list[str]
    _input_names: list[str]
    _output_types: list[str]

    _formatters: dict[str, Callable[[Any], Any]] = {}

    def __init__(self, signature: FunctionSignature):
        self.signature = signature
        self.function_signature = signature.signature
        self.selector = signature.selector

        self._input_types = signature.input_types
        self._input_names = signature.input_names
        self._output_types = signature.output_types

        self._formatters = {"address": to_checksum_address}

    def encode(self, inputs: Mapping[str, str]) -> bytes:
        """
        Coerces string inputs to the declared parameter types, and encodes them behind the function selector.
        Keys in inputs that are not function parameters, like the gas transport fields, are ignored.

        :param inputs: Mapping of parameter name to string value
        :return: selector + ABI encoded arguments
        :raises EncodeError: keyed by the parameter that could not be coerced
        """
        args = []
        for param, abi_type in zip(self.signature.inputs, self._input_types, strict=True):
            if param.name not in inputs:
                raise EncodeError(param.name, "missing value")

            value = coerce_value(param.type, inputs[param.name], param.name, param.components)
            if not is_encodable(abi_type, value):
                raise EncodeError(param.name, f"value {inputs[param.name]} cannot be encoded as {abi_type}")
            args.append(value)

        payload = self.selector + eth_abi_encode(self._input_types, args)
        logger.debug(f"Encoded call to {self.function_signature}: 0x{payload.hex()}")
        return payload

    def decode_input(self, payload: bytes) -> dict[str, Any]:
        """
        Decodes calldata back into named arguments, so a viewer can review the call before signing

        :raises DecodeError: with kind malformed if the selector does not match, or the arguments do not decode
        """
        if bytes(payload[:4]) != self.selector:
            raise DecodeError(
                DecodeErrorKind.malformed,
                f"Calldata selector 0x{bytes(payload[:4]).hex()} does not match {self.function_signature}",
            )
        try:
            decoded = decode_abi_from_types(self._input_types, payload[4:])
        except DecodeError as e:
            raise DecodeError(DecodeErrorKind.malformed, f"Invalid calldata for {self.function_signature}") from e

        formatted = apply_formatters(decoded, self._input_types, self._formatters)
        return dict(zip(self._input_names, formatted, strict=True))

    def decode_output(self, raw: bytes) -> Any:
        """Decodes the return data of the function using its declared outputs"""
        return decode_return_value(raw, self._output_types)


def build_call_payload(signature: FunctionSignature, inputs: Mapping[str, str]) -> bytes:
    """
    Builds the payload for invoking a contract function.  Coercion happens here, and only here.

    >>> build_call_payload(transfer_signature, {"_to": "0xa9D1e08C7793af67e9d92fe308d5697FB81d3E43", "_value": "1000"})
    b'\\xa9\\x05\\x9c\\xbb...'

    :param signature: Function to call
    :param inputs: Mapping of parameter name to string value
    :raises EncodeError: keyed by the parameter that could not be coerced
    """
    return FunctionCallEncoder(signature).encode(inputs)


def encode_call_data(signature: FunctionSignature, inputs: Mapping[str, str]) -> str:
    """Returns the call payload as 0x prefixed hex"""
    return "0x" + build_call_payload(signature, inputs).hex()


def decode_call_payload(signature: FunctionSignature, payload: bytes) -> dict[str, Any]:
    """Decodes calldata into a mapping of parameter name to value"""
    return FunctionCallEncoder(signature).decode_input(payload)


def decode_return_value(raw: bytes, output_types: Sequence[str]) -> Any:
    """
    Decodes the return data of a read-only call.

        * No output types:  raw is returned unchanged for the caller to interpret
        * One output type:  the single decoded value is returned
        * Several output types:  a tuple with one value per type is returned

    Top level addresses are returned checksummed.

    :param raw: Return data from eth_call
    :param output_types: Expected return types
    :raises DecodeError: with kind return_decode_failure if raw does not decode to output_types
    """
    if not output_types:
        return raw

    decoded = decode_abi_from_types(output_types, raw)
    formatted = apply_formatters(decoded, output_types, {"address": to_checksum_address})

    if len(formatted) == 1:
        return formatted[0]
    return tuple(formatted)
