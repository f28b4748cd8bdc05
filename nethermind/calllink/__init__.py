from .abi import list_functions, parse_abi, select_function
from .codec import create_shareable_link, decode_link, decode_token, encode_token
from .config import CallLinkConfig
from .descriptor import build_descriptor, validate_descriptor
from .encoding import build_call_payload, decode_return_value
from .exceptions import (
    AmbiguousFunctionError,
    CallLinkError,
    DecodeError,
    DecodeErrorKind,
    EncodeError,
    ParseError,
    TransactionFailed,
    ValidationError,
)
from .types import AbiDocument, CallDescriptor, FunctionSignature
