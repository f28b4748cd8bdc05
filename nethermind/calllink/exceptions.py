from enum import Enum


class CallLinkError(Exception):
    """

    Base class for all errors raised while parsing ABIs, building descriptors, encoding calls, and decoding
    transaction links.  None of these errors are fatal, and each carries the field, parameter, or kind needed
    to tell the author which input to correct

    """


class ParseError(CallLinkError):
    """

    Raised when ABI text cannot be parsed into an AbiDocument.  The text must be a JSON array of objects,
    and every function entry must have a string name and lists of typed parameters.

    """

    reason: str
    """ Short machine readable reason.  Currently always ``"malformed"`` """

    def __init__(self, message: str, reason: str = "malformed"):
        super().__init__(message)
        self.reason = reason


class ValidationError(CallLinkError):
    """

    Raised when a CallDescriptor is missing a required value.  ``field`` is either one of the descriptor
    fields (``contractAddress``, ``chainId``, ``function``), or the name of the function parameter without
    an input value.

    """

    field: str

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"Missing required value for {field}")
        self.field = field


class AmbiguousFunctionError(ValidationError):
    """
    Raised when a function is selected by name, and the ABI defines more than one overload with that name.
    Select the function with its full signature instead, ie ``transfer(address,uint256)``
    """

    name: str
    candidates: list[str]

    def __init__(self, name: str, candidates: list[str]):
        super().__init__(
            "function",
            f"Function name {name} is ambiguous.  Select one of the signatures: {', '.join(candidates)}",
        )
        self.name = name
        self.candidates = candidates


class DecodeErrorKind(Enum):
    """Reason a token or return value could not be decoded"""

    # pylint: disable=invalid-name

    placeholder = "placeholder"
    malformed = "malformed"
    missing_fields = "missing_fields"
    return_decode_failure = "return_decode_failure"

    def pretty(self):
        """Returns a pretty version of the error kind"""
        match self:
            case DecodeErrorKind.missing_fields:
                return "Missing Fields"
            case DecodeErrorKind.return_decode_failure:
                return "Return Decode Failure"
            case _:
                return self.value.capitalize()


class DecodeError(CallLinkError):
    """

    Raised when a transaction token or return data cannot be decoded.  The ``kind`` separates tokens that were
    never substituted by the router, corrupted tokens, tokens missing required fields, and return data that
    does not match the expected output types.  Corrupted links should be treated as invalid, not retried.

    """

    kind: DecodeErrorKind

    def __init__(self, kind: DecodeErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class EncodeError(CallLinkError):
    """

    Raised when a string input cannot be coerced into the type declared for its parameter.  ``param`` is the
    parameter name, with ``[index]`` and ``.component`` suffixes when the failing value is nested inside an
    array or tuple.

    """

    param: str
    reason: str

    def __init__(self, param: str, reason: str):
        super().__init__(f"Cannot encode parameter {param}: {reason}")
        self.param = param
        self.reason = reason


class TransactionFailed(CallLinkError):
    """
    Raised when a submitted transaction is mined with a failed status.  Coercion & validation errors are never
    reported as a TransactionFailed, and are raised with their own types before anything is submitted
    """

    transaction_hash: str

    def __init__(self, transaction_hash: str, message: str | None = None):
        super().__init__(message or f"Transaction {transaction_hash} reverted")
        self.transaction_hash = transaction_hash
