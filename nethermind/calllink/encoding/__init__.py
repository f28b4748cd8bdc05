from .call_encoder import (
    FunctionCallEncoder,
    build_call_payload,
    decode_call_payload,
    decode_return_value,
    encode_call_data,
)
from .coercion import coerce_value
from .transport import TRANSPORT_KEYS, transport_params
