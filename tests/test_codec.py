import base64
import json
from urllib.parse import quote, unquote

import pytest

from nethermind.calllink.codec import (
    create_shareable_link,
    decode_link,
    decode_token,
    encode_token,
    token_from_link,
)
from nethermind.calllink.config import CallLinkConfig
from nethermind.calllink.descriptor import build_descriptor
from nethermind.calllink.exceptions import DecodeError, DecodeErrorKind
from nethermind.calllink.types import CallDescriptor


def _raw_token(value) -> str:
    return quote(base64.b64encode(json.dumps(value).encode()).decode(), safe="")


DESCRIPTORS = [
    CallDescriptor(contract_address="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174", chain_id=1, function_name="pause"),
    CallDescriptor(
        contract_address="0x2791bca1f2de4661ed88a30c99a7a9449aa84174",
        chain_id=137,
        rpc_url="https://polygon-rpc.com",
        function_name="transfer",
        function_inputs={
            "_to": "0xf8e81D47203A594245E36C48e151709F0C19fBe8",
            "_value": "1000",
            "gas": "60000",
            "maxgas": "",
            "maxpriogas": "0x3b9aca00",
        },
        output_type=["bool"],
        is_read_only=False,
        abi='[{"type":"function","name":"transfer"}]',
        data="0xa9059cbb",
    ),
    CallDescriptor(
        contract_address="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
        chain_id=11155111,
        function_name="setGreeting",
        function_inputs={"greeting": "héllo / wörld ✓ +=?&", "": ""},
        output_type=["uint256", "bool", "(address,uint256)[]"],
        is_read_only=True,
    ),
]


@pytest.mark.parametrize("descriptor", DESCRIPTORS)
def test_round_trip(descriptor):
    decoded = decode_token(encode_token(descriptor))

    assert decoded == descriptor
    assert decoded is not descriptor


def test_round_trip_from_built_descriptor(transfer_signature, debug_logger):
    descriptor = build_descriptor(
        "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
        137,
        "",
        transfer_signature,
        {"_to": "0xf8e81D47203A594245E36C48e151709F0C19fBe8", "_value": "1000"},
    )

    assert decode_token(encode_token(descriptor)) == descriptor


def test_round_trip_random_addresses(random_address):
    for chain_id in [1, 56, 137, 42161]:
        descriptor = CallDescriptor(
            contract_address=random_address(),
            chain_id=chain_id,
            function_name="approve",
            function_inputs={"_spender": random_address(), "_value": str(chain_id)},
            output_type=["bool"],
        )
        assert decode_token(encode_token(descriptor)) == descriptor


def test_encoding_is_idempotent():
    descriptor = DESCRIPTORS[1]

    assert encode_token(descriptor) == encode_token(descriptor)
    assert encode_token(descriptor) == encode_token(descriptor.copy())


def test_token_is_a_single_path_segment():
    for descriptor in DESCRIPTORS:
        token = encode_token(descriptor)
        assert "/" not in token
        assert "?" not in token
        assert "#" not in token


def test_token_survives_router_unescaping():
    descriptor = DESCRIPTORS[2]
    token = encode_token(descriptor)

    assert decode_token(unquote(token)) == descriptor


def test_placeholder_is_rejected():
    with pytest.raises(DecodeError) as exc_info:
        decode_token(":txData")

    assert exc_info.value.kind == DecodeErrorKind.placeholder


def test_custom_placeholder():
    with pytest.raises(DecodeError) as exc_info:
        decode_link("https://app.example/tx/:token", CallLinkConfig(placeholder=":token"))

    assert exc_info.value.kind == DecodeErrorKind.placeholder


def test_missing_required_fields():
    with pytest.raises(DecodeError) as exc_info:
        decode_token(_raw_token({"chainId": 1}))

    assert exc_info.value.kind == DecodeErrorKind.missing_fields
    assert "contractAddress" in str(exc_info.value)
    assert "functionName" in str(exc_info.value)


def test_empty_required_field_is_missing():
    token = _raw_token({"contractAddress": "", "chainId": 1, "functionName": "transfer"})

    with pytest.raises(DecodeError) as exc_info:
        decode_token(token)

    assert exc_info.value.kind == DecodeErrorKind.missing_fields


@pytest.mark.parametrize(
    "token",
    [
        "not-base64!!",
        quote(base64.b64encode(b"{not json").decode(), safe=""),
        _raw_token([1, 2, 3]),
        _raw_token("transfer"),
        base64.b64encode(b"\xff\xfe\xfd").decode(),
        "%E0%A4%A",
        "",
    ],
)
def test_malformed_tokens(token):
    with pytest.raises(DecodeError) as exc_info:
        decode_token(token)

    assert exc_info.value.kind == DecodeErrorKind.malformed


@pytest.mark.parametrize(
    "wire",
    [
        {"contractAddress": "0xabc", "chainId": "1", "functionName": "transfer"},
        {"contractAddress": "0xabc", "chainId": True, "functionName": "transfer"},
        {"contractAddress": "0xabc", "chainId": 1, "functionName": "transfer", "functionInputs": {"a": 1}},
        {"contractAddress": "0xabc", "chainId": 1, "functionName": "transfer", "outputType": "uint256"},
        {"contractAddress": "0xabc", "chainId": 1, "functionName": "transfer", "isReadOnly": "yes"},
    ],
)
def test_invalid_field_types_are_malformed(wire):
    with pytest.raises(DecodeError) as exc_info:
        decode_token(_raw_token(wire))

    assert exc_info.value.kind == DecodeErrorKind.malformed


def test_minimal_token_uses_defaults():
    decoded = decode_token(
        _raw_token(
            {
                "contractAddress": "0xabc",
                "chainId": 80001,
                "functionName": "transfer",
                "rpcUrl": None,
                "unknownField": [1],
            }
        )
    )

    assert decoded == CallDescriptor(contract_address="0xabc", chain_id=80001, function_name="transfer")


def test_decoded_descriptors_are_independent():
    token = encode_token(DESCRIPTORS[1])

    first, second = decode_token(token), decode_token(token)
    first.function_inputs["_value"] = "1"

    assert second.function_inputs["_value"] == "1000"


def test_shareable_link():
    config = CallLinkConfig(base_url="https://app.example/")
    link = create_shareable_link(DESCRIPTORS[1], config)

    assert link.startswith("https://app.example/transaction/")
    assert token_from_link(link) == encode_token(DESCRIPTORS[1])
    assert decode_link(link, config) == DESCRIPTORS[1]


def test_token_from_link():
    assert token_from_link("abc123") == "abc123"
    assert token_from_link("https://app.example/transaction/abc123/") == "abc123"
    assert token_from_link("https://app.example/transaction/abc123?ref=share#top") == "abc123"

    with pytest.raises(DecodeError) as exc_info:
        token_from_link("https://app.example/")

    assert exc_info.value.kind == DecodeErrorKind.malformed


def test_lone_surrogates_round_trip():
    descriptor = CallDescriptor(
        contract_address="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
        chain_id=1,
        function_name="setGreeting",
        function_inputs={"greeting": "\ud800 héllo \udfff"},
    )
    token = encode_token(descriptor)

    assert token.isascii()
    assert decode_token(token) == descriptor


def test_only_camel_case_wire_keys_are_read():
    base = {"contractAddress": "0xabc", "chainId": 1, "functionName": "transfer"}

    decoded = decode_token(_raw_token({**base, "contract_address": "0xdef", "ContractAddress": "0x123"}))
    assert decoded.contract_address == "0xabc"

    decoded = decode_token(_raw_token({"contract_address": "0xdef", **base}))
    assert decoded.contract_address == "0xabc"

    with pytest.raises(DecodeError) as exc_info:
        decode_token(_raw_token({"contract_address": "0xdef", "chainId": 1, "functionName": "transfer"}))
    assert exc_info.value.kind == DecodeErrorKind.missing_fields
