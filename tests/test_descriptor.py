import pytest

from nethermind.calllink.descriptor import build_descriptor, validate_descriptor
from nethermind.calllink.exceptions import ValidationError
from nethermind.calllink.abi import select_function
from nethermind.calllink.types import CallDescriptor

CONTRACT = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"


def test_build_transfer_descriptor(transfer_signature):
    inputs = {"_to": "0xf8e81D47203A594245E36C48e151709F0C19fBe8", "_value": "1000", "gas": "60000"}
    descriptor = build_descriptor(CONTRACT, 137, "", transfer_signature, inputs)

    assert descriptor.contract_address == CONTRACT
    assert descriptor.chain_id == 137
    assert descriptor.rpc_url == ""
    assert descriptor.function_name == "transfer"
    assert descriptor.function_inputs == inputs
    assert descriptor.output_type == ["bool"]
    assert descriptor.is_read_only is False
    assert descriptor.abi == transfer_signature.to_abi_text()

    # Descriptor must not share the caller's mapping
    inputs["_value"] = "1"
    assert descriptor.function_inputs["_value"] == "1000"


def test_read_only_descriptor(erc20_abi):
    balance_of = select_function(erc20_abi, "balanceOf")
    descriptor = build_descriptor(CONTRACT, 1, "https://rpc.example", balance_of, {"_owner": CONTRACT})

    assert descriptor.is_read_only
    assert descriptor.output_type == ["uint256"]


def test_missing_contract_address_checked_first(transfer_signature):
    with pytest.raises(ValidationError) as exc_info:
        build_descriptor("", 137, "", None, {})

    assert exc_info.value.field == "contractAddress"


def test_missing_function(transfer_signature):
    with pytest.raises(ValidationError) as exc_info:
        build_descriptor(CONTRACT, 137, "", None, {"_to": "0x", "_value": "1"})

    assert exc_info.value.field == "function"


def test_missing_parameter(transfer_signature):
    with pytest.raises(ValidationError) as exc_info:
        build_descriptor(CONTRACT, 137, "", transfer_signature, {"_to": CONTRACT})

    assert exc_info.value.field == "_value"


def test_empty_string_inputs_are_accepted(transfer_signature):
    descriptor = build_descriptor(CONTRACT, 137, "", transfer_signature, {"_to": "", "_value": ""})

    assert descriptor.function_inputs == {"_to": "", "_value": ""}


def test_argument_values_are_not_type_checked(transfer_signature):
    descriptor = build_descriptor(CONTRACT, 137, "", transfer_signature, {"_to": "nope", "_value": "abc"})

    assert descriptor.function_inputs["_value"] == "abc"


def test_validate_descriptor_shape():
    valid = CallDescriptor(contract_address=CONTRACT.lower(), chain_id=5, function_name="transfer")
    assert validate_descriptor(valid) is valid

    with pytest.raises(ValidationError) as exc_info:
        validate_descriptor(CallDescriptor(contract_address="0xabc", chain_id=5, function_name="transfer"))
    assert exc_info.value.field == "contractAddress"

    with pytest.raises(ValidationError) as exc_info:
        validate_descriptor(CallDescriptor(contract_address=CONTRACT, chain_id=0, function_name="transfer"))
    assert exc_info.value.field == "chainId"


def test_descriptor_copy_is_independent():
    original = CallDescriptor(
        contract_address=CONTRACT, chain_id=1, function_name="transfer", function_inputs={"_value": "1"}
    )
    copied = original.copy()

    copied.function_inputs["_value"] = "2"
    copied.output_type.append("bool")

    assert original.function_inputs == {"_value": "1"}
    assert original.output_type == []
