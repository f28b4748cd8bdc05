import pytest
from click.testing import CliRunner

from nethermind.calllink.abi import parse_abi, select_function
from nethermind.calllink.cli import calllink_cli
from nethermind.calllink.codec import encode_token
from nethermind.calllink.descriptor import build_descriptor
from nethermind.calllink.encoding import encode_call_data
from tests.resources.abi import ERC20_ABI_JSON

CONTRACT = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"
RECIPIENT = "0xf8e81D47203A594245E36C48e151709F0C19fBe8"


def _collapse(output: str) -> str:
    # rich wraps long tokens & tables to the console width
    return "".join(output.split())


@pytest.fixture(name="abi_file")
def fixture_abi_file(tmp_path):
    path = tmp_path / "erc20.json"
    path.write_text(ERC20_ABI_JSON)
    return str(path)


@pytest.fixture(name="transfer_token")
def fixture_transfer_token():
    signature = select_function(parse_abi(ERC20_ABI_JSON), "transfer")
    descriptor = build_descriptor(CONTRACT, 137, "", signature, {"_to": RECIPIENT, "_value": "1000"})
    return encode_token(descriptor)


def test_list_functions(abi_file):
    runner = CliRunner()
    result = runner.invoke(calllink_cli, ["functions", abi_file])

    assert result.exit_code == 0
    assert "Found 9 functions" in result.output
    assert "0xa9059cbb" in result.output
    assert "transfer(address,uint256)" in _collapse(result.output)


def test_list_functions_without_functions(tmp_path):
    path = tmp_path / "events.json"
    path.write_text('[{"type": "event", "name": "Transfer", "inputs": []}]')

    result = CliRunner().invoke(calllink_cli, ["functions", str(path)])

    assert result.exit_code == 0
    assert "No functions found" in result.output


def test_list_functions_malformed_abi(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    result = CliRunner().invoke(calllink_cli, ["functions", str(path)])

    assert result.exit_code == 1


def test_create_link(abi_file, transfer_token):
    args = ["create", abi_file, "-addr", CONTRACT, "-c", "137", "-f", "transfer"]
    args += ["-i", f"_to={RECIPIENT}", "-i", "_value=1000", "--base-url", "https://app.example/"]

    result = CliRunner().invoke(calllink_cli, args)

    assert result.exit_code == 0
    assert f"https://app.example/transaction/{transfer_token}" in _collapse(result.output)


def test_create_link_rejects_invalid_inputs(abi_file):
    args = ["create", abi_file, "-addr", CONTRACT, "-c", "137", "-f", "transfer"]

    bad_amount = CliRunner().invoke(calllink_cli, args + ["-i", f"_to={RECIPIENT}", "-i", "_value=abc"])
    assert bad_amount.exit_code == 1
    assert "_value" in bad_amount.output

    missing_input = CliRunner().invoke(calllink_cli, args + ["-i", f"_to={RECIPIENT}"])
    assert missing_input.exit_code == 1

    missing_function = CliRunner().invoke(calllink_cli, ["create", abi_file, "-addr", CONTRACT])
    assert missing_function.exit_code == 1

    bad_option = CliRunner().invoke(calllink_cli, args + ["-i", "_value"])
    assert bad_option.exit_code == 2


def test_inspect_link(transfer_token):
    signature = select_function(parse_abi(ERC20_ABI_JSON), "transfer")

    result = CliRunner().invoke(calllink_cli, ["inspect", f"https://app.example/transaction/{transfer_token}"])

    assert result.exit_code == 0
    assert "Polygon Mainnet" in result.output
    assert "transfer(address,uint256)" in _collapse(result.output)
    assert encode_call_data(signature, {"_to": RECIPIENT, "_value": "1000"}) in _collapse(result.output)


@pytest.mark.parametrize("token", [":txData", "corrupted!!"])
def test_inspect_invalid_links(token):
    result = CliRunner().invoke(calllink_cli, ["inspect", token])

    assert result.exit_code == 1


def test_networks(monkeypatch):
    monkeypatch.setenv("CALLLINK_RPC_137", "https://polygon.example")

    result = CliRunner().invoke(calllink_cli, ["networks"])

    assert result.exit_code == 0
    assert "Sepolia" in result.output
    assert "https://polygon.example" in result.output
    assert "https://polygon-rpc.com" not in result.output


@pytest.mark.parametrize("function_args", [[], ["-f", "mint"], ["-f", "transfer"]])
def test_create_link_reports_missing_address_first(abi_file, function_args):
    result = CliRunner().invoke(calllink_cli, ["create", abi_file, "-c", "137"] + function_args)

    assert result.exit_code == 1
    assert "Contractaddressisrequired" in _collapse(result.output)
    assert "notfoundinABI" not in _collapse(result.output)
