import json
import logging
import os
from decimal import Decimal
from logging import Logger

import click
from rich.console import Console
from rich.logging import RichHandler

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("cli")


class HexEnabledJsonEncoder(json.JSONEncoder):
    """JSON Encoder that converts bytes to 0x prefixed hex, and decimals to strings"""

    def default(self, o):
        if isinstance(o, bytes):
            return "0x" + o.hex()
        if isinstance(o, Decimal):
            return str(o)
        return json.JSONEncoder.default(self, o)


def to_json(value) -> str:
    """Dumps decoded values and receipts for printing to the console"""
    return json.dumps(value, cls=HexEnabledJsonEncoder, indent=2)


def cli_logger_config(instrument_logger: Logger) -> Console:
    rich_console = Console()
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(logging.INFO)
    return rich_console


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


def parse_input_options(inputs: tuple[str, ...]) -> dict[str, str]:
    """
    Parses ``name=value`` pairs from the command line into a function input mapping.  Values are kept as strings,
    and may be empty.
    """
    parsed = {}
    for raw in inputs:
        name, sep, value = raw.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"Expected name=value, got '{raw}'", param_hint="--input")
        parsed[name] = value
    return parsed


# -------------------------------------------------------
#    CLI Connections and Configurations
# -------------------------------------------------------
json_rpc_option = click.option(
    "--json-rpc",
    "-rpc",
    "json_rpc",
    default=os.environ.get("JSON_RPC"),
    help="RPC url to execute calls with.  If not provided, will use the JSON_RPC environment variable, "
    "then the RPC url of the transaction link",
)
base_url_option = click.option(
    "--base-url",
    "base_url",
    default=os.environ.get("CALLLINK_BASE_URL"),
    help="Origin of the app serving transaction links.  If not provided, will use the CALLLINK_BASE_URL "
    "environment variable",
)


# -------------------------------------------------------
#    Transaction Parameters
# -------------------------------------------------------
contract_address_option = click.option(
    "--contract-address",
    "-addr",
    "contract_address",
    type=str,
    default="",
    help="Address of the contract to call",
)
chain_id_option = click.option(
    "--chain-id",
    "-c",
    "chain_id",
    type=int,
    default=None,
    help="Chain ID of the target network.  Run `calllink networks` to list the supported networks",
)
rpc_url_option = click.option(
    "--rpc-url",
    "rpc_url",
    type=str,
    default="",
    help="RPC url embedded in the link.  If not provided, the viewer uses the network default",
)
function_option = click.option(
    "--function",
    "-f",
    "function",
    type=str,
    default=None,
    help="Function name, or full signature for overloaded functions, ie 'transfer(address,uint256)'",
)
input_option = click.option(
    "--input",
    "-i",
    "inputs",
    multiple=True,
    help="Function input as name=value.  Can be input multiple times.  Transport fields gas, maxgas, "
    "maxpriogas, and value are passed the same way",
)
from_address_option = click.option(
    "--from-address",
    "from_address",
    default=None,
    help="Sender address for transactions.  Defaults to the first account of the RPC node",
)
