import logging

import click

from nethermind.calllink.cli.utils import (
    base_url_option,
    chain_id_option,
    contract_address_option,
    from_address_option,
    function_option,
    group_options,
    input_option,
    json_rpc_option,
    rpc_url_option,
)

# isort: skip_file
# pylint: disable=too-many-arguments,import-outside-toplevel,too-many-locals

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("cli")


@click.command()
@click.argument("abi_json", type=click.File("r"))
def functions(abi_json):
    """Lists the callable functions of an ABI"""
    from rich.table import Table
    from nethermind.calllink.abi import list_functions, parse_abi
    from nethermind.calllink.cli.utils import cli_logger_config
    from nethermind.calllink.exceptions import ParseError

    console = cli_logger_config(root_logger)

    try:
        contract_functions = list_functions(parse_abi(abi_json.read()))
    except ParseError as e:
        logger.error(f"Failed to parse ABI: {e}")
        raise click.exceptions.Exit(1)

    if not contract_functions:
        console.print("[yellow]No functions found.  The provided ABI doesn't contain any functions")
        return

    table = Table(box=None)
    table.add_column("Selector", style="bold")
    table.add_column("Signature")
    table.add_column("Mutability")
    table.add_column("Returns")
    for func in contract_functions:
        table.add_row(
            f"0x{func.selector.hex()}",
            func.signature,
            func.state_mutability.value,
            ", ".join(func.output_types),
        )

    console.print(f"Found {len(contract_functions)} functions in the contract")
    console.print(table)


@click.command()
@click.argument("abi_json", type=click.File("r"))
@group_options(contract_address_option, chain_id_option, rpc_url_option, function_option, input_option)
@group_options(base_url_option)
def create(abi_json, contract_address, chain_id, rpc_url, function, inputs, base_url):
    """Creates a shareable transaction link for a contract call"""
    from nethermind.calllink.abi import parse_abi, select_function
    from nethermind.calllink.cli.utils import cli_logger_config, parse_input_options
    from nethermind.calllink.codec import create_shareable_link, encode_token
    from nethermind.calllink.config import CallLinkConfig
    from nethermind.calllink.descriptor import build_descriptor
    from nethermind.calllink.encoding import build_call_payload
    from nethermind.calllink.exceptions import CallLinkError

    console = cli_logger_config(root_logger)
    config = CallLinkConfig.from_env()
    if base_url:
        config.base_url = base_url.rstrip("/")

    function_inputs = parse_input_options(inputs)

    try:
        document = parse_abi(abi_json.read())
        # A missing contract address is reported before function selection errors
        signature = select_function(document, function) if contract_address and function else None
        descriptor = build_descriptor(
            contract_address=contract_address,
            chain_id=chain_id or config.default_chain_id,
            rpc_url=rpc_url,
            signature=signature,
            inputs=function_inputs,
        )
        # Surface coercion errors to the author before the link is shared
        build_call_payload(signature, descriptor.function_inputs)  # type: ignore[arg-type]
    except CallLinkError as e:
        logger.error(f"Failed to generate link: {e}")
        raise click.exceptions.Exit(1)

    console.print(f"[bold]Token:[/bold] {encode_token(descriptor)}")
    console.print(f"[green]Link:[/green] {create_shareable_link(descriptor, config)}")


@click.command(name="inspect")
@click.argument("token_or_link")
def inspect_link(token_or_link):
    """Decodes a transaction link, and prints the call it describes"""
    from rich.table import Table
    from nethermind.calllink.adapter import resolve_payload, resolve_signature
    from nethermind.calllink.cli.utils import cli_logger_config
    from nethermind.calllink.codec import decode_link
    from nethermind.calllink.config import CallLinkConfig
    from nethermind.calllink.encoding import TRANSPORT_KEYS
    from nethermind.calllink.exceptions import CallLinkError, DecodeError

    console = cli_logger_config(root_logger)
    config = CallLinkConfig.from_env()

    try:
        descriptor = decode_link(token_or_link, config)
    except DecodeError as e:
        logger.error(f"{e.kind.pretty()}: {e}")
        raise click.exceptions.Exit(1)

    network = config.get_network(descriptor.chain_id)

    details = Table(box=None, show_header=False)
    details.add_column("Field", style="bold")
    details.add_column("Value")
    details.add_row("Contract", descriptor.contract_address)
    details.add_row("Network", f"{network.name} ({descriptor.chain_id})" if network else str(descriptor.chain_id))
    details.add_row("RPC", descriptor.rpc_url or "network default")
    details.add_row("Function", descriptor.function_name)
    details.add_row("Mode", "read-only call" if descriptor.is_read_only else "transaction")
    if descriptor.output_type:
        details.add_row("Returns", ", ".join(descriptor.output_type))
    console.print(details)

    if descriptor.function_inputs:
        inputs_table = Table(box=None)
        inputs_table.add_column("Input", style="bold")
        inputs_table.add_column("Value")
        inputs_table.add_column("Kind")
        for name, value in descriptor.function_inputs.items():
            inputs_table.add_row(name, value, "transport" if name in TRANSPORT_KEYS else "argument")
        console.print(inputs_table)

    try:
        signature = resolve_signature(descriptor)
        payload = resolve_payload(descriptor)
    except CallLinkError as e:
        console.print(f"[red]Cannot build calldata: {e}")
        return

    if signature is not None:
        console.print(f"[bold]Signature:[/bold] {signature.signature}")
    console.print(f"[bold]Calldata:[/bold] 0x{payload.hex()}")


@click.command()
@click.argument("token_or_link")
@group_options(json_rpc_option, from_address_option)
def execute(token_or_link, json_rpc, from_address):
    """Executes the call in a transaction link through an RPC connection"""
    from web3 import Web3
    from nethermind.calllink.adapter import TransactionFlow, Web3ExecutionAdapter
    from nethermind.calllink.cli.utils import cli_logger_config, to_json
    from nethermind.calllink.codec import decode_link
    from nethermind.calllink.config import CallLinkConfig
    from nethermind.calllink.exceptions import CallLinkError

    console = cli_logger_config(root_logger)
    config = CallLinkConfig.from_env()

    try:
        descriptor = decode_link(token_or_link, config)
        if json_rpc:
            adapter = Web3ExecutionAdapter(Web3(Web3.HTTPProvider(json_rpc)), from_address=from_address)
        else:
            adapter = Web3ExecutionAdapter.from_descriptor(descriptor, config, from_address=from_address)

        flow = TransactionFlow(descriptor, adapter)
        result = flow.execute()
    except CallLinkError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        raise click.exceptions.Exit(1)

    if result.is_read_only:
        console.print(f"[green]Result:[/green] {to_json(result.return_value)}")
    else:
        console.print(f"[green]Transaction sent:[/green] {result.transaction_hash}")
        console.print(to_json({k: v for k, v in (result.receipt or {}).items() if k != "logs"}))


@click.command()
def networks():
    """Lists the default networks and their RPC urls"""
    from rich.table import Table
    from nethermind.calllink.cli.utils import cli_logger_config
    from nethermind.calllink.config import CallLinkConfig

    console = cli_logger_config(root_logger)
    config = CallLinkConfig.from_env()

    table = Table(box=None)
    table.add_column("Chain ID", style="bold")
    table.add_column("Name")
    table.add_column("RPC")
    for network in config.networks:
        table.add_row(str(network.id), network.name, config.rpc_url_for(network.id))

    console.print(table)
