import click

from nethermind.calllink.cli.link import create, execute, functions, inspect_link, networks


@click.group()
def calllink_cli():
    """Command Line Interface for creating and executing shareable contract call links"""


# Adding Commands
calllink_cli.add_command(functions, name="functions")
calllink_cli.add_command(create, name="create")
calllink_cli.add_command(inspect_link, name="inspect")
calllink_cli.add_command(execute, name="execute")
calllink_cli.add_command(networks, name="networks")
