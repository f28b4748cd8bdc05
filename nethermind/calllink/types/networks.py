from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChainOption:
    """Network that transaction links can target"""

    id: int
    name: str
    rpc_url: str


SUPPORTED_CHAINS: tuple[ChainOption, ...] = (
    ChainOption(id=1, name="Ethereum Mainnet", rpc_url="https://ethereum-rpc.publicnode.com"),
    ChainOption(id=11155111, name="Sepolia Testnet", rpc_url="https://ethereum-sepolia-rpc.publicnode.com"),
    ChainOption(id=5, name="Goerli Testnet", rpc_url="https://goerli.infura.io/v3/"),
    ChainOption(id=137, name="Polygon Mainnet", rpc_url="https://polygon-rpc.com"),
    ChainOption(id=80001, name="Mumbai Testnet", rpc_url="https://rpc-mumbai.maticvigil.com"),
    ChainOption(id=42161, name="Arbitrum One", rpc_url="https://arb1.arbitrum.io/rpc"),
    ChainOption(id=43114, name="Avalanche C-Chain", rpc_url="https://api.avax.network/ext/bc/C/rpc"),
    ChainOption(id=56, name="BNB Smart Chain", rpc_url="https://bsc-dataseed.binance.org"),
)
""" Default networks, in the order they are presented to authors """


DEFAULT_CHAIN_ID = 80001
