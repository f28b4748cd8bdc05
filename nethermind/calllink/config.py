import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

from nethermind.calllink.exceptions import ValidationError
from nethermind.calllink.types.networks import DEFAULT_CHAIN_ID, SUPPORTED_CHAINS, ChainOption

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("calllink").getChild("config")

RPC_OVERRIDE_PREFIX = "CALLLINK_RPC_"


@dataclass
class CallLinkConfig:
    """
    Configuration for link creation and adapter construction.  Passed explicitly to the functions that need it,
    so network defaults never come from process-wide state.
    """

    base_url: str = "http://localhost:8080"
    """ Origin of the app serving transaction pages """

    route_prefix: str = "/transaction/"
    """ Path prefix of the transaction route.  The token is appended as the final path segment """

    placeholder: str = ":txData"
    """ Literal route parameter that is seen if a link is opened before the router substitutes the token """

    default_chain_id: int = DEFAULT_CHAIN_ID

    networks: tuple[ChainOption, ...] = SUPPORTED_CHAINS

    rpc_overrides: dict[int, str] = field(default_factory=dict)
    """ Chain ID to RPC URL.  Takes precedence over the URLs in networks """

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CallLinkConfig":
        """
        Loads configuration from environment variables:

            * ``CALLLINK_BASE_URL``
            * ``CALLLINK_DEFAULT_CHAIN_ID``
            * ``CALLLINK_RPC_<chain_id>``, ie ``CALLLINK_RPC_137=https://...``

        """
        environ = os.environ if environ is None else environ
        config = cls()

        if base_url := environ.get("CALLLINK_BASE_URL"):
            config.base_url = base_url.rstrip("/")
        if default_chain := environ.get("CALLLINK_DEFAULT_CHAIN_ID"):
            config.default_chain_id = int(default_chain)

        for key, value in environ.items():
            if key.startswith(RPC_OVERRIDE_PREFIX) and key[len(RPC_OVERRIDE_PREFIX) :].isdigit():
                config.rpc_overrides[int(key[len(RPC_OVERRIDE_PREFIX) :])] = value

        logger.debug(f"Loaded config with base url {config.base_url} and {len(config.rpc_overrides)} RPC overrides")
        return config

    def get_network(self, chain_id: int) -> ChainOption | None:
        """Returns the network for a chain ID, or None if it is not in the network table"""
        for network in self.networks:
            if network.id == chain_id:
                return network
        return None

    def rpc_url_for(self, chain_id: int, rpc_url: str = "") -> str:
        """
        Resolves the RPC URL for a call.  An explicit rpc_url wins, then the configured override for the chain,
        then the network default.

        :raises ValidationError: if no RPC URL is known for the chain
        """
        if rpc_url:
            return rpc_url
        if chain_id in self.rpc_overrides:
            return self.rpc_overrides[chain_id]

        network = self.get_network(chain_id)
        if network is None:
            raise ValidationError("rpcUrl", f"No RPC URL configured for chain {chain_id}")
        return network.rpc_url
