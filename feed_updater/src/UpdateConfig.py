"""UpdateConfig: Process configuration for a single feed update run."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from eth_account import Account

from .Deployments import DEFAULT_DEPLOYMENTS_PATH
from .errors import ConfigError
from .FeedQuote import normalize_feed_hash
from .NetworkConfig import NetworkConfig

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "monad-testnet"
DEFAULT_FEED_HASH = "0x4cd1cad962425681af07b9254b7d804de3ca3446fbfd1371bb258d2c75059812"  # BTC/USD
DEFAULT_MAX_PRICE_AGE = 300  # 5 minutes
DEFAULT_MAX_DEVIATION_BPS = 1000  # 10%
DEFAULT_CONTRACT_NAME = "SwitchBoardTest"
DEFAULT_CROSSBAR_URL = "https://crossbar.switchboard.xyz"
# Quotes are chain-agnostic, so they always come from the mainnet cluster.
DEFAULT_CROSSBAR_NETWORK = "mainnet"

PRIVATE_KEY_ENV_VARS = ("PRIVATE_KEY", "DEPLOYER_ACCOUNT_PRIV_KEY")


def redact(secret: str) -> str:
    """Redact a credential, keeping the first 6 and last 4 characters.

    :param secret: Credential to redact.
    :returns: Redacted string like ``"0xac09...ff80"``.
    """
    if len(secret) <= 10:
        return "*" * len(secret)
    return f"{secret[:6]}...{secret[-4:]}"


def private_key_from_env() -> str:
    """Return the signing key from the first populated environment variable."""
    for name in PRIVATE_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return ""


@dataclass
class UpdateConfig:
    """Configuration of a feed update run.

    :ivar network: Selected network key.
    :ivar rpc_url: RPC endpoint URL. Empty uses the network default.
    :ivar private_key: Signing key of the submitting account.
    :ivar feed_hash: Feed identifier (normalized on validation).
    :ivar max_price_age: Expected on-chain max price age in seconds.
    :ivar max_deviation_bps: Expected on-chain max deviation in basis points.
    :ivar deployments_path: Path of the deployment address file.
    :ivar contract_name: Name of the consumer contract in the deployment file.
    :ivar crossbar_url: Base URL of the Crossbar gateway.
    :ivar crossbar_network: Crossbar cluster to request quotes from.
    """

    network: str = DEFAULT_NETWORK
    rpc_url: str = ""
    private_key: str = ""
    feed_hash: str = DEFAULT_FEED_HASH
    max_price_age: int = DEFAULT_MAX_PRICE_AGE
    max_deviation_bps: int = DEFAULT_MAX_DEVIATION_BPS
    deployments_path: str = DEFAULT_DEPLOYMENTS_PATH
    contract_name: str = DEFAULT_CONTRACT_NAME
    crossbar_url: str = DEFAULT_CROSSBAR_URL
    crossbar_network: str = DEFAULT_CROSSBAR_NETWORK

    def __repr__(self) -> str:
        return (
            f"UpdateConfig(network={self.network!r}, rpc_url={self.rpc_url!r}, "
            f"private_key={redact(self.private_key)!r}, feed_hash={self.feed_hash!r})"
        )

    def validate(self, networks: dict[str, NetworkConfig]) -> NetworkConfig:
        """Validate the configuration before any network I/O.

        Fills in the network's default RPC endpoint when none is set and
        normalizes the feed hash.

        :param networks: Known networks.
        :returns: Config of the selected network.
        :raises ConfigError: If a required value is missing or invalid.
        """
        network_config = networks.get(self.network)
        if network_config is None:
            raise ConfigError(
                f"Unknown network: {self.network}. Available: {', '.join(sorted(networks))}"
            )

        if not self.rpc_url:
            self.rpc_url = network_config.rpc_url or ""
        if not self.rpc_url:
            raise ConfigError("RPC_URL environment variable is required")
        logger.info(f"RPC URL:        {self.rpc_url}")

        if not self.private_key:
            raise ConfigError("PRIVATE_KEY environment variable is required")
        try:
            Account.from_key(self.private_key)
        except Exception:
            # Never chain: the cause may contain the key.
            raise ConfigError("PRIVATE_KEY is not a valid hex key") from None
        logger.info(f"Private Key:    {redact(self.private_key)} (hidden)")

        logger.info(f"Network:        {network_config.name} (Chain ID: {network_config.chain_id})")

        try:
            self.feed_hash = normalize_feed_hash(self.feed_hash)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        logger.info(f"Feed Hash:      {self.feed_hash}")

        if self.max_price_age <= 0:
            raise ConfigError(f"MAX_PRICE_AGE must be positive, got {self.max_price_age}")
        if self.max_deviation_bps < 0:
            raise ConfigError(
                f"MAX_DEVIATION_BPS must not be negative, got {self.max_deviation_bps}"
            )

        return network_config
