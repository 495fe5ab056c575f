"""
Switchboard Feed Updater - One-Shot On-Chain Price Update

This module pushes a signed Switchboard quote to a price consumer contract:
- NetworkConfig: Network table with gateway addresses and explorers
- Deployments: Deployed consumer contract addresses per network
- UpdateConfig: Run configuration and validation
- CrossbarClient: Signed quote retrieval from Switchboard Crossbar
- PriceUpdater: Fee query, balance check, submission and read-back
"""

from .CrossbarClient import CrossbarClient
from .Deployments import Deployments
from .errors import (
    ConfigError,
    CrossbarError,
    DeploymentError,
    InsufficientBalanceError,
    QuoteShapeError,
    TransactionRevertedError,
    UpdateError,
)
from .FeedQuote import VALUE_DECIMALS, FeedQuote, format_value, normalize_feed_hash, parse_value
from .NetworkConfig import DEFAULT_NETWORKS, NetworkConfig, load_networks
from .PriceUpdater import PriceReadback, PriceUpdater, TransactionReceipt, UpdateResult
from .UpdateConfig import UpdateConfig

__all__ = [
    "ConfigError",
    "CrossbarClient",
    "CrossbarError",
    "DEFAULT_NETWORKS",
    "DeploymentError",
    "Deployments",
    "FeedQuote",
    "InsufficientBalanceError",
    "NetworkConfig",
    "PriceReadback",
    "PriceUpdater",
    "QuoteShapeError",
    "TransactionReceipt",
    "TransactionRevertedError",
    "UpdateConfig",
    "UpdateError",
    "UpdateResult",
    "VALUE_DECIMALS",
    "format_value",
    "load_networks",
    "normalize_feed_hash",
    "parse_value",
]
