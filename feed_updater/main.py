#!/usr/bin/env python3
"""Switchboard Feed Updater.

Fetches a signed price quote from Switchboard Crossbar, submits it to the
deployed price consumer contract and reads back the stored price.

Configure via environment variables or a .env file. See .env.example.
"""

import argparse
import logging
import os
import sys

from dotenv import find_dotenv, load_dotenv

from .src.Deployments import DEFAULT_DEPLOYMENTS_PATH
from .src.NetworkConfig import NetworkConfig, load_networks
from .src.PriceUpdater import PriceUpdater
from .src.UpdateConfig import (
    DEFAULT_CONTRACT_NAME,
    DEFAULT_CROSSBAR_NETWORK,
    DEFAULT_CROSSBAR_URL,
    DEFAULT_FEED_HASH,
    DEFAULT_MAX_DEVIATION_BPS,
    DEFAULT_MAX_PRICE_AGE,
    DEFAULT_NETWORK,
    UpdateConfig,
    private_key_from_env,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to ``default``.

    :param name: Environment variable name.
    :param default: Value used when the variable is unset or empty.
    :returns: Parsed integer.
    :raises ValueError: If the variable is set but not an integer.
    """
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser with environment-backed defaults."""
    parser = argparse.ArgumentParser(
        description="Switchboard Feed Updater: push a signed oracle quote on-chain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Update the default BTC/USD feed on Monad testnet
  PRIVATE_KEY=0x... python -m feed_updater.main

  # Another feed on mainnet with a custom RPC endpoint
  python -m feed_updater.main --network monad-mainnet \\
      --rpc-url https://rpc.example.org --feed-hash 0x...

  # Show the configured networks
  python -m feed_updater.main --list-networks

Environment variables (CLI args take precedence):
  RPC_URL, PRIVATE_KEY (or DEPLOYER_ACCOUNT_PRIV_KEY), NETWORK, FEED_HASH,
  MAX_PRICE_AGE, MAX_DEVIATION_BPS, DEPLOYMENTS_PATH, CONSUMER_CONTRACT,
  NETWORKS_FILE, CROSSBAR_URL, CROSSBAR_NETWORK
""",
    )

    parser.add_argument(
        "--network",
        type=str,
        help=f"Network to update (default: {DEFAULT_NETWORK})",
        default=os.environ.get("NETWORK") or DEFAULT_NETWORK,
    )

    parser.add_argument(
        "--rpc-url",
        dest="rpc_url",
        type=str,
        help="RPC endpoint URL (default: the network's public endpoint)",
        default=os.environ.get("RPC_URL") or "",
    )

    parser.add_argument(
        "--feed-hash",
        dest="feed_hash",
        type=str,
        help="Switchboard feed hash, with or without 0x (default: BTC/USD)",
        default=os.environ.get("FEED_HASH") or DEFAULT_FEED_HASH,
    )

    parser.add_argument(
        "--max-price-age",
        dest="max_price_age",
        type=int,
        help=f"Expected max price age in seconds (default: {DEFAULT_MAX_PRICE_AGE})",
        default=env_int("MAX_PRICE_AGE", DEFAULT_MAX_PRICE_AGE),
    )

    parser.add_argument(
        "--max-deviation-bps",
        dest="max_deviation_bps",
        type=int,
        help=f"Expected max deviation in basis points (default: {DEFAULT_MAX_DEVIATION_BPS})",
        default=env_int("MAX_DEVIATION_BPS", DEFAULT_MAX_DEVIATION_BPS),
    )

    parser.add_argument(
        "--deployments",
        dest="deployments_path",
        type=str,
        help=f"Path of the deployment file (default: {DEFAULT_DEPLOYMENTS_PATH})",
        default=os.environ.get("DEPLOYMENTS_PATH") or DEFAULT_DEPLOYMENTS_PATH,
    )

    parser.add_argument(
        "--contract-name",
        dest="contract_name",
        type=str,
        help=f"Consumer contract name in the deployment file (default: {DEFAULT_CONTRACT_NAME})",
        default=os.environ.get("CONSUMER_CONTRACT") or DEFAULT_CONTRACT_NAME,
    )

    parser.add_argument(
        "--networks-file",
        dest="networks_file",
        type=str,
        help="JSON file with additional or replacement network definitions",
        default=os.environ.get("NETWORKS_FILE"),
    )

    parser.add_argument(
        "--crossbar-url",
        dest="crossbar_url",
        type=str,
        help=f"Crossbar gateway URL (default: {DEFAULT_CROSSBAR_URL})",
        default=os.environ.get("CROSSBAR_URL") or DEFAULT_CROSSBAR_URL,
    )

    parser.add_argument(
        "--crossbar-network",
        dest="crossbar_network",
        type=str,
        help=f"Crossbar cluster to fetch quotes from (default: {DEFAULT_CROSSBAR_NETWORK})",
        default=os.environ.get("CROSSBAR_NETWORK") or DEFAULT_CROSSBAR_NETWORK,
    )

    parser.add_argument(
        "--list-networks",
        dest="list_networks",
        action="store_true",
        help="Print the configured networks and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging and stack traces",
    )

    return parser


def print_networks(networks: dict[str, NetworkConfig]) -> None:
    """Print the network table."""
    for key in sorted(networks):
        network = networks[key]
        print(
            f"{key:<16} {network.name:<16} chainId={network.chain_id:<8} "
            f"switchboard={network.switchboard} deployments={network.deployment_key}"
        )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the feed updater CLI.

    :param argv: Command line arguments (default: ``sys.argv[1:]``).
    :returns: Process exit code, 0 on success and 1 on any failure.
    """
    load_dotenv(find_dotenv(usecwd=True))

    verbose = False
    try:
        try:
            args = build_parser().parse_args(argv)
        except SystemExit as e:
            # argparse exits 0 for --help and 2 for malformed flags.
            return 0 if e.code in (0, None) else 1
        verbose = args.verbose

        # Configure logging level
        if args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        networks = load_networks(args.networks_file)
        if args.list_networks:
            print_networks(networks)
            return 0

        config = UpdateConfig(
            network=args.network,
            rpc_url=args.rpc_url,
            private_key=private_key_from_env(),
            feed_hash=args.feed_hash,
            max_price_age=args.max_price_age,
            max_deviation_bps=args.max_deviation_bps,
            deployments_path=args.deployments_path,
            contract_name=args.contract_name,
            crossbar_url=args.crossbar_url,
            crossbar_network=args.crossbar_network,
        )
        PriceUpdater(config, networks=networks).run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 1
    except Exception as e:
        logger.error("=" * 60)
        logger.error("ERROR: Operation Failed")
        logger.error("=" * 60)
        logger.error(f"Fatal error: {e}", exc_info=verbose)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
