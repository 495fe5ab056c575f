"""NetworkConfig: Target network definitions.

The built-in table covers the networks the consumer contract is deployed
on. Callers may supply a JSON file with additional or replacement entries:

.. code-block:: json

    {
        "monad-testnet": {
            "name": "Monad Testnet",
            "chainId": 10143,
            "explorer": "https://testnet.monadscan.io",
            "switchboard": "0xD3860E2C66cBd5c969Fa7343e6912Eff0416bA33",
            "rpcUrl": "https://testnet-rpc.monad.xyz"
        }
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)


def camel_case_key(network_key: str) -> str:
    """Convert a dashed network key to the camelCase key used in deployments.

    :param network_key: Network key such as ``"monad-testnet"``.
    :returns: Deployment key such as ``"monadTestnet"``.
    """
    head, *rest = network_key.replace("_", "-").split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(frozen=True)
class NetworkConfig:
    """Static description of a target network.

    :ivar key: Network key used on the command line (e.g. ``"monad-testnet"``).
    :ivar name: Human readable network name.
    :ivar chain_id: EVM chain id.
    :ivar explorer: Block explorer base URL.
    :ivar switchboard: Address of the Switchboard oracle gateway contract.
    :ivar verifier: Optional verifier contract address.
    :ivar queue: Optional oracle queue id.
    :ivar rpc_url: Default RPC endpoint, used when none is configured.
    :ivar deployment_key: Key of this network inside the deployment file.
    :ivar currency: Symbol of the native token, used in log output.
    """

    key: str
    name: str
    chain_id: int
    explorer: str
    switchboard: str
    verifier: str | None = None
    queue: str | None = None
    rpc_url: str | None = None
    deployment_key: str = ""
    currency: str = "MON"

    def __post_init__(self) -> None:
        if not self.deployment_key:
            object.__setattr__(self, "deployment_key", camel_case_key(self.key))

    def tx_url(self, tx_hash: str) -> str:
        """Return the explorer link for a transaction hash."""
        return f"{self.explorer.rstrip('/')}/tx/{tx_hash}"

    @classmethod
    def from_dict(cls, key: str, data: dict) -> NetworkConfig:
        """Build a network config from its JSON representation.

        :param key: Network key.
        :param data: Dict with ``name``, ``chainId``, ``explorer``,
            ``switchboard`` and optional ``verifier``, ``queue``, ``rpcUrl``,
            ``deploymentKey``, ``currency``.
        :returns: New NetworkConfig instance.
        :raises ConfigError: If a required field is missing or malformed.
        """
        missing = [
            field
            for field in ("name", "chainId", "explorer", "switchboard")
            if not data.get(field)
        ]
        if missing:
            raise ConfigError(f"Network '{key}' is missing fields: {', '.join(missing)}")

        try:
            chain_id = int(data["chainId"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Network '{key}' has invalid chainId: {data['chainId']!r}") from e

        return cls(
            key=key,
            name=data["name"],
            chain_id=chain_id,
            explorer=data["explorer"],
            switchboard=data["switchboard"],
            verifier=data.get("verifier"),
            queue=data.get("queue"),
            rpc_url=data.get("rpcUrl"),
            deployment_key=data.get("deploymentKey") or "",
            currency=data.get("currency") or "MON",
        )


# Switchboard on-demand deployments per network.
DEFAULT_NETWORKS: dict[str, NetworkConfig] = {
    "monad-testnet": NetworkConfig(
        key="monad-testnet",
        name="Monad Testnet",
        chain_id=10143,
        explorer="https://testnet.monadscan.io",
        switchboard="0xD3860E2C66cBd5c969Fa7343e6912Eff0416bA33",
        rpc_url="https://testnet-rpc.monad.xyz",
    ),
    "monad-mainnet": NetworkConfig(
        key="monad-mainnet",
        name="Monad Mainnet",
        chain_id=143,
        explorer="https://mainnet-beta.monvision.io",
        switchboard="0xB7F03eee7B9F56347e32cC71DaD65B303D5a0E67",
        rpc_url="https://rpc.monad.xyz",
    ),
}


def load_networks(path: str | Path | None = None) -> dict[str, NetworkConfig]:
    """Return the network table, merged with entries from a JSON file.

    :param path: Optional path to a JSON network file. Entries in the file
        replace built-in entries with the same key.
    :returns: Dict mapping network keys to configs.
    :raises ConfigError: If the file cannot be read or is malformed.
    """
    networks = dict(DEFAULT_NETWORKS)
    if not path:
        return networks

    try:
        with open(path, "r") as file:
            data = json.load(file)
    except FileNotFoundError as e:
        raise ConfigError(f"Network file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Network file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Network file {path} must contain a JSON object")

    for key, entry in data.items():
        if not isinstance(entry, dict):
            raise ConfigError(f"Network '{key}' in {path} must be a JSON object")
        networks[key] = NetworkConfig.from_dict(key, entry)
        logger.debug(f"Loaded network {key} from {path}")

    return networks
