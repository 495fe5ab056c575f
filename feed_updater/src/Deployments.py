"""Deployments: Read-only access to the deployment address file."""

import json
import logging
from pathlib import Path

from .errors import DeploymentError

logger = logging.getLogger(__name__)

DEFAULT_DEPLOYMENTS_PATH = "deployments.json"


class Deployments:
    """Deployed contract addresses, keyed by network and contract name.

    The file maps a network deployment key to contract names, each holding
    at least an ``address``:

    .. code-block:: json

        {"monadTestnet": {"SwitchBoardTest": {"address": "0x..."}}}

    :ivar path: Path the deployments were loaded from.
    :ivar data: Parsed file contents.
    """

    def __init__(self, path: Path, data: dict) -> None:
        self.path = path
        self.data = data

    @classmethod
    def load(cls, path: str | Path = DEFAULT_DEPLOYMENTS_PATH) -> "Deployments":
        """Load the deployment file.

        :param path: Path to the JSON deployment file.
        :returns: Loaded Deployments.
        :raises DeploymentError: If the file does not exist or is not a
            JSON object.
        """
        path = Path(path)
        if not path.is_file():
            raise DeploymentError(
                f"{path} not found. Please deploy the contract first."
            )

        try:
            with open(path, "r") as file:
                data = json.load(file)
        except json.JSONDecodeError as e:
            raise DeploymentError(f"{path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise DeploymentError(f"{path} must contain a JSON object")

        logger.debug(f"Loaded deployments for networks {sorted(data)} from {path}")
        return cls(path, data)

    def address(self, network_key: str, contract_name: str) -> str:
        """Return the deployed address of a contract on a network.

        :param network_key: Deployment key of the network (e.g. ``"monadTestnet"``).
        :param contract_name: Contract name (e.g. ``"SwitchBoardTest"``).
        :returns: Contract address.
        :raises DeploymentError: If there is no such deployment.
        """
        contracts = self.data.get(network_key)
        deployment = contracts.get(contract_name) if isinstance(contracts, dict) else None
        if not isinstance(deployment, dict) or not deployment.get("address"):
            raise DeploymentError(
                f"No {contract_name} deployment found for {network_key}. "
                "Please deploy the contract first."
            )
        return deployment["address"]
