"""ContractUtility: Web3 initialization and contract ABI loading."""

import json
import logging
from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from .NetworkConfig import NetworkConfig

logger = logging.getLogger(__name__)

ABI_DIR = Path(__file__).parent.parent / "abi"


class ContractUtility:
    """Utility for Web3 connection, signing and contract ABI loading.

    :ivar rpc_url: RPC endpoint URL.
    :ivar network: Target network config.
    :ivar account: Local signing account.
    :ivar w3: Web3 instance that signs outgoing transactions with ``account``.
    """

    def __init__(self, rpc_url: str, network: NetworkConfig, private_key: str) -> None:
        """Initialize the contract utility.

        No request is sent to the endpoint until the first call.

        :param rpc_url: RPC endpoint URL.
        :param network: Target network config.
        :param private_key: Hex-encoded signing key.
        """
        self.rpc_url = rpc_url
        self.network = network

        self.account: LocalAccount = Account.from_key(private_key)
        self.w3 = Web3(Web3.HTTPProvider(rpc_url))
        self.w3.middleware_onion.inject(
            SignAndSendRawMiddlewareBuilder.build(self.account), layer=0
        )
        self.w3.eth.default_account = self.account.address
        logger.debug(f"Web3 configured for {network.name} via {rpc_url}")

    @property
    def address(self) -> str:
        """Return the checksummed signer address."""
        return self.account.address

    @staticmethod
    def get_abi(contract_name: str) -> list:
        """Load the ABI of a contract from the packaged abi folder.

        :param contract_name: Name of the contract (e.g., "Switchboard").
        :returns: Contract ABI.
        """
        output_path = (ABI_DIR / f"{contract_name}.json").resolve()

        with open(output_path, "r") as file:
            contract_data = json.load(file)

        return contract_data["abi"]
