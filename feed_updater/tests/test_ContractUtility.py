"""Unit tests for ContractUtility."""

import pytest

from feed_updater.src.ContractUtility import ContractUtility
from feed_updater.src.NetworkConfig import DEFAULT_NETWORKS

# Well-known local development account.
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class TestContractUtility:
    def test_signer_from_private_key(self) -> None:
        """The signer address should derive from the key without RPC calls."""
        utility = ContractUtility(
            "http://localhost:8545", DEFAULT_NETWORKS["monad-testnet"], PRIVATE_KEY
        )
        assert utility.address == ADDRESS
        assert utility.w3.eth.default_account == ADDRESS

    @pytest.mark.parametrize(
        "contract_name, functions",
        [
            ("Switchboard", {"getFee", "updateFeeds", "latestUpdate"}),
            (
                "SwitchBoardTest",
                {
                    "updatePrices",
                    "getPrice",
                    "isPriceFresh",
                    "getPriceAge",
                    "maxPriceAge",
                    "maxDeviationBps",
                    "owner",
                },
            ),
        ],
    )
    def test_get_abi(self, contract_name: str, functions: set[str]) -> None:
        """Packaged ABIs should expose the functions the updater calls."""
        abi = ContractUtility.get_abi(contract_name)
        names = {item["name"] for item in abi if item["type"] == "function"}
        assert functions <= names

    def test_get_abi_unknown(self) -> None:
        with pytest.raises(FileNotFoundError):
            ContractUtility.get_abi("Missing")
