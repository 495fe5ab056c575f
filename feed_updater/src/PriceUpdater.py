"""PriceUpdater: One-shot Switchboard price update workflow.

Steps, each aborting the run on failure:
    1. Validate configuration (no network I/O)
    2. Load the consumer contract address from the deployment file
    3. Set up the provider and signer, and check the RPC chain id
    4. Fetch a signed quote from Crossbar
    5. Query the update fee from the Switchboard contract
    6. Check the signer balance covers the fee
    7. Submit ``updatePrices`` and wait for the receipt
    8. Read back the stored price and report freshness

.. code-block:: python

    >>> updater = PriceUpdater(UpdateConfig(private_key="0x..."))
    >>> result = updater.run()
    >>> result.readback.is_fresh
    True
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from web3 import Web3
from web3.logs import DISCARD

from .ContractUtility import ContractUtility
from .CrossbarClient import CrossbarClient
from .Deployments import Deployments
from .errors import ConfigError, InsufficientBalanceError, TransactionRevertedError
from .FeedQuote import FeedQuote, format_timestamp, format_value
from .NetworkConfig import NetworkConfig, load_networks
from .UpdateConfig import UpdateConfig

if TYPE_CHECKING:
    from web3.contract import Contract

logger = logging.getLogger(__name__)

SWITCHBOARD_ABI = "Switchboard"
CONSUMER_ABI = "SwitchBoardTest"


@dataclass(frozen=True)
class TransactionReceipt:
    """Confirmed update transaction.

    :ivar tx_hash: ``0x``-prefixed transaction hash.
    :ivar block_number: Block the transaction was included in.
    :ivar gas_used: Gas used by the transaction.
    :ivar status: 1 on success, 0 if the transaction reverted.
    """

    tx_hash: str
    block_number: int
    gas_used: int
    status: int

    @property
    def success(self) -> bool:
        return self.status == 1

    @classmethod
    def from_web3(cls, receipt: Any) -> TransactionReceipt:
        """Build from a web3 receipt mapping."""
        return cls(
            tx_hash=Web3.to_hex(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt["gasUsed"]),
            status=int(receipt["status"]),
        )


@dataclass(frozen=True)
class PriceReadback:
    """Price state of the consumer contract after the update.

    :ivar feed_id: Feed identifier.
    :ivar value: Stored value (18 decimals).
    :ivar timestamp: Timestamp of the stored value.
    :ivar slot: Slot number of the stored value.
    :ivar is_fresh: Whether the contract considers the price fresh.
    :ivar age: Age of the stored price in seconds.
    :ivar max_price_age: Max price age configured on-chain.
    :ivar max_deviation_bps: Max deviation configured on-chain (basis points).
    """

    feed_id: str
    value: int
    timestamp: int
    slot: int
    is_fresh: bool
    age: int
    max_price_age: int
    max_deviation_bps: int


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a successful update run."""

    quote: FeedQuote
    fee: int
    receipt: TransactionReceipt
    readback: PriceReadback


def format_native(amount: int, currency: str = "MON") -> str:
    """Format a wei amount in native token units."""
    return f"{format_value(amount)} {currency}"


def check_balance(balance: int, fee: int, currency: str = "MON") -> None:
    """Ensure the signer can pay the update fee.

    :param balance: Signer balance in wei.
    :param fee: Required fee in wei.
    :param currency: Native token symbol for the error message.
    :raises InsufficientBalanceError: If ``balance < fee``.
    """
    if balance < fee:
        raise InsufficientBalanceError(
            balance,
            fee,
            f"Insufficient balance. Need {format_native(fee, currency)}, "
            f"have {format_native(balance, currency)}",
        )


def check_chain_id(chain_id: int, network: NetworkConfig) -> None:
    """Ensure the RPC endpoint serves the selected network.

    Transactions are signed for the chain id the endpoint reports, so a
    mismatch would send the update to another chain.

    :param chain_id: Chain id reported by the RPC endpoint.
    :param network: Selected network config.
    :raises ConfigError: If the ids differ.
    """
    if chain_id != network.chain_id:
        raise ConfigError(
            f"RPC chain id {chain_id} does not match {network.key} ({network.chain_id})"
        )


@contextmanager
def step(number: int, title: str) -> Iterator[None]:
    """Log start and end of a workflow step."""
    logger.info("-" * 60)
    logger.info(f"STEP {number}: {title}")
    started = time.monotonic()
    try:
        yield
    except Exception:
        logger.error(f"STEP {number} failed: {title}")
        raise
    logger.info(f"STEP {number} done in {time.monotonic() - started:.2f}s")


class PriceUpdater:
    """Runs a single feed update against a consumer contract.

    :ivar config: Run configuration.
    :ivar networks: Known networks.
    :ivar crossbar: Crossbar client used to fetch quotes.
    """

    def __init__(
        self,
        config: UpdateConfig,
        networks: dict[str, NetworkConfig] | None = None,
        crossbar: CrossbarClient | None = None,
        contract_utility_factory: Callable[..., ContractUtility] = ContractUtility,
    ) -> None:
        """Initialize the updater.

        :param config: Run configuration.
        :param networks: Known networks (default: built-in table).
        :param crossbar: Optional Crossbar client. Created from
            ``config.crossbar_url`` if not provided.
        :param contract_utility_factory: Callable building the Web3 utility
            from ``(rpc_url, network, private_key)``.
        """
        self.config = config
        self.networks = networks if networks is not None else load_networks()
        self.crossbar = crossbar or CrossbarClient(config.crossbar_url)
        self.contract_utility_factory = contract_utility_factory

    def _contract(self, utility: ContractUtility, address: str, abi_name: str) -> Contract:
        return utility.w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=ContractUtility.get_abi(abi_name),
        )

    def run(self) -> UpdateResult:
        """Run the update workflow.

        :returns: UpdateResult of the confirmed update.
        :raises UpdateError: On validation, gateway, balance or revert
            failures. Errors of the underlying RPC calls propagate unchanged.
        """
        logger.info("=" * 60)
        logger.info("Switchboard Price Consumer - Update Prices")
        logger.info("=" * 60)

        with step(1, "Validating Configuration"):
            network = self.config.validate(self.networks)
        feed_id = self.config.feed_hash

        with step(2, "Loading Contract Addresses"):
            deployments = Deployments.load(self.config.deployments_path)
            consumer_address = deployments.address(
                network.deployment_key, self.config.contract_name
            )
            logger.info(f"Price Consumer: {consumer_address}")
            logger.info(f"Switchboard:    {network.switchboard}")

        with step(3, "Setting Up Provider and Signer"):
            utility = self.contract_utility_factory(
                self.config.rpc_url, network, self.config.private_key
            )
            check_chain_id(utility.w3.eth.chain_id, network)
            signer = utility.address
            switchboard = self._contract(utility, network.switchboard, SWITCHBOARD_ABI)
            consumer = self._contract(utility, consumer_address, CONSUMER_ABI)
            logger.info(f"Provider:       {self.config.rpc_url}")
            logger.info(f"Signer:         {signer}")

        with step(4, "Fetching Feed Data from Switchboard Crossbar"):
            quote = self.crossbar.fetch_oracle_quote(feed_id, self.config.crossbar_network)

        with step(5, "Calculating Required Fee"):
            fee = switchboard.functions.getFee([quote.encoded_bytes]).call()
            logger.info(f"Required fee:   {format_native(fee, network.currency)} ({fee} wei)")

        with step(6, "Checking Signer Balance"):
            balance = utility.w3.eth.get_balance(signer)
            logger.info(f"Balance:        {format_native(balance, network.currency)}")
            check_balance(balance, fee, network.currency)

        with step(7, "Submitting Update Transaction"):
            receipt = self._submit(utility, consumer, network, quote, fee)

        with step(8, "Verifying Price Update"):
            readback = self._verify(consumer, feed_id)

        logger.info("=" * 60)
        logger.info("Price Update Complete!")
        logger.info("=" * 60)
        return UpdateResult(quote=quote, fee=fee, receipt=receipt, readback=readback)

    def _submit(
        self,
        utility: ContractUtility,
        consumer: Contract,
        network: NetworkConfig,
        quote: FeedQuote,
        fee: int,
    ) -> TransactionReceipt:
        """Submit the update and wait for one confirmation.

        :raises TransactionRevertedError: If the receipt reports failure.
        """
        logger.info(f"Contract:       {consumer.address}")
        logger.info(f"Feed ID:        {quote.feed_id}")
        logger.info(f"Value:          {format_native(fee, network.currency)}")

        tx_params = {"from": utility.address, "value": fee, "chainId": network.chain_id}
        tx_hash = consumer.functions.updatePrices(
            [quote.encoded_bytes], [quote.feed_id]
        ).transact(tx_params)
        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f"Transaction submitted: {tx_hash_hex}")
        logger.info(f"Explorer:       {network.tx_url(tx_hash_hex)}")
        logger.info("Waiting for confirmation...")

        raw_receipt = utility.w3.eth.wait_for_transaction_receipt(tx_hash)
        receipt = TransactionReceipt.from_web3(raw_receipt)

        if not receipt.success:
            raise TransactionRevertedError(
                receipt.tx_hash,
                f"Transaction {receipt.tx_hash} reverted in block {receipt.block_number}. "
                f"See {network.tx_url(receipt.tx_hash)}",
            )

        logger.info(f"Transaction confirmed in block {receipt.block_number}")
        logger.info(f"Gas Used:       {receipt.gas_used}")
        logger.info(f"Explorer:       {network.tx_url(receipt.tx_hash)}")

        for event in consumer.events.PriceValidationFailed().process_receipt(
            raw_receipt, errors=DISCARD
        ):
            logger.warning(f"Price validation failed on-chain: {event['args']['reason']}")

        return receipt

    def _verify(self, consumer: Contract, feed_id: str) -> PriceReadback:
        """Read back the stored price state for the feed."""
        logger.info(f"Querying on-chain price data for feed: {feed_id}")

        value, timestamp, slot = consumer.functions.getPrice(feed_id).call()
        is_fresh = consumer.functions.isPriceFresh(feed_id).call()
        age = consumer.functions.getPriceAge(feed_id).call()
        max_price_age = consumer.functions.maxPriceAge().call()
        max_deviation_bps = consumer.functions.maxDeviationBps().call()

        readback = PriceReadback(
            feed_id=feed_id,
            value=int(value),
            timestamp=int(timestamp),
            slot=int(slot),
            is_fresh=bool(is_fresh),
            age=int(age),
            max_price_age=int(max_price_age),
            max_deviation_bps=int(max_deviation_bps),
        )

        logger.info(f"Value:          {format_value(readback.value)}")
        logger.info(f"Timestamp:      {format_timestamp(readback.timestamp)}")
        logger.info(f"Slot Number:    {readback.slot}")
        logger.info(f"Price Age:      {readback.age} seconds")
        logger.info(f"Max Price Age:  {readback.max_price_age} seconds")
        logger.info(f"Is Fresh:       {'yes' if readback.is_fresh else 'no'}")
        logger.info(
            f"Max Deviation:  {readback.max_deviation_bps} bps "
            f"({readback.max_deviation_bps / 100}%)"
        )

        if not readback.is_fresh:
            logger.warning(f"Stored price for {feed_id} is stale ({readback.age}s old)")
        if readback.max_price_age != self.config.max_price_age:
            logger.warning(
                f"On-chain maxPriceAge {readback.max_price_age}s differs from "
                f"configured MAX_PRICE_AGE {self.config.max_price_age}s"
            )
        if readback.max_deviation_bps != self.config.max_deviation_bps:
            logger.warning(
                f"On-chain maxDeviationBps {readback.max_deviation_bps} differs from "
                f"configured MAX_DEVIATION_BPS {self.config.max_deviation_bps}"
            )

        return readback
