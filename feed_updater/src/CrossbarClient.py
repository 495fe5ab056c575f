"""CrossbarClient: Fetches signed oracle quotes from Switchboard Crossbar.

Endpoint: {crossbar_url}/v2/fetch_quotes?feedHashes={hash}&network={cluster}
Rate Limit: Public (no key required)

The response is checked against the fields the update needs before it is
used:

.. code-block:: python

    {
        "timestamp": 1735689600,
        "slot": 312345678,
        "oracleResponses": [...],
        "medianResponses": [{"feedHash": "4cd1...", "value": "67012500000000000000000"}],
        "encoded": "0x..."
    }
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import CrossbarError, QuoteShapeError
from .FeedQuote import (
    FeedQuote,
    format_timestamp,
    format_value,
    normalize_feed_hash,
    strip_feed_hash,
)

logger = logging.getLogger(__name__)

QUOTE_PATH = "/v2/fetch_quotes"


def _require(
    data: dict, field: str, expected: type | tuple[type, ...], allow_empty: bool = False
) -> Any:
    """Return ``data[field]``, raising QuoteShapeError if it is absent or empty.

    With ``allow_empty`` only presence and type are checked.
    """
    value = data.get(field)
    if value is None or (not allow_empty and value in ("", [])):
        raise QuoteShapeError(field, f"No {field} in response")
    if not isinstance(value, expected) or isinstance(value, bool):
        raise QuoteShapeError(
            field, f"Field {field} has unexpected type {type(value).__name__}"
        )
    return value


def parse_quote(feed_id: str, data: Any) -> FeedQuote:
    """Validate a Crossbar quote response and convert it into a FeedQuote.

    :param feed_id: Canonical feed identifier the quote was requested for.
    :param data: Decoded JSON response.
    :returns: Parsed FeedQuote.
    :raises QuoteShapeError: If a required field is missing or malformed.
    """
    if isinstance(data, list):
        # Some gateway versions wrap single quotes in a list.
        if not data:
            raise QuoteShapeError("response", "Empty response")
        data = data[0]
    if not isinstance(data, dict):
        raise QuoteShapeError("response", f"Unexpected response type {type(data).__name__}")

    encoded = _require(data, "encoded", str)
    median_responses = _require(data, "medianResponses", list)
    oracle_responses = _require(data, "oracleResponses", list, allow_empty=True)
    timestamp = _require(data, "timestamp", (int, str))
    slot = _require(data, "slot", (int, str))

    median = median_responses[0]
    if not isinstance(median, dict) or median.get("value") in (None, ""):
        raise QuoteShapeError("medianResponses", "No median response in data")

    try:
        value = int(str(median["value"]))
    except ValueError as e:
        raise QuoteShapeError(
            "medianResponses", f"Invalid median value {median['value']!r}"
        ) from e

    try:
        timestamp = int(timestamp)
        slot = int(slot)
    except ValueError as e:
        raise QuoteShapeError("timestamp", f"Invalid timestamp/slot: {e}") from e

    if not encoded.startswith("0x"):
        encoded = "0x" + encoded
    try:
        bytes.fromhex(encoded[2:])
    except ValueError as e:
        raise QuoteShapeError("encoded", f"Encoded payload is not hex: {e}") from e

    return FeedQuote(
        feed_id=feed_id,
        value=value,
        timestamp=timestamp,
        slot=slot,
        num_oracles=len(oracle_responses),
        encoded=encoded,
    )


class CrossbarClient:
    """Client for the Switchboard Crossbar gateway.

    :cvar DEFAULT_URL: Public Crossbar instance.
    :cvar DEFAULT_TIMEOUT: HTTP request timeout in seconds.
    :ivar url: Gateway base URL.
    :ivar timeout: Request timeout in seconds.
    """

    DEFAULT_URL = "https://crossbar.switchboard.xyz"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        :param url: Gateway base URL.
        :param timeout: Request timeout in seconds (default: 30).
        :param transport: Optional httpx transport, e.g. for tests.
        """
        self.url = url.rstrip("/")
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.transport = transport

    def _get(self, path: str, params: dict) -> httpx.Response:
        """Make an HTTP GET request to the gateway.

        :param path: API endpoint path.
        :param params: Query parameters.
        :returns: HTTP response.
        :raises CrossbarError: On non-2xx response or network/timeout errors.
        """
        with httpx.Client(transport=self.transport, timeout=self.timeout) as client:
            try:
                logger.debug("GET %s params=%s", path, params)
                response = client.get(self.url + path, params=params)
            except httpx.TimeoutException as e:
                raise CrossbarError(f"Request timeout: {e}") from e
            except httpx.RequestError as e:
                raise CrossbarError(f"Request failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                path,
                response.status_code,
                response.text[:200],
            )
            raise CrossbarError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    def fetch_oracle_quote(self, feed_hash: str, network: str = "mainnet") -> FeedQuote:
        """Fetch a signed aggregated quote for one feed.

        :param feed_hash: Feed identifier, with or without ``0x`` prefix.
        :param network: Crossbar cluster (default: ``"mainnet"``).
        :returns: Parsed FeedQuote.
        :raises CrossbarError: If the request fails or the response lacks a
            required field. No retry is attempted.
        """
        feed_id = normalize_feed_hash(feed_hash)
        logger.info(f"Fetching oracle quote for {feed_id} from {self.url} ({network})")

        try:
            response = self._get(
                QUOTE_PATH,
                {"feedHashes": strip_feed_hash(feed_id), "network": network},
            )
            try:
                data = response.json()
            except ValueError as e:
                raise QuoteShapeError("response", f"Response is not JSON: {e}") from e
            quote = parse_quote(feed_id, data)
        except QuoteShapeError as e:
            logger.error(f"Error fetching feed data: {e}")
            raise QuoteShapeError(e.field, f"Failed to fetch feed data: {e}") from e
        except CrossbarError as e:
            logger.error(f"Error fetching feed data: {e}")
            raise CrossbarError(
                f"Failed to fetch feed data: {e}", status_code=e.status_code
            ) from e

        logger.info(f"Value:          {format_value(quote.value)}")
        logger.info(f"Timestamp:      {format_timestamp(quote.timestamp)}")
        logger.info(f"Slot Number:    {quote.slot}")
        logger.info(f"Oracles:        {quote.num_oracles}")
        logger.info(f"Encoded Length: {len(quote.encoded_bytes)} bytes")
        return quote
