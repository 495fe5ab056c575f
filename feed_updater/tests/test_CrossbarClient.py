"""Unit tests for CrossbarClient."""

import httpx
import pytest

from feed_updater.src.CrossbarClient import CrossbarClient, parse_quote
from feed_updater.src.errors import CrossbarError, QuoteShapeError

BTC_USD = "0x4cd1cad962425681af07b9254b7d804de3ca3446fbfd1371bb258d2c75059812"


def quote_response(**overrides) -> dict:
    """Build a Crossbar quote response for BTC/USD."""
    data = {
        "timestamp": 1_735_689_600,
        "slot": 312_345_678,
        "oracleResponses": [{"oracle": "a"}, {"oracle": "b"}, {"oracle": "c"}],
        "medianResponses": [
            {"feedHash": BTC_USD[2:], "value": "67012500000000000000000"}
        ],
        "encoded": "0x" + "ab" * 64,
    }
    data.update(overrides)
    return data


def make_client(handler) -> CrossbarClient:
    return CrossbarClient("https://crossbar.test/", transport=httpx.MockTransport(handler))


class TestParseQuote:
    """Test response schema validation."""

    def test_valid_response(self) -> None:
        quote = parse_quote(BTC_USD, quote_response())
        assert quote.feed_id == BTC_USD
        assert quote.value == 67_012_500_000_000_000_000_000
        assert quote.timestamp == 1_735_689_600
        assert quote.slot == 312_345_678
        assert quote.num_oracles == 3
        assert quote.encoded_bytes == bytes.fromhex("ab" * 64)

    def test_list_wrapped_response(self) -> None:
        """A single quote wrapped in a list should be accepted."""
        quote = parse_quote(BTC_USD, [quote_response()])
        assert quote.slot == 312_345_678

    def test_encoded_without_prefix(self) -> None:
        quote = parse_quote(BTC_USD, quote_response(encoded="ab" * 4))
        assert quote.encoded == "0x" + "ab" * 4

    def test_missing_encoded(self) -> None:
        data = quote_response()
        del data["encoded"]
        with pytest.raises(QuoteShapeError, match="No encoded in response") as excinfo:
            parse_quote(BTC_USD, data)
        assert excinfo.value.field == "encoded"

    def test_empty_oracle_responses(self) -> None:
        """An empty oracle list is accepted and counted as zero oracles."""
        quote = parse_quote(BTC_USD, quote_response(oracleResponses=[]))
        assert quote.num_oracles == 0

    def test_missing_oracle_responses(self) -> None:
        data = quote_response()
        del data["oracleResponses"]
        with pytest.raises(QuoteShapeError, match="No oracleResponses in response"):
            parse_quote(BTC_USD, data)

    def test_empty_median_responses(self) -> None:
        """No median response should name the missing field."""
        with pytest.raises(QuoteShapeError, match="medianResponses") as excinfo:
            parse_quote(BTC_USD, quote_response(medianResponses=[]))
        assert excinfo.value.field == "medianResponses"

    def test_median_without_value(self) -> None:
        with pytest.raises(QuoteShapeError, match="No median response in data"):
            parse_quote(BTC_USD, quote_response(medianResponses=[{"feedHash": "x"}]))

    def test_invalid_median_value(self) -> None:
        with pytest.raises(QuoteShapeError, match="Invalid median value"):
            parse_quote(BTC_USD, quote_response(medianResponses=[{"value": "1.5"}]))

    def test_missing_slot(self) -> None:
        data = quote_response()
        del data["slot"]
        with pytest.raises(QuoteShapeError, match="No slot in response"):
            parse_quote(BTC_USD, data)

    def test_wrong_type(self) -> None:
        with pytest.raises(QuoteShapeError, match="unexpected type"):
            parse_quote(BTC_USD, quote_response(oracleResponses="three"))

    def test_encoded_not_hex(self) -> None:
        with pytest.raises(QuoteShapeError, match="not hex"):
            parse_quote(BTC_USD, quote_response(encoded="0xzz"))

    def test_not_an_object(self) -> None:
        with pytest.raises(QuoteShapeError, match="Unexpected response type"):
            parse_quote(BTC_USD, "oops")


class TestFetchOracleQuote:
    """Test quote retrieval over HTTP."""

    def test_request_parameters(self) -> None:
        """Feed hash should be sent without prefix on the requested cluster."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=quote_response())

        quote = make_client(handler).fetch_oracle_quote(BTC_USD, "mainnet")

        assert quote.feed_id == BTC_USD
        assert len(seen) == 1
        request = seen[0]
        assert request.url.host == "crossbar.test"
        assert request.url.path == "/v2/fetch_quotes"
        assert request.url.params["feedHashes"] == BTC_USD[2:]
        assert request.url.params["network"] == "mainnet"

    def test_unprefixed_feed_hash(self) -> None:
        """Unprefixed identifiers should be normalized on the quote."""
        client = make_client(lambda request: httpx.Response(200, json=quote_response()))
        quote = client.fetch_oracle_quote(BTC_USD[2:].upper())
        assert quote.feed_id == BTC_USD

    def test_missing_median_response_is_wrapped(self) -> None:
        """Shape errors should be prefixed with the failing step."""
        client = make_client(
            lambda request: httpx.Response(200, json=quote_response(medianResponses=[]))
        )
        with pytest.raises(QuoteShapeError, match="^Failed to fetch feed data: ") as excinfo:
            client.fetch_oracle_quote(BTC_USD)
        assert excinfo.value.field == "medianResponses"

    def test_http_error(self) -> None:
        client = make_client(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(CrossbarError, match="Failed to fetch feed data: HTTP 503") as excinfo:
            client.fetch_oracle_quote(BTC_USD)
        assert excinfo.value.status_code == 503

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CrossbarError, match="Request failed"):
            make_client(handler).fetch_oracle_quote(BTC_USD)

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(CrossbarError, match="Request timeout"):
            make_client(handler).fetch_oracle_quote(BTC_USD)

    def test_non_json_body(self) -> None:
        client = make_client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(QuoteShapeError, match="not JSON"):
            client.fetch_oracle_quote(BTC_USD)

    def test_single_request_no_retry(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500, text="boom")

        with pytest.raises(CrossbarError):
            make_client(handler).fetch_oracle_quote(BTC_USD)
        assert len(calls) == 1
