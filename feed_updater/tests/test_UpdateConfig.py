"""Unit tests for UpdateConfig."""

import pytest

from feed_updater.src.errors import ConfigError
from feed_updater.src.NetworkConfig import DEFAULT_NETWORKS, NetworkConfig
from feed_updater.src.UpdateConfig import (
    DEFAULT_FEED_HASH,
    UpdateConfig,
    private_key_from_env,
    redact,
)

PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


class TestRedact:
    """Test credential redaction."""

    def test_keeps_first_six_and_last_four(self) -> None:
        assert redact(PRIVATE_KEY) == "0xac09...ff80"

    def test_short_secret_fully_hidden(self) -> None:
        assert redact("secret") == "******"


class TestPrivateKeyFromEnv:
    """Test credential lookup."""

    def test_primary_variable(self, monkeypatch) -> None:
        monkeypatch.setenv("PRIVATE_KEY", "0x01")
        monkeypatch.setenv("DEPLOYER_ACCOUNT_PRIV_KEY", "0x02")
        assert private_key_from_env() == "0x01"

    def test_fallback_variable(self, monkeypatch) -> None:
        monkeypatch.delenv("PRIVATE_KEY", raising=False)
        monkeypatch.setenv("DEPLOYER_ACCOUNT_PRIV_KEY", "0x02")
        assert private_key_from_env() == "0x02"

    def test_unset(self, monkeypatch) -> None:
        monkeypatch.delenv("PRIVATE_KEY", raising=False)
        monkeypatch.delenv("DEPLOYER_ACCOUNT_PRIV_KEY", raising=False)
        assert private_key_from_env() == ""


class TestUpdateConfigValidate:
    """Test configuration validation."""

    def test_defaults(self) -> None:
        """Defaults should match the documented values."""
        config = UpdateConfig()
        assert config.network == "monad-testnet"
        assert config.feed_hash == DEFAULT_FEED_HASH
        assert config.max_price_age == 300
        assert config.max_deviation_bps == 1000
        assert config.crossbar_network == "mainnet"

    def test_valid_returns_network(self) -> None:
        config = UpdateConfig(private_key=PRIVATE_KEY)
        network = config.validate(DEFAULT_NETWORKS)
        assert network is DEFAULT_NETWORKS["monad-testnet"]

    def test_rpc_defaults_to_network_endpoint(self) -> None:
        """Without an RPC URL the network's endpoint should be used."""
        config = UpdateConfig(private_key=PRIVATE_KEY)
        config.validate(DEFAULT_NETWORKS)
        assert config.rpc_url == "https://testnet-rpc.monad.xyz"

    def test_explicit_rpc_kept(self) -> None:
        config = UpdateConfig(private_key=PRIVATE_KEY, rpc_url="http://localhost:8545")
        config.validate(DEFAULT_NETWORKS)
        assert config.rpc_url == "http://localhost:8545"

    def test_missing_rpc(self) -> None:
        """A network without default endpoint needs RPC_URL."""
        networks = {
            "bare": NetworkConfig(
                key="bare",
                name="Bare",
                chain_id=1,
                explorer="https://explorer.example",
                switchboard="0x" + "11" * 20,
            )
        }
        config = UpdateConfig(network="bare", private_key=PRIVATE_KEY)
        with pytest.raises(ConfigError, match="RPC_URL environment variable is required"):
            config.validate(networks)

    def test_missing_private_key(self) -> None:
        with pytest.raises(ConfigError, match="PRIVATE_KEY environment variable is required"):
            UpdateConfig().validate(DEFAULT_NETWORKS)

    @pytest.mark.parametrize("private_key", ["not-a-key", "0x1234", "0x" + "zz" * 32])
    def test_malformed_private_key(self, private_key: str, caplog) -> None:
        """A malformed key should fail validation without echoing the key."""
        config = UpdateConfig(private_key=private_key)
        with pytest.raises(ConfigError, match="PRIVATE_KEY is not a valid hex key") as excinfo:
            config.validate(DEFAULT_NETWORKS)
        assert excinfo.value.__cause__ is None
        assert private_key not in str(excinfo.value)
        assert private_key not in caplog.text

    def test_unknown_network(self) -> None:
        config = UpdateConfig(network="nowhere", private_key=PRIVATE_KEY)
        with pytest.raises(ConfigError, match="Unknown network: nowhere"):
            config.validate(DEFAULT_NETWORKS)

    def test_feed_hash_normalized(self) -> None:
        config = UpdateConfig(private_key=PRIVATE_KEY, feed_hash=DEFAULT_FEED_HASH[2:].upper())
        config.validate(DEFAULT_NETWORKS)
        assert config.feed_hash == DEFAULT_FEED_HASH

    def test_invalid_feed_hash(self) -> None:
        config = UpdateConfig(private_key=PRIVATE_KEY, feed_hash="0x1234")
        with pytest.raises(ConfigError, match="Invalid feed hash"):
            config.validate(DEFAULT_NETWORKS)

    def test_invalid_thresholds(self) -> None:
        with pytest.raises(ConfigError, match="MAX_PRICE_AGE must be positive"):
            UpdateConfig(private_key=PRIVATE_KEY, max_price_age=0).validate(DEFAULT_NETWORKS)
        with pytest.raises(ConfigError, match="MAX_DEVIATION_BPS must not be negative"):
            UpdateConfig(private_key=PRIVATE_KEY, max_deviation_bps=-1).validate(DEFAULT_NETWORKS)

    def test_private_key_never_logged(self, caplog) -> None:
        """Logged output should only contain the redacted key."""
        caplog.set_level("INFO")
        config = UpdateConfig(private_key=PRIVATE_KEY)
        config.validate(DEFAULT_NETWORKS)
        assert PRIVATE_KEY not in caplog.text
        assert "0xac09...ff80" in caplog.text
        assert PRIVATE_KEY not in repr(config)
