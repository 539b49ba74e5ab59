"""Tests for configuration loading."""

from pathlib import Path

import pytest

from oneshot_agent.config import (
    AppConfig,
    OneShotConfig,
    WalletConfig,
    load_config,
    resolve_config,
    save_config,
)
from oneshot_agent.exceptions import ConfigurationError
from oneshot_agent.wallet.keystore import create_keystore, keystore_address, load_account, unlock_keystore

from conftest import TEST_PRIVATE_KEY


def test_yaml_values_expand_environment(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("ONESHOT_TEST_SECRET", "s3cret")
    path = tmp_path / "oneshot-agent.yaml"
    path.write_text(
        "oneshot:\n"
        "  api_key: key\n"
        "  api_secret: ${ONESHOT_TEST_SECRET}\n"
        "  business_id: biz\n"
        "polling:\n"
        "  max_attempts: 10\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.oneshot.api_secret == "s3cret"
    assert config.polling.max_attempts == 10
    assert config.polling.interval_seconds == 2.0
    config.oneshot.require_credentials()


def test_unresolved_placeholder_fails_credential_check():
    config = OneShotConfig(api_key="key", api_secret="${MISSING_SECRET}", business_id="biz")

    with pytest.raises(ConfigurationError, match="api_secret"):
        config.require_credentials()


def test_resolve_falls_back_to_environment(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ONESHOT_AGENT_CONFIG", raising=False)
    monkeypatch.setenv("ONESHOT_API_KEY", "env-key")
    monkeypatch.setenv("ONESHOT_BUSINESS_ID", "env-biz")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("NETWORK_ID", "base")

    config = resolve_config()

    assert config.oneshot.api_key == "env-key"
    assert config.oneshot.business_id == "env-biz"
    assert config.llm.openai.api_key == "sk-env"
    assert config.llm.openai.model == "gpt-4o-mini"
    assert config.wallet.chain == "base"


def test_resolve_missing_explicit_file(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        resolve_config(tmp_path / "nope.yaml")


def test_save_then_load(tmp_path: Path):
    config = AppConfig()
    config.server.port = 9000
    path = tmp_path / "out" / "oneshot-agent.yaml"

    save_config(config, path)

    assert load_config(path).server.port == 9000


def test_keystore_create_and_unlock(tmp_path: Path):
    address = create_keystore(tmp_path, "pw")

    assert keystore_address(tmp_path) == address
    assert unlock_keystore(tmp_path, "pw").address == address
    with pytest.raises(FileExistsError):
        create_keystore(tmp_path, "pw")


def test_private_key_wins_over_keystore(tmp_path: Path, account):
    create_keystore(tmp_path, "pw")
    wallet = WalletConfig(private_key=TEST_PRIVATE_KEY, keystore_dir=str(tmp_path), keystore_password="pw")

    assert load_account(wallet).address == account.address


def test_no_key_configured():
    with pytest.raises(ConfigurationError):
        load_account(WalletConfig())


def test_placeholder_key_is_not_a_signing_key(tmp_path: Path):
    assert not WalletConfig(private_key="${PRIVATE_KEY}").has_signing_key
    assert not WalletConfig(keystore_dir="${KEYSTORE}").has_signing_key
    assert WalletConfig(private_key=TEST_PRIVATE_KEY).has_signing_key
    assert WalletConfig(keystore_dir=str(tmp_path)).has_signing_key
