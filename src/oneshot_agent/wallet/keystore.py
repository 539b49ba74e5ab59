"""Loading the local signing key from config or an encrypted keystore."""

from __future__ import annotations

import json
from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount

from oneshot_agent.config import WalletConfig, is_unresolved
from oneshot_agent.exceptions import ConfigurationError, SigningIdentityUnavailable

KEYSTORE_FILE = "keystore.json"


def create_keystore(keystore_dir: Path, password: str) -> str:
    """Generate a new keypair and write it as an encrypted keystore file.

    Returns the checksummed address of the new key.

    Raises
    ------
    FileExistsError
        If a keystore already exists in *keystore_dir*.
    """
    keystore_path = keystore_dir / KEYSTORE_FILE
    if keystore_path.exists():
        raise FileExistsError(
            f"Keystore already exists at {keystore_path}. "
            "Delete it first if you want to create a new one."
        )

    acct = Account.create()
    encrypted = Account.encrypt(acct.key, password)

    keystore_dir.mkdir(parents=True, exist_ok=True)
    keystore_path.write_text(json.dumps(encrypted, indent=2), encoding="utf-8")
    return acct.address


def keystore_address(keystore_dir: Path) -> str | None:
    """Read the address from a keystore without decrypting it."""
    keystore_path = keystore_dir / KEYSTORE_FILE
    if not keystore_path.exists():
        return None

    data = json.loads(keystore_path.read_text(encoding="utf-8"))
    raw_address = data.get("address", "")
    if not raw_address.startswith("0x"):
        raw_address = "0x" + raw_address
    from web3 import Web3

    return Web3.to_checksum_address(raw_address)


def unlock_keystore(keystore_dir: Path, password: str) -> LocalAccount:
    """Decrypt the keystore in *keystore_dir* into a usable account."""
    keystore_path = keystore_dir / KEYSTORE_FILE
    if not keystore_path.exists():
        raise SigningIdentityUnavailable(f"No keystore found at {keystore_path}")

    data = json.loads(keystore_path.read_text(encoding="utf-8"))
    try:
        key = Account.decrypt(data, password)
    except ValueError as exc:
        raise SigningIdentityUnavailable(f"Failed to decrypt keystore: {exc}") from exc
    return Account.from_key(key)


def load_account(config: WalletConfig) -> LocalAccount:
    """Resolve the configured signing key.

    A raw ``private_key`` wins over a keystore directory.
    """
    if not is_unresolved(config.private_key):
        try:
            return Account.from_key(config.private_key)
        except (ValueError, TypeError) as exc:
            raise ConfigurationError(f"wallet.private_key is not a valid key: {exc}") from exc
    if config.keystore_dir and not is_unresolved(config.keystore_dir):
        return unlock_keystore(Path(config.keystore_dir).expanduser(), config.keystore_password)
    raise ConfigurationError(
        "No signing key configured. Set wallet.private_key (or PRIVATE_KEY) "
        "or wallet.keystore_dir."
    )
