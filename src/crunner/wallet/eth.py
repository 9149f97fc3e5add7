"""
ECDSA / secp256k1 signing for setter calls.

The key is read from ``CRUNNER_SETTER_SECRETKEY`` (process environment or
``~/.crunner/.env``). It is never written anywhere.

Dependencies: eth-account (lightweight, no full web3.py needed)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .. import config
from ..codec import add_0x
from ..errors import SigningError


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load the setter private key from the environment or .env file.

    Args:
        env_path: Path to .env file (default: ~/.crunner/.env)

    Returns:
        0x-prefixed hex private key

    Raises:
        ValueError: If CRUNNER_SETTER_SECRETKEY is not set
    """
    config.load_env_file(env_path)

    private_key = os.environ.get(config.SECRET_KEY_VAR)
    if not private_key:
        raise ValueError(
            f"{config.SECRET_KEY_VAR} not found. Set it in the environment "
            f"or in {env_path or config.CRUNNER_ENV}"
        )
    return add_0x(private_key.strip())


def get_account(private_key: str) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    Raises:
        SigningError: If the key is not a valid secp256k1 private key
    """
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as exc:
        raise SigningError(f"Invalid {config.SECRET_KEY_VAR}: {exc}") from exc


class LocalSigner:
    """
    Opaque signer handed to the dispatcher for Set calls.

    The key is only parsed on first use of ``address`` or
    ``sign_transaction``, which raise SigningError for a bad key.
    """

    def __init__(self, private_key: str) -> None:
        self._private_key = private_key
        self._cached_account: Optional[LocalAccount] = None

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "LocalSigner":
        return cls(load_private_key(env_path))

    @property
    def _account(self) -> LocalAccount:
        if self._cached_account is None:
            self._cached_account = get_account(self._private_key)
        return self._cached_account

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, tx: dict[str, Any]) -> str:
        """
        Sign a transaction dict.

        Returns:
            0x-prefixed hex encoded signed raw transaction

        Raises:
            SigningError: If eth-account rejects the transaction
        """
        try:
            signed = self._account.sign_transaction(tx)
        except (ValueError, TypeError, KeyError) as exc:
            raise SigningError(f"Failed to sign transaction: {exc}") from exc
        return add_0x(signed.raw_transaction.hex())
