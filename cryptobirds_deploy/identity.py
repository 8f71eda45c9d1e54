"""Signing identity with locally managed transaction nonces."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Set, TYPE_CHECKING

from eth_account import Account
from eth_keys.exceptions import ValidationError

from .errors import ConfigurationError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from eth_account.signers.local import LocalAccount
    from web3 import Web3

_LOGGER = logging.getLogger(__name__)


class NonceManager:
    """Hand out unique nonces for one address.

    The first reservation reads the pending transaction count from the node;
    later reservations increment a local counter under a lock, so several
    transactions can be in flight without waiting for each other to be mined.
    A reservation that was never broadcast goes back through :meth:`release`
    and is handed out again before the counter moves on.
    """

    def __init__(self, fetch_count: Callable[[], int]) -> None:
        self._fetch_count = fetch_count
        self._next: Optional[int] = None
        self._released: Set[int] = set()
        self._lock = threading.Lock()

    def reserve(self) -> int:
        with self._lock:
            if self._released:
                nonce = min(self._released)
                self._released.discard(nonce)
                return nonce
            if self._next is None:
                self._next = int(self._fetch_count())
                _LOGGER.debug("Nonce counter synced at %d", self._next)
            nonce = self._next
            self._next += 1
            return nonce

    def release(self, nonce: int) -> None:
        """Give back a reservation that was never broadcast.

        Releasing the newest reservation rewinds the counter. An older one is
        kept aside for the next :meth:`reserve`, so nonces still held by other
        senders are never handed out twice.
        """

        with self._lock:
            if self._next is None or nonce >= self._next:
                return
            self._released.add(nonce)
            while self._next - 1 in self._released:
                self._next -= 1
                self._released.discard(self._next)

    def reset(self) -> None:
        """Forget the local counter; the next :meth:`reserve` resyncs with the node.

        Only safe when no reservation is outstanding.
        """

        with self._lock:
            self._next = None
            self._released.clear()


class DeploymentIdentity:
    """A local signing account bound to a web3 connection."""

    def __init__(self, w3: "Web3", account: "LocalAccount", nonces: NonceManager | None = None) -> None:
        self.w3 = w3
        self.account = account
        self.nonces = nonces or NonceManager(
            lambda: w3.eth.get_transaction_count(account.address, "pending")
        )

    @classmethod
    def from_private_key(cls, w3: "Web3", private_key: str) -> "DeploymentIdentity":
        return cls(w3, load_account(private_key))

    @property
    def address(self) -> str:
        return self.account.address

    def balance(self) -> int:
        return self.w3.eth.get_balance(self.address)

    def sign(self, transaction: dict[str, Any]) -> Any:
        return self.account.sign_transaction(transaction)


def load_account(private_key: str) -> "LocalAccount":
    """Derive an eth-account ``LocalAccount`` from a hex private key.

    Raises:
        ConfigurationError: If the key is not a valid secp256k1 private key.
    """

    try:
        return Account.from_key(private_key)
    except (ValidationError, ValueError, TypeError) as exc:
        raise ConfigurationError("PRIVATE_KEY is not a valid private key") from exc


__all__ = ["DeploymentIdentity", "NonceManager", "load_account"]
