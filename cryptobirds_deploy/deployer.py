"""Submit contract-creation and contract-call transactions from a local key."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from web3 import Web3

from .artifacts import CompiledArtifact
from .errors import FeeCeilingExceededError, TransactionFailedError
from .identity import DeploymentIdentity
from .retry import NO_RETRY, RetryPolicy

_LOGGER = logging.getLogger(__name__)


def connect(rpc_url: str) -> Web3:
    """Return a web3 handle speaking JSON-RPC over HTTP to ``rpc_url``."""

    return Web3(Web3.HTTPProvider(rpc_url))


def _hex(tx_hash: Any) -> str:
    return tx_hash if isinstance(tx_hash, str) else Web3.to_hex(tx_hash)


def _fee_per_gas(transaction: Dict[str, Any]) -> Optional[int]:
    for key in ("maxFeePerGas", "gasPrice"):
        value = transaction.get(key)
        if value is not None:
            return int(value, 16) if isinstance(value, str) else int(value)
    return None


class ContractDeployer:
    """Build, sign and send transactions for a :class:`DeploymentIdentity`.

    Gas and fee fields are left to web3's estimation. When ``max_fee_per_gas_wei``
    is set, any transaction whose fee per gas exceeds it is refused before it is
    signed. Only transport-level failures are retried, following ``retry``.
    """

    def __init__(
        self,
        identity: DeploymentIdentity,
        *,
        max_fee_per_gas_wei: Optional[int] = None,
        retry: RetryPolicy = NO_RETRY,
    ) -> None:
        self.identity = identity
        self.w3 = identity.w3
        self.max_fee_per_gas_wei = max_fee_per_gas_wei
        self.retry = retry

    def _check_fee_ceiling(self, transaction: Dict[str, Any]) -> None:
        if self.max_fee_per_gas_wei is None:
            return
        fee = _fee_per_gas(transaction)
        if fee is not None and fee > self.max_fee_per_gas_wei:
            raise FeeCeilingExceededError(
                f"Fee per gas {fee} wei exceeds the configured ceiling of {self.max_fee_per_gas_wei} wei"
            )

    def send(self, call: Any, value: int = 0) -> bytes:
        """Sign and submit ``call`` (a constructor or bound contract function).

        Returns the transaction hash without waiting for it to be mined. The
        nonce is reserved up front, so consecutive sends get increasing nonces
        and a retried submission reuses the same signed payload.
        """

        nonce = self.identity.nonces.reserve()
        params: Dict[str, Any] = {"from": self.identity.address, "nonce": nonce}
        if value:
            params["value"] = value

        try:
            transaction = self.retry.call(call.build_transaction, params)
            self._check_fee_ceiling(transaction)
            signed = self.identity.sign(transaction)
            tx_hash = self.retry.call(self.w3.eth.send_raw_transaction, signed.raw_transaction)
        except Exception:
            # Nothing was broadcast under this nonce.
            self.identity.nonces.release(nonce)
            raise

        _LOGGER.debug("Submitted %s with nonce %d", _hex(tx_hash), nonce)
        return tx_hash

    def wait(self, tx_hash: Any, *, timeout: float = 120) -> Any:
        """Block until ``tx_hash`` is mined; raise if it reverted."""

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        if receipt.get("status") == 0:
            raise TransactionFailedError(f"Transaction {_hex(tx_hash)} reverted", receipt)
        return receipt

    def transact(self, call: Any, value: int = 0) -> Any:
        return self.wait(self.send(call, value=value))

    def read(self, call: Any) -> Any:
        return self.retry.call(call.call)

    def submit_creation(self, artifact: CompiledArtifact, *constructor_args: Any) -> bytes:
        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.prefixed_bytecode)
        return self.send(factory.constructor(*constructor_args))

    def deployed_contract(self, artifact: CompiledArtifact, tx_hash: Any) -> Any:
        """Wait for the creation transaction and return the contract bound to its address."""

        receipt = self.wait(tx_hash)
        address = receipt.get("contractAddress")
        if not address:
            raise TransactionFailedError(
                f"Creation transaction {_hex(tx_hash)} returned no contract address", receipt
            )
        _LOGGER.info("Contract created at %s in block %s", address, receipt.get("blockNumber"))
        return self.w3.eth.contract(address=address, abi=artifact.abi)

    def deploy(self, artifact: CompiledArtifact, *constructor_args: Any) -> Any:
        return self.deployed_contract(artifact, self.submit_creation(artifact, *constructor_args))


__all__ = ["ContractDeployer", "connect"]
