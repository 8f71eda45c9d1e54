"""Deploy the compiled contract, mint one sample token and read it back."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from web3 import Web3

from .artifacts import default_artifact_candidates, load_artifact
from .config import DeployConfig
from .deployer import ContractDeployer, connect
from .identity import DeploymentIdentity, load_account
from .retry import RetryPolicy

_LOGGER = logging.getLogger(__name__)

SAMPLE_TOKEN_ID = 1


@dataclass(frozen=True)
class DeploymentResult:
    """Everything the runner reports; none of it is written to disk."""

    address: str
    deploy_tx_hash: str
    mint_tx_hash: str
    owner: str
    token_uri: str


def retry_policy_for(config: DeployConfig) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=config.rpc_max_attempts,
        initial_wait=config.rpc_retry_wait_seconds,
    )


def build_deployer(w3: Web3, config: DeployConfig, identity: Optional[DeploymentIdentity] = None) -> ContractDeployer:
    if identity is None:
        identity = DeploymentIdentity(w3, load_account(config.private_key))
    ceiling = None
    if config.max_fee_per_gas_gwei is not None:
        ceiling = int(Web3.to_wei(config.max_fee_per_gas_gwei, "gwei"))
    return ContractDeployer(identity, max_fee_per_gas_wei=ceiling, retry=retry_policy_for(config))


def mint_sample_token(deployer: ContractDeployer, contract: Any, recipient: str, token_uri: str) -> str:
    """Mint one token to ``recipient`` and return the mined transaction hash."""

    receipt = deployer.transact(contract.functions.safeMint(recipient, token_uri))
    return Web3.to_hex(receipt["transactionHash"])


def run_deployment(
    config: DeployConfig,
    *,
    w3: Optional[Web3] = None,
    candidates: Optional[Sequence[Path]] = None,
    out: Callable[[str], None] = print,
) -> DeploymentResult:
    """Run the whole deploy pipeline described by ``config``.

    The account is derived before any connection is made, so a bad key fails
    without touching the network. The RPC URL is printed only when the
    connection is opened here rather than passed in as ``w3``. Each step
    depends on the previous one; the first failure propagates and nothing is
    rolled back.
    """

    account = load_account(config.private_key)
    if candidates is None:
        candidates = default_artifact_candidates(config.project_root, config.contract_name)
    artifact = load_artifact(candidates)

    if w3 is None:
        w3 = connect(config.rpc_url)
        out(f"RPC: {config.rpc_url}")
    identity = DeploymentIdentity(w3, account)
    deployer = build_deployer(w3, config, identity)

    out(f"Deployer: {identity.address}")
    out(f"Balance: {deployer.retry.call(identity.balance)}")

    deploy_tx_hash = Web3.to_hex(deployer.submit_creation(artifact))
    out(f"Deploy tx hash: {deploy_tx_hash}")
    contract = deployer.deployed_contract(artifact, deploy_tx_hash)
    out(f"✓ Deployed at: {contract.address}")

    mint_tx_hash = mint_sample_token(deployer, contract, identity.address, config.token_uri)
    out(f"✓ Minted token #{SAMPLE_TOKEN_ID} to deployer (tx {mint_tx_hash})")

    owner = deployer.read(contract.functions.ownerOf(SAMPLE_TOKEN_ID))
    token_uri = deployer.read(contract.functions.tokenURI(SAMPLE_TOKEN_ID))
    out(f"Token #{SAMPLE_TOKEN_ID} owner: {owner}")
    out(f"Token #{SAMPLE_TOKEN_ID} URI  : {token_uri}")

    return DeploymentResult(
        address=contract.address,
        deploy_tx_hash=deploy_tx_hash,
        mint_tx_hash=mint_tx_hash,
        owner=owner,
        token_uri=token_uri,
    )


__all__ = [
    "DeploymentResult",
    "SAMPLE_TOKEN_ID",
    "build_deployer",
    "mint_sample_token",
    "retry_policy_for",
    "run_deployment",
]
