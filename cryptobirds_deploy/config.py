"""Settings for the compile and deploy scripts.

Both entry points resolve their configuration exactly once, from the process
environment (after ``load_dotenv``) or from an explicit mapping, and pass the
resulting dataclass down to the components that need it.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_CONTRACT_NAME = "CryptoBirdsContract"
DEFAULT_ARTIFACT_DIR = Path("artifacts")
DEFAULT_SOLC_VERSION = "0.8.24"
DEFAULT_OPTIMIZER_RUNS = 200
DEFAULT_TOKEN_URI = "ipfs://cryptobirds/1"
DEFAULT_RPC_MAX_ATTEMPTS = 3
DEFAULT_RPC_RETRY_WAIT_SECONDS = 1.0

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _get_env() -> Mapping[str, str]:
    """Expose ``os.environ`` separately to simplify testing."""

    load_dotenv()
    return os.environ


def _resolve(root: Path, value: str | Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def _parse_int(env: Mapping[str, str], key: str, default: int, *, minimum: int) -> int:
    raw = env.get(key)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{key} must be at least {minimum}, got {value}")
    return value


def _parse_float(env: Mapping[str, str], key: str, default: Optional[float]) -> Optional[float]:
    raw = env.get(key)
    if raw in (None, ""):
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{key} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class CompileConfig:
    """Inputs of the Compiler Adapter."""

    source_path: Path
    contract_name: str
    artifact_dir: Path
    solc_version: str = DEFAULT_SOLC_VERSION
    optimizer_runs: int = DEFAULT_OPTIMIZER_RUNS

    @property
    def artifact_path(self) -> Path:
        return self.artifact_dir / f"{self.contract_name}.json"


@dataclass(frozen=True)
class DeployConfig:
    """Inputs of the Deployment Runner.

    ``private_key`` is the only required value. ``max_fee_per_gas_gwei`` is an
    optional ceiling; when it is ``None`` web3's estimate is used unbounded.
    """

    private_key: str = field(repr=False)
    rpc_url: str = DEFAULT_RPC_URL
    contract_name: str = DEFAULT_CONTRACT_NAME
    project_root: Path = PROJECT_ROOT
    max_fee_per_gas_gwei: Optional[float] = None
    rpc_max_attempts: int = DEFAULT_RPC_MAX_ATTEMPTS
    rpc_retry_wait_seconds: float = DEFAULT_RPC_RETRY_WAIT_SECONDS
    token_uri: str = DEFAULT_TOKEN_URI


def load_compile_config(env: Mapping[str, str] | None = None, *, root: Path = PROJECT_ROOT) -> CompileConfig:
    """Build a :class:`CompileConfig` from ``env`` (defaults to the process environment)."""

    if env is None:
        env = _get_env()

    contract_name = env.get("CONTRACT_NAME") or DEFAULT_CONTRACT_NAME
    source = env.get("CONTRACT_SOURCE") or Path("contracts") / f"{contract_name}.sol"
    return CompileConfig(
        source_path=_resolve(root, source),
        contract_name=contract_name,
        artifact_dir=_resolve(root, env.get("ARTIFACT_DIR") or DEFAULT_ARTIFACT_DIR),
        solc_version=env.get("SOLC_VERSION") or DEFAULT_SOLC_VERSION,
        optimizer_runs=_parse_int(env, "SOLC_OPTIMIZER_RUNS", DEFAULT_OPTIMIZER_RUNS, minimum=1),
    )


def load_deploy_config(env: Mapping[str, str] | None = None, *, root: Path = PROJECT_ROOT) -> DeployConfig:
    """Build a :class:`DeployConfig` from ``env`` (defaults to the process environment).

    Raises
    ------
    ConfigurationError
        If ``PRIVATE_KEY`` is absent or any numeric setting is malformed.
    """

    if env is None:
        env = _get_env()

    private_key = env.get("PRIVATE_KEY")
    if not private_key:
        raise ConfigurationError("Missing PRIVATE_KEY in environment or .env")

    return DeployConfig(
        private_key=private_key,
        rpc_url=env.get("RPC_URL") or DEFAULT_RPC_URL,
        contract_name=env.get("CONTRACT_NAME") or DEFAULT_CONTRACT_NAME,
        project_root=root,
        max_fee_per_gas_gwei=_parse_float(env, "MAX_FEE_PER_GAS_GWEI", None),
        rpc_max_attempts=_parse_int(env, "RPC_MAX_ATTEMPTS", DEFAULT_RPC_MAX_ATTEMPTS, minimum=1),
        rpc_retry_wait_seconds=_parse_float(env, "RPC_RETRY_WAIT_SECONDS", DEFAULT_RPC_RETRY_WAIT_SECONDS),
        token_uri=env.get("SAMPLE_TOKEN_URI") or DEFAULT_TOKEN_URI,
    )


def configure_logging(level: str | None = None) -> None:
    level = level or os.getenv("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


__all__ = [
    "CompileConfig",
    "DeployConfig",
    "PROJECT_ROOT",
    "configure_logging",
    "load_compile_config",
    "load_deploy_config",
]
