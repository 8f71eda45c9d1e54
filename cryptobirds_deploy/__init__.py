"""Compile the CryptoBirds contract with solc and deploy it over JSON-RPC."""
from __future__ import annotations

from .artifacts import CompiledArtifact, default_artifact_candidates, load_artifact, write_artifact
from .compiler import compile_contract, compile_from_config
from .config import CompileConfig, DeployConfig, load_compile_config, load_deploy_config
from .deployer import ContractDeployer, connect
from .errors import (
    ArtifactExtractionError,
    ArtifactFormatError,
    ArtifactNotFoundError,
    CompilationError,
    ConfigurationError,
    DeploymentToolError,
    FeeCeilingExceededError,
    TransactionFailedError,
)
from .identity import DeploymentIdentity, NonceManager
from .runner import DeploymentResult, run_deployment

__all__ = [
    "ArtifactExtractionError",
    "ArtifactFormatError",
    "ArtifactNotFoundError",
    "CompilationError",
    "CompileConfig",
    "CompiledArtifact",
    "ConfigurationError",
    "ContractDeployer",
    "DeployConfig",
    "DeploymentIdentity",
    "DeploymentResult",
    "DeploymentToolError",
    "FeeCeilingExceededError",
    "NonceManager",
    "TransactionFailedError",
    "compile_contract",
    "compile_from_config",
    "connect",
    "default_artifact_candidates",
    "load_artifact",
    "load_compile_config",
    "load_deploy_config",
    "run_deployment",
    "write_artifact",
]
