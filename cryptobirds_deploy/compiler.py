"""Compile one Solidity source through solc's standard-JSON interface."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .artifacts import CompiledArtifact
from .config import CompileConfig
from .errors import ArtifactExtractionError, CompilationError

_LOGGER = logging.getLogger(__name__)

OUTPUT_SELECTION: Sequence[str] = ("abi", "evm.bytecode.object")

Compiler = Callable[[Dict[str, Any]], Mapping[str, Any]]
Diagnostic = Mapping[str, Any]


def build_standard_input(source_name: str, source: str, *, optimizer_runs: int) -> Dict[str, Any]:
    """Return the solc standard-JSON request for a single source file."""

    return {
        "language": "Solidity",
        "sources": {source_name: {"content": source}},
        "settings": {
            "optimizer": {"enabled": True, "runs": optimizer_runs},
            "outputSelection": {"*": {"*": list(OUTPUT_SELECTION)}},
        },
    }


def solcx_compiler(solc_version: str) -> Compiler:
    """Return a compiler callable backed by py-solc-x at ``solc_version``.

    The requested solc release is downloaded on first use.
    """

    import solcx
    from solcx.exceptions import SolcError

    def _compile(standard_input: Dict[str, Any]) -> Mapping[str, Any]:
        installed = {str(version) for version in solcx.get_installed_solc_versions()}
        if solc_version not in installed:
            _LOGGER.info("Installing solc %s", solc_version)
            solcx.install_solc(solc_version)
        try:
            return solcx.compile_standard(standard_input, solc_version=solc_version)
        except SolcError as exc:
            # compile_standard raises on fatal diagnostics before returning the output.
            diagnostics = [{"severity": "error", "formattedMessage": exc.message}]
            raise CompilationError(f"solc {solc_version} reported errors", diagnostics) from exc

    return _compile


def format_diagnostic(diagnostic: Diagnostic) -> str:
    message = diagnostic.get("formattedMessage") or diagnostic.get("message") or str(dict(diagnostic))
    return str(message).rstrip()


def split_diagnostics(output: Mapping[str, Any]) -> Tuple[List[Diagnostic], List[Diagnostic]]:
    """Partition ``output["errors"]`` into ``(errors, warnings)``.

    Anything whose severity is not ``error`` (warnings, infos) counts as non-fatal.
    """

    errors: List[Diagnostic] = []
    warnings: List[Diagnostic] = []
    for diagnostic in output.get("errors") or ():
        if diagnostic.get("severity") == "error":
            errors.append(diagnostic)
        else:
            warnings.append(diagnostic)
    return errors, warnings


def extract_artifact(output: Mapping[str, Any], source_name: str, contract_name: str) -> CompiledArtifact:
    """Pull one contract's ABI and creation bytecode out of the compiler output."""

    contracts = output.get("contracts") or {}
    by_name = contracts.get(source_name)
    if not isinstance(by_name, Mapping):
        raise ArtifactExtractionError(
            f"Compiler output has no contracts for {source_name!r} "
            f"(sources: {sorted(contracts) or 'none'})"
        )

    compiled = by_name.get(contract_name)
    if not isinstance(compiled, Mapping):
        raise ArtifactExtractionError(
            f"Contract {contract_name!r} not found in {source_name!r} "
            f"(available: {sorted(by_name) or 'none'})"
        )

    bytecode = compiled.get("evm", {}).get("bytecode", {}).get("object", "")
    return CompiledArtifact.from_mapping(
        {"abi": compiled.get("abi"), "bytecode": bytecode},
        source=f"{source_name}:{contract_name}",
    )


def compile_contract(
    source_path: Path,
    contract_name: str,
    *,
    optimizer_runs: int,
    compiler: Compiler,
) -> CompiledArtifact:
    """Compile ``source_path`` and return the artifact for ``contract_name``.

    Raises:
        CompilationError: If any diagnostic has ``error`` severity.
        ArtifactExtractionError: If ``contract_name`` is not in the output.
    """

    source_path = Path(source_path)
    source = source_path.read_text(encoding="utf-8")
    source_name = source_path.name

    output = compiler(build_standard_input(source_name, source, optimizer_runs=optimizer_runs))

    errors, warnings = split_diagnostics(output)
    if errors:
        raise CompilationError(
            f"Compilation of {source_name} failed with {len(errors)} error(s)",
            errors + warnings,
        )
    for warning in warnings:
        _LOGGER.warning("%s", format_diagnostic(warning))

    return extract_artifact(output, source_name, contract_name)


def compile_from_config(config: CompileConfig, compiler: Optional[Compiler] = None) -> CompiledArtifact:
    if compiler is None:
        compiler = solcx_compiler(config.solc_version)
    _LOGGER.info(
        "Compiling %s (%s) with solc %s, optimizer runs=%d",
        config.source_path,
        config.contract_name,
        config.solc_version,
        config.optimizer_runs,
    )
    return compile_contract(
        config.source_path,
        config.contract_name,
        optimizer_runs=config.optimizer_runs,
        compiler=compiler,
    )


__all__ = [
    "Compiler",
    "OUTPUT_SELECTION",
    "build_standard_input",
    "compile_contract",
    "compile_from_config",
    "extract_artifact",
    "format_diagnostic",
    "solcx_compiler",
    "split_diagnostics",
]
