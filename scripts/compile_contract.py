#!/usr/bin/env python3
"""Compile the configured Solidity contract and write its ABI and bytecode artifact.

Settings come from the environment (or ``.env``): ``CONTRACT_NAME``,
``CONTRACT_SOURCE``, ``ARTIFACT_DIR``, ``SOLC_VERSION`` and
``SOLC_OPTIMIZER_RUNS``. With the package installed (``pip install -e .``)::

    python scripts/compile_contract.py
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from cryptobirds_deploy.artifacts import write_artifact
from cryptobirds_deploy.compiler import compile_from_config, format_diagnostic, solcx_compiler
from cryptobirds_deploy.config import configure_logging, load_compile_config
from cryptobirds_deploy.errors import CompilationError, DeploymentToolError


def _build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)


def main(argv: Sequence[str] | None = None) -> int:
    _build_parser().parse_args(argv)
    configure_logging()

    try:
        config = load_compile_config()
        artifact = compile_from_config(config, compiler=solcx_compiler(config.solc_version))
        write_artifact(artifact, config.artifact_path)
    except CompilationError as exc:
        logging.error("%s", exc)
        for diagnostic in exc.diagnostics:
            logging.error("%s", format_diagnostic(diagnostic))
        return 1
    except (DeploymentToolError, OSError) as exc:
        logging.error("%s", exc)
        return 1

    print(f"✓ Compiled -> {config.artifact_path}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
