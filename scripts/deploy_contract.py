#!/usr/bin/env python3
"""Deploy the compiled contract, mint token #1 to the deployer and read it back.

Requires ``PRIVATE_KEY`` in the environment or ``.env``; ``RPC_URL`` defaults to
a local node at ``http://127.0.0.1:8545``. Compile first with either::

    python scripts/compile_contract.py
    npx hardhat compile
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from cryptobirds_deploy.config import configure_logging, load_deploy_config
from cryptobirds_deploy.runner import run_deployment


def _build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)


def main(argv: Sequence[str] | None = None) -> int:
    _build_parser().parse_args(argv)
    configure_logging()

    try:
        config = load_deploy_config()
        run_deployment(config)
    except Exception:  # pylint: disable=broad-except
        logging.exception("Deployment failed")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
