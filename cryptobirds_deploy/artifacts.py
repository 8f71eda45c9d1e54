"""Reading and writing the ``{"abi": [...], "bytecode": "<hex>"}`` artifact."""
from __future__ import annotations

import contextlib
import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from eth_utils import add_0x_prefix, is_hex, remove_0x_prefix

from .errors import ArtifactFormatError, ArtifactNotFoundError

_LOGGER = logging.getLogger(__name__)

SOLC_BUILD_COMMAND = "python scripts/compile_contract.py"
HARDHAT_BUILD_COMMAND = "npx hardhat compile"

_LINK_PLACEHOLDER = re.compile(r"__\$\w{34}\$__")


@dataclass(frozen=True)
class CompiledArtifact:
    """Interface description and creation bytecode of one contract."""

    abi: List[Dict[str, Any]]
    bytecode: str

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], *, source: str = "artifact") -> "CompiledArtifact":
        """Validate ``payload`` and return an artifact.

        Extra keys (Hardhat adds ``contractName``, ``linkReferences`` and so on)
        are ignored.

        Raises:
            ArtifactFormatError: If ``abi`` is not a non-empty list or
                ``bytecode`` is not a non-empty hex string.
        """

        if not isinstance(payload, Mapping):
            raise ArtifactFormatError(f"{source}: expected a JSON object, got {type(payload).__name__}")

        abi = payload.get("abi")
        if not isinstance(abi, list) or not abi:
            raise ArtifactFormatError(f"{source}: 'abi' must be a non-empty list")

        bytecode = payload.get("bytecode")
        if not isinstance(bytecode, str) or not remove_0x_prefix(bytecode):
            raise ArtifactFormatError(f"{source}: 'bytecode' must be a non-empty hex string")
        if _LINK_PLACEHOLDER.search(bytecode):
            placeholders = sorted(set(_LINK_PLACEHOLDER.findall(bytecode)))
            raise ArtifactFormatError(f"{source}: bytecode has unlinked libraries {placeholders}")
        if not is_hex(bytecode):
            raise ArtifactFormatError(f"{source}: 'bytecode' is not valid hex")

        return cls(abi=list(abi), bytecode=bytecode)

    @property
    def prefixed_bytecode(self) -> str:
        """Return the bytecode with a single ``0x`` prefix."""

        return normalize_bytecode(self.bytecode)

    def as_dict(self) -> Dict[str, Any]:
        return {"abi": self.abi, "bytecode": self.bytecode}


def normalize_bytecode(bytecode: str) -> str:
    return add_0x_prefix(bytecode)


def write_artifact(artifact: CompiledArtifact, path: Path) -> Path:
    """Atomically write ``artifact`` to ``path`` as pretty-printed JSON.

    The payload goes to a temporary file in the destination directory first and
    is renamed over ``path`` only once fully flushed, so an interrupted write
    never leaves a truncated artifact behind.
    """

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(artifact.as_dict(), handle, indent=2)
            handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise

    _LOGGER.debug("Wrote artifact to %s", path)
    return path


def default_artifact_candidates(root: Path, contract_name: str) -> List[Path]:
    """Locations checked for a compiled artifact, in priority order."""

    artifacts = Path(root) / "artifacts"
    return [
        artifacts / f"{contract_name}.json",
        artifacts / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json",
    ]


def _missing_artifact_message(candidates: List[Path]) -> str:
    tried = "\n".join(f"  - {path}" for path in candidates)
    return (
        "Artifact not found.\n"
        f"Tried:\n{tried}\n"
        "Run one of:\n"
        f"  {SOLC_BUILD_COMMAND}    (solc)\n"
        "or\n"
        f"  {HARDHAT_BUILD_COMMAND}        (Hardhat)"
    )


def load_artifact(candidates: Iterable[Path]) -> CompiledArtifact:
    """Return the artifact from the first candidate that parses as JSON.

    Missing files and files that are not valid JSON are skipped. A file that
    parses but lacks ``abi``/``bytecode`` is an error rather than a fallthrough.

    Raises:
        ArtifactNotFoundError: If no candidate parses.
        ArtifactFormatError: If the first parseable candidate is unusable.
    """

    paths = [Path(candidate) for candidate in candidates]
    for path in paths:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            _LOGGER.debug("No artifact at %s", path)
            continue
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            _LOGGER.debug("Skipping unreadable artifact %s: %s", path, exc)
            continue

        _LOGGER.info("Loaded artifact from %s", path)
        return CompiledArtifact.from_mapping(payload, source=str(path))

    raise ArtifactNotFoundError(_missing_artifact_message(paths), candidates=paths)


__all__ = [
    "CompiledArtifact",
    "HARDHAT_BUILD_COMMAND",
    "SOLC_BUILD_COMMAND",
    "default_artifact_candidates",
    "load_artifact",
    "normalize_bytecode",
    "write_artifact",
]
