from __future__ import annotations

import json
from pathlib import Path

import pytest

from cryptobirds_deploy.artifacts import (
    HARDHAT_BUILD_COMMAND,
    SOLC_BUILD_COMMAND,
    CompiledArtifact,
    default_artifact_candidates,
    load_artifact,
    normalize_bytecode,
    write_artifact,
)
from cryptobirds_deploy.errors import ArtifactFormatError, ArtifactNotFoundError

from conftest import SAMPLE_ABI, SAMPLE_BYTECODE


def test_normalize_bytecode_adds_prefix_once():
    assert normalize_bytecode("6080") == "0x6080"
    assert normalize_bytecode("0x6080") == "0x6080"
    assert normalize_bytecode(normalize_bytecode("6080")) == "0x6080"


def test_prefixed_bytecode_leaves_prefixed_input_unchanged():
    bare = CompiledArtifact(abi=SAMPLE_ABI, bytecode=SAMPLE_BYTECODE)
    prefixed = CompiledArtifact(abi=SAMPLE_ABI, bytecode="0x" + SAMPLE_BYTECODE)

    assert bare.prefixed_bytecode == "0x" + SAMPLE_BYTECODE
    assert prefixed.prefixed_bytecode == prefixed.bytecode


@pytest.mark.parametrize(
    "payload",
    [
        {"abi": [], "bytecode": "6080"},
        {"abi": SAMPLE_ABI, "bytecode": ""},
        {"abi": SAMPLE_ABI, "bytecode": "0x"},
        {"abi": SAMPLE_ABI},
        {"bytecode": "6080"},
        {"abi": SAMPLE_ABI, "bytecode": "not-hex"},
        ["abi", "bytecode"],
    ],
)
def test_from_mapping_rejects_unusable_payloads(payload):
    with pytest.raises(ArtifactFormatError):
        CompiledArtifact.from_mapping(payload)


def test_from_mapping_reports_unlinked_libraries():
    bytecode = "6080" + "__$" + "a" * 34 + "$__" + "6080"
    with pytest.raises(ArtifactFormatError, match="unlinked"):
        CompiledArtifact.from_mapping({"abi": SAMPLE_ABI, "bytecode": bytecode})


def test_write_artifact_creates_directory_and_pretty_json(tmp_path: Path):
    target = tmp_path / "out" / "nested" / "Bird.json"
    artifact = CompiledArtifact(abi=SAMPLE_ABI, bytecode=SAMPLE_BYTECODE)

    write_artifact(artifact, target)

    text = target.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    assert json.loads(text) == {"abi": SAMPLE_ABI, "bytecode": SAMPLE_BYTECODE}
    assert [p.name for p in target.parent.iterdir()] == ["Bird.json"]


def test_write_artifact_overwrites_previous_artifact(tmp_path: Path):
    target = tmp_path / "Bird.json"
    target.write_text('{"abi": [1], "bytecode": "00"}', encoding="utf-8")

    write_artifact(CompiledArtifact(abi=SAMPLE_ABI, bytecode="0x6080"), target)

    assert json.loads(target.read_text(encoding="utf-8"))["bytecode"] == "0x6080"


def test_write_artifact_failure_keeps_previous_file(tmp_path: Path):
    target = tmp_path / "Bird.json"
    previous = '{"abi": [{"type": "function"}], "bytecode": "6080"}'
    target.write_text(previous, encoding="utf-8")
    broken = CompiledArtifact(abi=[{"name": object()}], bytecode="6080")

    with pytest.raises(TypeError):
        write_artifact(broken, target)

    assert target.read_text(encoding="utf-8") == previous
    assert [p.name for p in tmp_path.iterdir()] == ["Bird.json"]


def test_default_candidates_are_solc_then_hardhat(tmp_path: Path):
    first, second = default_artifact_candidates(tmp_path, "CryptoBirdsContract")
    assert first == tmp_path / "artifacts" / "CryptoBirdsContract.json"
    assert second == tmp_path / "artifacts" / "contracts" / "CryptoBirdsContract.sol" / "CryptoBirdsContract.json"


def test_load_artifact_prefers_first_candidate(tmp_path: Path):
    first = tmp_path / "first.json"
    second = tmp_path / "second.json"
    first.write_text(json.dumps({"abi": SAMPLE_ABI, "bytecode": "6001"}), encoding="utf-8")
    second.write_text(json.dumps({"abi": SAMPLE_ABI, "bytecode": "6002"}), encoding="utf-8")

    assert load_artifact([first, second]).bytecode == "6001"


def test_load_artifact_skips_missing_and_malformed(tmp_path: Path):
    missing = tmp_path / "missing.json"
    malformed = tmp_path / "malformed.json"
    hardhat = tmp_path / "hardhat.json"
    malformed.write_text("{not json", encoding="utf-8")
    hardhat.write_text(
        json.dumps(
            {
                "_format": "hh-sol-artifact-1",
                "contractName": "CryptoBirdsContract",
                "abi": SAMPLE_ABI,
                "bytecode": "0x" + SAMPLE_BYTECODE,
                "linkReferences": {},
            }
        ),
        encoding="utf-8",
    )

    artifact = load_artifact([missing, malformed, hardhat])

    assert artifact.abi == SAMPLE_ABI
    assert artifact.bytecode == "0x" + SAMPLE_BYTECODE


def test_load_artifact_names_both_build_commands_when_nothing_parses(tmp_path: Path):
    malformed = tmp_path / "malformed.json"
    malformed.write_text("", encoding="utf-8")
    candidates = [tmp_path / "absent.json", malformed]

    with pytest.raises(ArtifactNotFoundError) as excinfo:
        load_artifact(candidates)

    message = str(excinfo.value)
    assert SOLC_BUILD_COMMAND in message
    assert HARDHAT_BUILD_COMMAND in message
    assert excinfo.value.candidates == candidates


def test_load_artifact_rejects_parsed_but_empty_artifact(tmp_path: Path):
    empty = tmp_path / "empty.json"
    empty.write_text(json.dumps({"abi": [], "bytecode": ""}), encoding="utf-8")

    with pytest.raises(ArtifactFormatError):
        load_artifact([empty])
