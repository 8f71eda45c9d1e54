"""Shared fixtures: an in-memory stand-in for the parts of web3 the tools touch."""
from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

# Hardhat / Anvil default account #0; never funded outside local dev chains.
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

SAMPLE_ABI: List[Dict[str, Any]] = [
    {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
    {
        "inputs": [
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "string", "name": "uri", "type": "string"},
        ],
        "name": "safeMint",
        "outputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "ownerOf",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "tokenURI",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
]
SAMPLE_BYTECODE = "6080604052348015600f57600080fd5b50603f80601d6000396000f3fe6080604052600080fdfea164736f6c6343000818000a"


class FakeCall:
    """Constructor or bound function; records what the deployer asks of it."""

    def __init__(self, eth: "FakeEth", name: str, args: tuple, to: str | None = None) -> None:
        self.eth = eth
        self.name = name
        self.args = args
        self.to = to

    def build_transaction(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.eth.log.append(("build_transaction", self.name))
        transaction = {
            "from": params["from"],
            "nonce": params["nonce"],
            "value": params.get("value", 0),
            "gas": 150_000,
            "maxFeePerGas": self.eth.max_fee_per_gas,
            "maxPriorityFeePerGas": 1_000_000_000,
            "chainId": 1337,
            "data": "0x",
        }
        if self.to is not None:
            transaction["to"] = self.to
        self.eth.built.append(transaction)
        return transaction

    def call(self) -> Any:
        self.eth.log.append(("call", self.name))
        return self.eth.read_results[self.name]


class FakeContract:
    def __init__(self, eth: "FakeEth", abi: Any, bytecode: str | None, address: str | None) -> None:
        self.eth = eth
        self.abi = abi
        self.bytecode = bytecode
        self.address = address
        self.functions = SimpleNamespace(
            **{
                entry["name"]: self._bind(entry["name"])
                for entry in abi
                if entry.get("type") == "function"
            }
        )

    def _bind(self, name: str):
        def factory(*args):
            return FakeCall(self.eth, name, args, to=self.address)

        return factory

    def constructor(self, *args):
        return FakeCall(self.eth, "constructor", args)


class FakeEth:
    def __init__(self) -> None:
        self.pending_count = 0
        self.balance = 10**18
        self.max_fee_per_gas = 2_000_000_000
        self.read_results: Dict[str, Any] = {"ownerOf": TEST_ADDRESS, "tokenURI": "ipfs://cryptobirds/1"}
        self.receipt_status: Dict[str, int] = {}
        self.contract_address: str | None = CONTRACT_ADDRESS
        self.send_failures: List[BaseException] = []
        self.log: List[tuple] = []
        self.built: List[Dict[str, Any]] = []
        self.sent: List[bytes] = []
        self.contracts: List[FakeContract] = []

    def get_transaction_count(self, address: str, block_identifier: str = "latest") -> int:
        self.log.append(("get_transaction_count", address, block_identifier))
        return self.pending_count

    def get_balance(self, address: str) -> int:
        self.log.append(("get_balance", address))
        return self.balance

    def send_raw_transaction(self, raw: bytes) -> bytes:
        self.log.append(("send_raw_transaction",))
        if self.send_failures:
            raise self.send_failures.pop(0)
        self.sent.append(bytes(raw))
        return bytes([len(self.sent)]) * 32

    def wait_for_transaction_receipt(self, tx_hash: Any, timeout: float = 120) -> Dict[str, Any]:
        tx_hex = tx_hash if isinstance(tx_hash, str) else "0x" + bytes(tx_hash).hex()
        self.log.append(("wait_for_transaction_receipt", tx_hex))
        return {
            "transactionHash": bytes.fromhex(tx_hex[2:]),
            "status": self.receipt_status.get(tx_hex, 1),
            "contractAddress": self.contract_address,
            "blockNumber": len(self.sent),
        }

    def contract(self, abi: Any = None, bytecode: str | None = None, address: str | None = None) -> FakeContract:
        contract = FakeContract(self, abi, bytecode, address)
        self.contracts.append(contract)
        return contract


@pytest.fixture
def fake_w3() -> SimpleNamespace:
    return SimpleNamespace(eth=FakeEth())


@pytest.fixture
def artifact_file(tmp_path: Path) -> Path:
    path = tmp_path / "artifacts" / "CryptoBirdsContract.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"abi": SAMPLE_ABI, "bytecode": SAMPLE_BYTECODE}, indent=2), encoding="utf-8")
    return path
