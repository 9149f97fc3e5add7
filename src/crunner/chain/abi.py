"""
ABI Lookup - Resolve function input types from ABI definitions.

A small built-in ABI covers the common ERC-20 calls so they work without
any file. ``--abi-filepath`` adds entries from a JSON file, which can be
a bare ABI list or a compiler artifact carrying an ``abi`` key.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Sequence

from ..errors import InvalidSignature

# name, decimals, allowance and approve
DEFAULT_ABI: list[dict[str, Any]] = [
    {
        "inputs": [],
        "name": "name",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"internalType": "uint8", "name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "name": "allowance",
        "inputs": [
            {"internalType": "address", "name": "owner", "type": "address"},
            {"internalType": "address", "name": "spender", "type": "address"},
        ],
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "name": "approve",
        "inputs": [
            {"internalType": "address", "name": "spender", "type": "address"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


def load_abi_file(path: Path) -> list[dict[str, Any]]:
    """
    Load an ABI from a JSON file.

    Args:
        path: File holding either an ABI list or an artifact with an "abi" key

    Returns:
        ABI as a list of dicts

    Raises:
        InvalidSignature: If the file is not valid ABI JSON
    """
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            content = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidSignature(f"Cannot read ABI file {path}: {exc}") from exc

    if isinstance(content, dict):
        content = content.get("abi")
    if not isinstance(content, list):
        raise InvalidSignature(f"ABI file {path} does not contain an ABI list")

    for index, entry in enumerate(content):
        if not isinstance(entry, dict):
            raise InvalidSignature(f"ABI file {path}: entry {index} is not an object")
        inputs = entry.get("inputs", [])
        if not isinstance(inputs, list) or not all(
            isinstance(inp, dict) and isinstance(inp.get("type"), str) for inp in inputs
        ):
            raise InvalidSignature(
                f"ABI file {path}: entry {index} ({entry.get('name', '?')}) has inputs without a type"
            )
    return content


def combine_abi(extra: Optional[Sequence[dict[str, Any]]] = None) -> list[dict[str, Any]]:
    """Return the default ABI extended with ``extra`` entries."""
    return [*DEFAULT_ABI, *(extra or [])]


def function_input_types(abi: Sequence[dict[str, Any]], function_name: str) -> list[tuple[str, ...]]:
    """
    Collect the input type lists of every ABI function named ``function_name``.

    Overloads produce several entries; the list is empty when the ABI has
    no such function.
    """
    candidates: list[tuple[str, ...]] = []
    for entry in abi:
        if entry.get("type", "function") != "function" or entry.get("name") != function_name:
            continue
        types = tuple(inp["type"] for inp in entry.get("inputs", []))
        if types not in candidates:
            candidates.append(types)
    return candidates
