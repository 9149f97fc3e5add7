"""
Chain - On-chain interaction layer for crunner.

Provides the JSON-RPC client, ABI lookup, and transaction construction
for EVM-compatible chains.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
