"""
Frequency Chain Access

This package provides read-only access to a Frequency node.

Key Components:
- client.py: Websocket JSON-RPC connection and the connection manager
- storage.py: Storage key derivation for plain storage maps keyed by MSA id
- scale.py: Decoding of the SCALE-encoded values the resolver reads

Storage keys are derived the same way the runtime derives them: a twox128
hash of the pallet name, a twox128 hash of the storage item name, then the
Twox64Concat hash of the SCALE-encoded MSA id. A key derived any other way
does not fail, it simply reads an empty slot, so the derivation is covered by
known-answer tests.
"""
