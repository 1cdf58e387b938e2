"""
DSNP DID Resolver for Frequency

This module resolves `did:dsnp:<id>` identifiers into DID Documents by reading
on-chain state from a Frequency node. It only reads from the chain; nothing is
written, cached across calls, or verified cryptographically.

Key Components:
- chain: Websocket JSON-RPC connection to a node, storage key derivation, and
  SCALE decoding helpers
- resolve: Schema id lookup, public key payload decoding, the resolution
  engine, and the did:dsnp method registration point
- app: Configuration, logging, and an HTTP driver exposing resolution over
  the Universal Resolver API

Resolution Flow:
1. Look up the schema ids for key agreement and assertion method keys once
2. Check the public key count for the user; zero means no account
3. Read the account's control keys, its handle, and its itemized-storage keys
4. Assemble a DID Document with authentication, assertionMethod,
   keyAgreement and alsoKnownAs entries
"""
