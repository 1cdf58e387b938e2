"""
did:dsnp Resolution

This package turns DSNP user ids into DID Documents using state read from a
Frequency chain.

Key Components:
- dsnp.py: FrequencyResolver, the resolution engine
- schema.py: Schema id lookup by genesis hash, or by network name
- payload.py: Avro public key record decoding and multibase encoding
- document.py: DID Document and verification method models
- registry.py: did:dsnp parsing and the plugin registration point
- __main__.py: CLI interface for resolution

A DID Document contains:
1. authentication: the MSA's control keys (sr25519)
2. assertionMethod: keys stored under the assertion method schema
3. keyAgreement: keys stored under the key agreement schema
4. alsoKnownAs: the MSA's handle as a did:frqcy:handle DID, when it has one
"""
