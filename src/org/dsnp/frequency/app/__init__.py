"""
Resolver Application Layer

This package exposes did:dsnp resolution over HTTP with aiohttp, following the
Universal Resolver driver API.

Key Components:
- cli.py: Entry point and logging setup
- server.py: Application factory, middleware, and resource lifecycle
- config.py: Configuration management using Pydantic settings
- metrics.py: Metrics abstraction (Telegraf/StatsD or no-op)
- handlers/: Request handlers

Endpoints:
- GET /1.0/identifiers/{did}: DID resolution result, or only the DID Document
  when the client accepts application/did+ld+json
- GET /internal/alive: liveness
- GET /internal/ready: readiness, 503 while the Frequency node is unreachable
"""
