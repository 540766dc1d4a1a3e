"""
AppBackend — Pydantic Schemas
==============================

resources.py: request bodies decoded by the insert pipeline, one per kind.
responses.py: response and error envelopes returned by the routes.
"""
