# Middleware package init
"""
AppBackend — Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and the X-Request-ID header
    2. Logging: method, path, status and duration, tagged with the request ID
    3. GZip and CORS: FastAPI's stock middleware

    Responses travel back through the chain in reverse order, so the logger
    sees the final status and the request ID is set on every response.
"""
