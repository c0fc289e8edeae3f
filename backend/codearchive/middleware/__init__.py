# Middleware package init
"""
CodeArchive Backend: Middleware Package
========================================

Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → [Unhandled Error] → Route Handler

    - Request ID runs first so every later log line can carry it
    - Logging measures duration and records the final status code
    - Unhandled Error sits innermost so unexpected 500s still pass back
      through CORS, Logging and Request ID
"""
