"""
CodeArchive Backend: Application Package
=========================================

What:  REST API for storing and retrieving reusable code snippets.
How:   FastAPI routes over a service layer, backed by async SQLAlchemy.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Pagination, not-found, fault wrapping
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Lifespan-owned engine, per-request sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
