"""
AppBackend — Application Package Initializer
=============================================

What: Backend for the plant-growing journal (boxes, plants, devices, feeds).
Who:  Imported by uvicorn (`appbackend.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    Services (insert pipeline,       │  ← identity, ownership,
    │    ownership, fan-out, public)      │     enrollment, mirroring
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
