"""
Quire Backend: Application Package Initializer
===============================================

What: Marks the `quire` directory as a Python package.
Who:  Imported by Alembic, pytest and whatever process hosts the image services.

Architecture Note:
    The backend is layered the same way for every feature:

    ┌─────────────────────────────────────┐
    │   Composition root (quire.main)     │  ← logging, wiring, lifespan
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← image pipeline, note store
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every service receives its collaborators through its constructor or
    per-call session argument; nothing below the composition root reaches
    for a global.
"""

__version__ = "1.0.0"
