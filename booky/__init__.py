"""
Booky - Application Package Initializer
=======================================

What:  Marks the `booky` directory as a Python package.
Who:   Used by uvicorn (`booky.main:app`), pytest, and the `booky` console script.

Architecture Note:
    The service is layered, one request flowing straight down and back up:

    ┌─────────────────────────────────────┐
    │         Routes (HTTP Layer)         │  ← method/path → handler, status codes
    ├─────────────────────────────────────┤
    │       Services (Data Access)        │  ← request → document, document → Book
    ├─────────────────────────────────────┤
    │          Schemas (Contract)         │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │      Database (MongoDB handle)      │  ← shared async client, one collection
    └─────────────────────────────────────┘

    Failures travel up as `booky.exceptions` types and are turned into
    HTTP responses by the handlers registered in `booky.main`.
"""

__version__ = "1.0.0"
