"""API package for the dialog simulation engine.

This package exposes a FastAPI application that wraps the core
`DialogEngine` to provide HTTP endpoints for listing dialogs, starting
sessions, selecting options and fetching summaries.

The package layout follows a standard FastAPI structure with routers,
dependency helpers, a service layer (a simple in-memory registry), and
Pydantic models.

Notes:
    - Keep this package lightweight; heavy lifting belongs in `core/`.
    - Add auth/middleware in `main.py` if needed later.
"""
