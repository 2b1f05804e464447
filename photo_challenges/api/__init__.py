"""API Layer — FastAPI routes, request dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every failure leaves the API as the structured error envelope

Design Decisions:
    - Thin routes delegate to services (functional core, imperative shell)
"""
