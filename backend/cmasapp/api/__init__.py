"""API Layer — FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every error body is a problem object built in error_handlers.py

Design Decisions:
    - Thin routes delegate to services
"""
