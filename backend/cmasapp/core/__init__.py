"""Core Layer — domain types, error taxonomy and store contracts. No IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Store access described only as Protocols (repository_protocols.py)
"""
