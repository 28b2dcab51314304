"""Infrastructure Layer — database access, repository implementation and logging.

Invariants:
    - Implements the core/ protocols; core never imports back
    - Driver/ORM exceptions mapped to core errors before leaving this layer
"""
