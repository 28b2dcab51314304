"""Database Metadata — SQLAlchemy Base shared by models, migrations and schema creation.

Invariants:
    - Single async engine per process (initialized via init_db)
    - All sessions are async (AsyncSession)

Design Decisions:
    - aiosqlite for local/test databases, asyncpg for PostgreSQL: native async drivers
"""
