"""Database Declarations — SQLAlchemy Base and standalone session factories.

Invariants:
    - Single async engine per process in the app (initialized via init_db)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL in production, aiosqlite in tests
"""
