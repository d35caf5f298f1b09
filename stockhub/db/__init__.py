"""Database Infrastructure — SQLAlchemy declarative Base shared by all ORM models.

Invariants:
    - Single engine per process (initialized via infrastructure.database.init_db)
    - Sessions are synchronous and scoped to one store transaction
"""
