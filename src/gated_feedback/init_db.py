"""Create the database tables without running migrations.

Handy for local SQLite databases; deployed databases use ``alembic upgrade head``.
"""

from gated_feedback.db.session import create_tables


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()


if __name__ == "__main__":
    init_db()
    print("Database initialized.")
