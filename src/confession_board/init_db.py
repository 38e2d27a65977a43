"""Create every table for the configured database without running migrations."""

import argparse

from confession_board.core.settings import settings
from confession_board.db.session import create_tables, drop_tables


def init_db(reset: bool = False) -> None:
    """Initialize the database by creating all tables.

    With `reset`, existing tables and their rows are dropped first.
    """
    if reset:
        drop_tables()
    create_tables()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the Confession Board tables.")
    parser.add_argument("--reset", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()
    init_db(reset=args.reset)
    print(f"Database initialized at {settings.effective_database_url}.")
