from __future__ import annotations

from sqlalchemy import inspect

from tambola.db.engine import make_engine
from tambola.models import Base


def create_tables() -> None:
    """Create the shared-state tables on the configured database."""
    engine = make_engine()
    Base.metadata.create_all(engine)


def print_tables() -> None:
    """Inspect the configured database and print all table names."""
    engine = make_engine()
    insp = inspect(engine)
    print("Current tables:", ", ".join(sorted(insp.get_table_names())))


def main() -> None:
    """Create missing tables and report the resulting schema."""
    create_tables()
    print_tables()


if __name__ == "__main__":
    main()
