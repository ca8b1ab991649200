from pathlib import Path

from tambola.db.engine import make_engine
from tambola.models import Base
from tambola.roster import (
    dump_roster_file,
    generate_participants_data,
    generate_sample_names,
)
from tambola.workflows import DEFAULT_ROSTER_PATH, DEFAULT_SAMPLE_SIZE

ROOT_DIR = Path(__file__).resolve().parents[1]


def main() -> None:
    """Reset the shared store and write a sample roster for development."""
    engine = make_engine()

    # Drop and recreate all tables so displays start from an empty store.
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    names = generate_sample_names(DEFAULT_SAMPLE_SIZE)
    data = generate_participants_data(DEFAULT_SAMPLE_SIZE, names)
    path = dump_roster_file(ROOT_DIR / DEFAULT_ROSTER_PATH, data)
    print(f"Wrote {len(data['participants'])} participants to {path}")


if __name__ == "__main__":
    main()
