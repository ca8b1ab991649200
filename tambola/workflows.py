from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from .config import ANNOUNCE_MODE
from .db.engine import get_sessionmaker, make_engine
from .game import AnnouncementMode, GameEngine
from .models import Base
from .roster import (
    dump_roster_file,
    generate_participants_data,
    generate_sample_names,
    load_roster_file,
    parse_roster,
)
from .sync.channels import DatabaseChannel
from .tickets import TicketGenerator

if TYPE_CHECKING:
    from .sync.channels import Channel

logger = logging.getLogger(__name__)

DEFAULT_ROSTER_PATH = Path("data/participants.json")
DEFAULT_SAMPLE_SIZE = 100


def open_database_channel(
    database_url: Optional[str] = None, *, create_tables: bool = True
) -> DatabaseChannel:
    """Create a :class:`DatabaseChannel` bound to ``database_url``.

    Parameters
    ----------
    database_url : Optional[str], default: None
        SQLAlchemy URL of the shared store. When omitted, ``DB_URL`` from the
        environment (or the local SQLite default) is used.
    create_tables : bool, default: True
        Create the store's tables if they do not exist yet.
    """
    engine = make_engine(database_url)
    if create_tables:
        Base.metadata.create_all(engine)
    return DatabaseChannel(get_sessionmaker(engine))


def start_game(
    roster_path: Optional[Union[str, Path]] = None,
    *,
    channel: Optional["Channel"] = None,
    mode: Union[AnnouncementMode, str] = ANNOUNCE_MODE,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    save_sample_to: Optional[Union[str, Path]] = None,
    generator: Optional[TicketGenerator] = None,
    rng: Optional[random.Random] = None,
) -> GameEngine:
    """Build a ready-to-play engine from a roster file or a sample roster.

    The workflow performs the following steps:

    1. Read participants from ``roster_path`` (default
       ``data/participants.json``) when the file exists.
    2. Otherwise generate ``sample_size`` participants with random names and
       fresh tickets, optionally writing them to ``save_sample_to``.
    3. Create the engine, which publishes the roster and the initial
       snapshot on ``channel``.

    Returns
    -------
    GameEngine
        Engine in the ``NOT_STARTED`` state.

    Raises
    ------
    ValueError
        If the roster file content is not a usable roster.
    InvalidTicketStructure
        If a ticket in the roster file is malformed.
    """
    path = Path(roster_path) if roster_path is not None else DEFAULT_ROSTER_PATH
    if path.exists():
        participants = load_roster_file(path)
    else:
        logger.info(f"No roster at {path}; generating {sample_size} sample participants")
        data = generate_participants_data(
            sample_size,
            generate_sample_names(sample_size, rng),
            generator=generator or TicketGenerator(rng=rng),
        )
        if save_sample_to is not None:
            dump_roster_file(save_sample_to, data)
        participants = parse_roster(data)

    return GameEngine(participants, mode=mode, channel=channel, rng=rng)
