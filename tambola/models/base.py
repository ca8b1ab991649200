from sqlalchemy.orm import DeclarativeBase
from tambola.db.metadata import metadata_obj


class Base(DeclarativeBase):
    metadata = metadata_obj
