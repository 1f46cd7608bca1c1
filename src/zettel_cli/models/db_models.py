"""SQLAlchemy models for the tag side-index cache.

The cache only mirrors what is already in the note files; deleting the
database loses nothing, and ``zettel reindex`` recreates it.
"""
from pathlib import Path

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Table, create_engine, event
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

# Create base class for SQLAlchemy models
Base = declarative_base()

# Association table for tags and notes
note_tags = Table(
    "note_tags",
    Base.metadata,
    Column("note_path", String(1024), ForeignKey("notes.path"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id"), primary_key=True),
)


class DBNote(Base):
    """A note file as seen at the last rebuild."""
    __tablename__ = "notes"
    path = Column(String(1024), primary_key=True)
    id = Column(String(255), nullable=False, index=True)
    mtime = Column(Float, nullable=False)

    tags = relationship("DBTag", secondary=note_tags, back_populates="notes")

    def __repr__(self) -> str:
        """Return string representation of note."""
        return f"<Note(id='{self.id}', path='{self.path}')>"


class DBTag(Base):
    """A canonical tag such as ``#project``."""
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)

    notes = relationship("DBNote", secondary=note_tags, back_populates="tags")

    def __repr__(self) -> str:
        """Return string representation of tag."""
        return f"<Tag(id={self.id}, name='{self.name}')>"


def init_db(db_path: Path):
    """Create the cache database (and its directory) and return an engine."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine):
    """Get a session factory for the cache database."""
    return sessionmaker(bind=engine)
