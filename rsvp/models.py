from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rsvp.database import Base


class ListEntry(Base):
    """One element of a Redis-style list; higher ids sit nearer the head."""

    __tablename__ = "list_entries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String, index=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class Counter(Base):
    __tablename__ = "counters"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
