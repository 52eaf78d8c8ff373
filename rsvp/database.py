import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Backs the SQL list store; defaults to a local SQLite file
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./rsvp.db")

# SQLite needs check_same_thread since store calls run in the threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
