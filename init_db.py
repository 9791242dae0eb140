# init_db.py
"""Create all tables directly, without migrations (local development only)."""

from streamline.db.session import Base, engine
import streamline.db.models  # noqa: F401  registers every model on Base.metadata


def init():
    print("Connecting to database...")
    print("Creating tables (if not exist)...")
    Base.metadata.create_all(bind=engine)
    print("Done.")


if __name__ == "__main__":
    init()
