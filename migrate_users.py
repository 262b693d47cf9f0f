import logging

from config import LOG_LEVEL
from database import Base, engine, session_scope
from migration import MigrationEngine
from store import UserStore


def main() -> None:
    """
    Migrate every legacy row in the `users` table to the newest shape.

    One-off maintenance script; the same sweep is served by
    ``POST /migrations``. Safe to run while the service is handling traffic.
    """
    logging.basicConfig(level=LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    with session_scope() as db:
        migrated = MigrationEngine(UserStore(db)).migrate_all()
    print(f"Migrated {len(migrated)} users in the database.")


if __name__ == "__main__":
    main()
