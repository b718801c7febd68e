"""
Create (or recreate) the CatDonation tables.

    python -m database.init_db            # create missing tables
    python -m database.init_db --reset    # drop everything first (destroys data)
"""

import argparse
import logging

from database.db import create_tables, drop_tables
from database.models import Base

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_db(reset: bool = False) -> list:
    """Create the schema and return the table names."""
    if reset:
        drop_tables()
    create_tables()
    return sorted(Base.metadata.tables)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Create CatDonation database tables")
    parser.add_argument("--reset", action="store_true", help="Drop all tables before creating them")
    args = parser.parse_args(argv)

    tables = init_db(reset=args.reset)
    print(f"✅ {len(tables)} tables ready:")
    for name in tables:
        columns = ", ".join(column.name for column in Base.metadata.tables[name].columns)
        print(f"  - {name} ({columns})")


if __name__ == "__main__":
    main()
