"""
Relational Store Initialization Script.

Creates every table of the relational store (users, refresh tokens, linked
platform accounts, campaigns) that does not exist yet. Existing tables are left
untouched, so the script is safe to re-run.

**Dependencies:**
    - PostgreSQL server reachable with the POSTGRES_* settings
    - The `pgcrypto` functions behind gen_random_uuid() (built in since
      PostgreSQL 13)

**Example Usage:**
    ```bash
    python scripts/init_db.py
    ```

**Error Handling:**
    - Exits with code 0 on success
    - Exits with code 1 on failure (connection refused, SQL errors)

**Logging:**
    - Console output: INFO level with timestamps
    - File output: logs/init_db.log (rotates at 500 MB)
"""

import asyncio
from pathlib import Path
import sys

from dotenv import load_dotenv
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

# Add the project's root directory to the Python path
sys.path.append(str(Path(__file__).parent.parent.resolve()))

from common.database import create_tables, dispose_engines  # noqa: E402


async def main() -> None:
    """Create the relational tables and release the connection pool."""
    logger.info("Initializing relational store")
    try:
        await create_tables()
        logger.info("✓ Relational store ready")
    except (OSError, SQLAlchemyError) as e:
        logger.error(f"✗ Error creating tables: {e}")
        sys.exit(1)
    finally:
        await dispose_engines()


if __name__ == "__main__":
    logger.add("logs/init_db.log", rotation="500 MB")
    asyncio.run(main())
