"""
Metric Store Initialization Script.

Creates the `metaAdMetrics` and `spotifyMetrics` collections with their
`$jsonSchema` validators and indexes. When a collection already exists its
validator is replaced, so a schema change is applied by re-running the script.

Collections and indexes:
    - metaAdMetrics: {campaignId: 1, date: -1}, {adId: 1}
    - spotifyMetrics: {campaignId: 1, date: -1}, {trackId: 1}

**Example Usage:**
    ```bash
    MONGODB_URI=mongodb://localhost:27017 python scripts/init_mongo.py
    ```

**Error Handling:**
    - Exits with code 0 on success
    - Exits with code 1 if the server is unreachable or rejects a command
"""

import asyncio
from pathlib import Path
import sys

from dotenv import load_dotenv
from loguru import logger
from pymongo.errors import PyMongoError

load_dotenv()

# Add the project's root directory to the Python path
sys.path.append(str(Path(__file__).parent.parent.resolve()))

from common.database.metric_store import (  # noqa: E402
    close_mongo_clients,
    get_metric_database,
    init_metric_collections,
)


async def main() -> None:
    database = get_metric_database()
    logger.info(f"Initializing metric store {database.name}")
    try:
        await init_metric_collections(database)
    except PyMongoError as e:
        logger.error(f"✗ Error initializing metric store: {e}")
        sys.exit(1)
    finally:
        await close_mongo_clients()


if __name__ == "__main__":
    logger.add("logs/init_mongo.log", rotation="500 MB")
    asyncio.run(main())
