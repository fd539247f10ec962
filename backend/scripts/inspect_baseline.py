"""Print the stored baseline for one or more usernames.

Usage: python scripts/inspect_baseline.py alice bob
"""

import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

load_dotenv()

from leetboard.domain.tracker.store import BaselineStore  # noqa: E402
from leetboard.infra.redis import close_redis  # noqa: E402
from leetboard.settings import settings  # noqa: E402


async def main(usernames: list[str]) -> int:
    store = BaselineStore(prefix=settings.storage_prefix)
    try:
        for username in usernames:
            record = await store.load(username)
            if record is None:
                print(f"{username}: no baseline")
                continue
            print(f"{username}: {json.dumps(record.to_mapping(), indent=2)}")
    finally:
        await close_redis()
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    sys.exit(asyncio.run(main(sys.argv[1:])))
