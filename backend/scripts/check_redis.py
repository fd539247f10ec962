import asyncio
import os

import redis.asyncio as redis
from dotenv import load_dotenv


async def check_redis():
    load_dotenv()
    # Default if not in env
    url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    prefix = os.getenv("STORAGE_PREFIX", "leetboard")
    print(f"Connecting to {url}")
    client = redis.from_url(url, decode_responses=True)
    try:
        await client.ping()
        print("Ping successful!")
        baselines = 0
        async for _ in client.scan_iter(match=f"{prefix}:baseline:*", count=500):
            baselines += 1
        print(f"Stored baselines under '{prefix}': {baselines}")
        custom = await client.get(f"{prefix}:custom:usernames")
        print(f"Custom usernames record: {custom or '(none)'}")
    except Exception as e:
        print(f"Failed to connect: {e}")
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(check_redis())
