import asyncio
import logging

from competeedu.db import engine
from competeedu.init_db import init_models


async def init():
    await init_models(engine)
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init())
