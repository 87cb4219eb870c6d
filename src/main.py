"""Entry point for the income ledger API."""

import asyncio
import signal

from loguru import logger

from config.settings import settings
from src.api.registry import registry
from src.api.server import run_api_server
from src.db.database import async_session_factory, init_models
from src.parsers.alchemy.client import AlchemyClient
from src.parsers.coingecko.client import CoinGeckoClient
from src.parsers.rate_limiter import RateLimiter
from src.services.prices import PriceResolver
from src.services.transactions import EnrichmentEngine
from src.utils.logger import setup_logger
from src.utils.ttl_cache import TTLCache


def build_registry() -> None:
    """Wire provider clients, caches and the enrichment engine."""
    registry.alchemy = AlchemyClient(
        settings.alchemy_api_key, rate_limiter=RateLimiter(settings.alchemy_max_rps)
    )
    registry.coingecko = CoinGeckoClient(
        api_key=settings.coingecko_api_key,
        base_url=settings.coingecko_base_url,
        rate_limiter=RateLimiter(settings.coingecko_max_rps),
    )
    registry.price_resolver = PriceResolver(
        registry.coingecko, cache=TTLCache(settings.price_cache_ttl_sec)
    )
    registry.engine = EnrichmentEngine(
        async_session_factory,
        registry.alchemy,
        registry.price_resolver,
        cache=TTLCache(settings.transfer_cache_ttl_sec),
        price_concurrency=settings.price_concurrency,
    )
    if not settings.alchemy_api_key:
        logger.warning("ALCHEMY_API_KEY not set, every wallet will return no transfers")


async def main() -> None:
    setup_logger(json_logs=settings.json_logs, level=settings.log_level)
    logger.info("Starting income ledger API...")

    await init_models()
    build_registry()

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    server_task = asyncio.create_task(run_api_server())

    done, pending = await asyncio.wait(
        [server_task, asyncio.create_task(shutdown_event.wait())],
        return_when=asyncio.FIRST_COMPLETED,
    )

    for task in pending:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    await registry.close()
    logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
