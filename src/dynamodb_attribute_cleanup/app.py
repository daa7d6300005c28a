from __future__ import annotations

import asyncio
import logging
import os
import signal

from dynamodb_attribute_cleanup.dynamodb import DynamoDBTableStore, create_dynamodb_client
from dynamodb_attribute_cleanup.models import RunSummary
from dynamodb_attribute_cleanup.pipeline import run_cleanup
from dynamodb_attribute_cleanup.settings import load_config, load_settings

LOGGER = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


async def run() -> RunSummary:
    settings = load_settings()
    config = load_config(settings)

    LOGGER.info(
        "cleanup_start",
        extra={
            "table_name": config.table_name,
            "fields_to_remove": list(config.fields_to_remove),
            "aws_region": settings.aws_region,
            "batch_size": config.batch_size,
            "partition_key": config.identity.partition_key,
            "sort_key": config.identity.sort_key,
        },
    )

    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)

    client = create_dynamodb_client(region_name=settings.aws_region, max_attempts=config.max_retries)
    store = DynamoDBTableStore(client=client, table_name=config.table_name)
    return await run_cleanup(config=config, store=store, stop_event=stop_event)


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    def _request_stop(signame: str) -> None:
        LOGGER.warning("shutdown_requested", extra={"signal": signame})
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_stop, sig.name)
