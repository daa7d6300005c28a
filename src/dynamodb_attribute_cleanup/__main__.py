from __future__ import annotations

import asyncio
import logging
import sys

from dynamodb_attribute_cleanup.app import configure_logging, run
from dynamodb_attribute_cleanup.errors import ConfigInvalidError
from dynamodb_attribute_cleanup.pipeline import CleanupInterrupted

LOGGER = logging.getLogger(__name__)


def main() -> int:
    configure_logging()
    try:
        asyncio.run(run())
    except CleanupInterrupted:
        return 0
    except ConfigInvalidError as exc:
        LOGGER.error("config_invalid", extra={"error": str(exc)})
        return 1
    except Exception:
        LOGGER.exception("cleanup_failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
