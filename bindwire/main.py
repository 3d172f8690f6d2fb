"""Composition Root — wires settings, logging, transport and ItemService.

Invariants:
    - Logging is configured at most once per process, and only when
      settings.configure_logging is on
    - A supplied transport is used as-is; otherwise an HttpxTransport is built
      from the same settings
"""

import logging

from bindwire.config import ClientSettings, get_settings
from bindwire.infrastructure.client_statistics import ClientStatisticsCache
from bindwire.infrastructure.observability import setup_logging
from bindwire.infrastructure.transport import HttpxTransport, Transport
from bindwire.services.item_service import ItemService

logger = logging.getLogger(__name__)

_logging_configured = False


def create_item_service(
    settings: ClientSettings | None = None,
    *,
    transport: Transport | None = None,
    statistics_cache: ClientStatisticsCache | None = None,
) -> ItemService:
    global _logging_configured
    settings = settings or get_settings()

    if settings.configure_logging and not _logging_configured:
        setup_logging(settings.log_level, settings.log_format)
        _logging_configured = True

    service = ItemService(
        settings,
        transport or HttpxTransport(settings=settings),
        statistics_cache,
    )
    logger.info(
        f"ItemService ready for {settings.service_url} "
        f"(client latencies {'on' if settings.send_client_latencies else 'off'})",
    )
    return service
