# streamhub/api/deps.py
import logging
from fastapi import Request

from ..config import settings
from ..errors import AppError, ErrorKind
from ..redis_client import redis_client
from ..services.catalog import TMDBCatalog, catalog
from ..services.payment_gateway import PaymentGateway, payment_gateway

logger = logging.getLogger(__name__)


def get_catalog() -> TMDBCatalog:
    """Catalog collaborator (overridden in tests)"""
    return catalog


def get_payment_gateway() -> PaymentGateway:
    """Payment authorization collaborator (overridden in tests)"""
    return payment_gateway


async def rate_limit(request: Request):
    """
    Fixed-window limiter per client IP, counted in Redis.
    If Redis is down the request is let through.
    """
    if not settings.RATE_LIMIT_ENABLED:
        return

    client_ip = request.client.host if request.client else "unknown"
    key = f"ratelimit:{client_ip}"

    count = await redis_client.increment_window(key, settings.RATE_LIMIT_WINDOW_SECONDS)
    if count > settings.RATE_LIMIT_REQUESTS:
        logger.warning(f"🚦 Rate limit exceeded for {client_ip} on {request.url.path}")
        raise AppError(ErrorKind.RATE_LIMITED, "Too many requests, please try again later.")
