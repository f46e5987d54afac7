import logging
from contextlib import asynccontextmanager
from typing import Any, Mapping, Optional

from fastapi import FastAPI

from headless_oauth.bundle import HeadlessOAuthBundle
from headless_oauth.core.cache import RedisCachePool
from headless_oauth.core.config import BaseAppSettings, get_settings
from headless_oauth.core.logger import init_logging
from headless_oauth.core.wiring import HOST_CACHE, HOST_LOGGER

logger = logging.getLogger(__name__)


def host_services_from_settings(app_settings: BaseAppSettings) -> dict[str, Any]:
    """Services a standalone deployment provides to the bundle as its host."""
    services: dict[str, Any] = {HOST_LOGGER: logging.getLogger("headless_oauth.security")}
    if app_settings.REDIS_URL:
        from headless_oauth.db.redis_client import get_redis_client

        services[HOST_CACHE] = RedisCachePool(get_redis_client(app_settings.REDIS_URL))
    return services


def create_app(
    app_settings: Optional[BaseAppSettings] = None,
    host_services: Optional[Mapping[str, Any]] = None,
) -> FastAPI:
    cfg = app_settings or get_settings()
    init_logging(app_settings=cfg)

    services = host_services_from_settings(cfg)
    services.update(host_services or {})
    bundle = HeadlessOAuthBundle(cfg, services)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await bundle.aclose()
        if cfg.REDIS_URL:
            from headless_oauth.db.redis_client import close_redis_pool

            close_redis_pool()

    # Interactive docs stay off in production
    is_production = cfg.is_production
    app = FastAPI(
        title=cfg.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=lifespan,
    )
    bundle.install(app)
    logger.info("%s started (env=%s)", cfg.APP_NAME, cfg.ENV)
    return app
