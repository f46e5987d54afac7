"""Boot-time wiring passes.

Both passes run once, over the registry, before any service is built.
"""

from __future__ import annotations

import logging

from headless_oauth.core.registry import Reference, ServiceRegistry

logger = logging.getLogger(__name__)

HOST_CACHE = "cache.app"
BUNDLE_CACHE = "headless_oauth.cache"
HOST_LOGGER = "logger"
NULL_LOGGER = "logger.null"
SECURITY_LOGGER = "headless_oauth.security_logger"


class CacheWiringPass:
    """Points the bundle cache at the host cache when the host provides one."""

    def process(self, registry: ServiceRegistry) -> None:
        if not registry.has(HOST_CACHE):
            logger.debug("No %s service, %s stays a no-op cache", HOST_CACHE, BUNDLE_CACHE)
            return
        registry.set_alias(BUNDLE_CACHE, HOST_CACHE)
        logger.debug("%s aliased to %s", BUNDLE_CACHE, HOST_CACHE)


class LoggerWiringPass:
    """Gives the security logger a null logger when the host has no ``logger`` service."""

    def process(self, registry: ServiceRegistry) -> None:
        if not registry.has_definition(SECURITY_LOGGER):
            return
        if registry.has(HOST_LOGGER):
            return
        registry.definition(SECURITY_LOGGER).set_argument("logger", Reference(NULL_LOGGER))


DEFAULT_PASSES = (LoggerWiringPass(), CacheWiringPass())
