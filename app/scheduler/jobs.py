"""
app/scheduler/jobs.py

APScheduler-based scheduler for periodic cache maintenance.

Schedule (all times UTC, hour/minute configurable)
--------------------------------------------------
  result_cache_refresh   02:00 daily, clears every result-cache bucket
  import_run_cleanup     hourly, only when IMPORT_REGISTRY_TTL_SECONDS > 0

Lifecycle
---------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.cache.result_cache import ResultCache, get_result_cache
from app.config import get_cache_settings, get_import_settings
from app.logging_utils import log_event
from app.services.import_registry import ImportRegistry, get_import_registry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


def run_cache_refresh(cache: ResultCache | None = None) -> None:
    """
    Drop every cached analysis and list result.
    """

    target = cache if cache is not None else get_result_cache()
    try:
        dropped = target.size()
        target.clear()
    except Exception:  # noqa: BLE001
        logger.exception("Scheduled result cache refresh failed.")
        return
    log_event(logger, logging.INFO, "result_cache_refreshed", entries=dropped)


def run_import_run_cleanup(registry: ImportRegistry | None = None) -> None:
    """
    Evict finished import runs older than the configured TTL.
    """

    target = registry if registry is not None else get_import_registry()
    evicted = target.evict_expired()
    if evicted:
        log_event(logger, logging.INFO, "import_runs_evicted", count=evicted)


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register all periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    cache_settings = get_cache_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if cache_settings.refresh_enabled:
        scheduler.add_job(
            run_cache_refresh,
            trigger="cron",
            hour=cache_settings.refresh_hour,
            minute=cache_settings.refresh_minute,
            id="result_cache_refresh",
            name="Nightly result cache refresh",
            replace_existing=True,
            misfire_grace_time=3600,
        )

    if get_import_settings().registry_ttl_seconds > 0:
        scheduler.add_job(
            run_import_run_cleanup,
            trigger="interval",
            hours=1,
            id="import_run_cleanup",
            name="Expired import run cleanup",
            replace_existing=True,
            misfire_grace_time=600,
        )

    return scheduler
