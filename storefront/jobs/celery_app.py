"""Celery configuration for scheduled jobs."""

from __future__ import annotations

import os

from celery import Celery
from celery.schedules import crontab

from storefront.utils.dates import timezone_name

broker_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")
backend_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")

celery_app = Celery("storefront", broker=broker_url, backend=backend_url, include=["storefront.jobs.warm_cache"])
celery_app.conf.timezone = timezone_name()
celery_app.conf.beat_schedule = {
    "warm-cache": {
        "task": "storefront.jobs.warm_cache.run_warm_cache",
        "schedule": crontab(hour=int(os.environ.get("WARM_CACHE_HOUR", "5")), minute=int(os.environ.get("WARM_CACHE_MINUTE", "0"))),
    },
}


@celery_app.task(name="storefront.jobs.warm_cache.run_warm_cache")
def run_warm_cache_task():  # pragma: no cover - executed by worker
    import asyncio

    from storefront.jobs.warm_cache import run_warm_cache

    return asyncio.run(run_warm_cache()).to_dict()
