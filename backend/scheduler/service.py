"""
Scheduler service.

Fires the results crawl on a cron schedule (default 03:30 on Monday,
Wednesday and Friday, site-local time). The job never overlaps itself and
fires at most once per scheduled instant; missed instants are coalesced.
"""
from __future__ import annotations

import asyncio
import re
import signal
from datetime import datetime
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from shared.config import Settings, get_settings
from shared.models.enums import CrawlTrigger
from shared.store import MatchStore
from shared.utils.database import DatabaseManager, connect_with_retry
from shared.utils.logging import get_logger, setup_logging
from shared.utils.metrics import start_metrics_server

from ingest.service import CrawlSummary, run_crawl
from ingest.writer import MatchRecordStore

logger = get_logger(__name__)

CRAWL_JOB_ID = "results_crawl"
MISFIRE_GRACE_S = 3600

CrawlJob = Callable[..., Awaitable[CrawlSummary]]

# Standard crontab numbering: 0 and 7 are Sunday.
_CRONTAB_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")
_NUMERIC_WEEKDAYS = re.compile(r"(\*|\d+)(?:-(\d+))?(?:/(\d+))?")


def _crontab_weekdays(field: str) -> str:
    """
    Rewrite a crontab day-of-week field as an explicit list of day names.

    Numeric ranges and steps are expanded one day at a time, so ranges that
    run through Sunday ("0-6", "5-7") keep their crontab meaning. Named
    entries pass through unchanged.
    """
    names: list[str] = []
    for item in field.split(","):
        match = _NUMERIC_WEEKDAYS.fullmatch(item)
        if match is None:
            names.append(item)
            continue
        first, last, step = match.groups()
        if first == "*":
            if step is None:
                return "*"
            days = range(0, 7, int(step))
        else:
            start = int(first)
            stop = int(last) if last is not None else (7 if step is not None else start)
            if start > 7 or stop > 7 or start > stop:
                raise ValueError(f"Invalid day-of-week value in crontab expression: {item!r}")
            days = range(start, stop + 1, int(step) if step else 1)
        names.extend(_CRONTAB_WEEKDAYS[d % 7] for d in days)
    return ",".join(dict.fromkeys(names))


def crontab_trigger(expr: str, tz: ZoneInfo) -> CronTrigger:
    """
    Build a CronTrigger from a five-field crontab expression.

    APScheduler 3 numbers weekdays from Monday, so numeric day-of-week values
    are rewritten to names before the trigger is built.
    """
    fields = expr.split()
    if len(fields) != 5:
        raise ValueError(f"Wrong number of fields in crontab expression: {expr!r}")
    minute, hour, day, month, day_of_week = fields
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=_crontab_weekdays(day_of_week),
        timezone=tz,
    )


class CrawlScheduler:
    """Owns the APScheduler instance and the single crawl job."""

    def __init__(
        self,
        store: MatchRecordStore,
        settings: Settings | None = None,
        job: CrawlJob = run_crawl,
    ) -> None:
        self._store = store
        self._settings = settings or get_settings()
        self._job = job
        self._tz = ZoneInfo(self._settings.source_timezone)
        self._trigger = crontab_trigger(self._settings.crawl_cron, self._tz)
        self._scheduler = AsyncIOScheduler(timezone=self._tz)
        self._shutdown = asyncio.Event()

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def next_fire_time(self, after: datetime) -> Optional[datetime]:
        """Next scheduled instant at or after `after` (aware datetime)."""
        return self._trigger.get_next_fire_time(None, after)

    def register(self) -> None:
        """Add the crawl job; with run_on_startup it also fires immediately."""
        extra: dict[str, datetime] = {}
        if self._settings.crawl_run_on_startup:
            extra["next_run_time"] = datetime.now(self._tz)
        self._scheduler.add_job(
            self.fire,
            trigger=self._trigger,
            id=CRAWL_JOB_ID,
            name="matchendirect results crawl",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=MISFIRE_GRACE_S,
            replace_existing=True,
            **extra,
        )
        logger.info(
            "crawl_job_registered",
            cron=self._settings.crawl_cron,
            timezone=self._settings.source_timezone,
            run_on_startup=self._settings.crawl_run_on_startup,
        )

    async def fire(self) -> Optional[CrawlSummary]:
        """Run one crawl; errors are logged, never raised into the scheduler."""
        try:
            return await self._job(self._store, self._settings, trigger=CrawlTrigger.SCHEDULE)
        except Exception as exc:
            logger.error("crawl_job_error", error=str(exc), exc_info=True)
            return None

    async def run(self) -> None:
        """Start the scheduler and block until shutdown is requested."""
        self.register()
        self._scheduler.start()
        job = self._scheduler.get_job(CRAWL_JOB_ID)
        logger.info(
            "scheduler_started",
            next_run_time=job.next_run_time.isoformat() if job and job.next_run_time else None,
        )
        try:
            await self._shutdown.wait()
        finally:
            self._scheduler.shutdown(wait=False)

    def request_shutdown(self) -> None:
        self._shutdown.set()


async def main() -> None:
    """Scheduler service entrypoint."""
    settings = get_settings()
    setup_logging("scheduler")
    start_metrics_server(settings.metrics_port)

    db = DatabaseManager(settings)
    await connect_with_retry(db.connect, "Database")
    await db.create_schema()

    service = CrawlScheduler(MatchStore(db), settings)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, service.request_shutdown)
        except (ValueError, OSError, RuntimeError) as exc:
            logger.warning("signal_handler_unavailable", signal=sig, error=str(exc))

    try:
        await service.run()
    finally:
        await db.disconnect()
        logger.info("scheduler_service_stopped")


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
