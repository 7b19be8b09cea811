"""Background polling of inventory levels.

The monitor re-fetches inventory on a fixed interval and, after an invoice
decrements stock, runs an immediate fetch followed by two delayed ones. The
delays are a heuristic for the stock update becoming visible; they do not
bound staleness.
"""

import logging
import threading
from datetime import datetime, timedelta, UTC
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from bizdesk.domain.entities import InventoryItem
from bizdesk.domain.errors import DomainError
from bizdesk.domain.inventory import low_stock_items

logger = logging.getLogger(__name__)

POLL_JOB_ID = "inventory_poll"
REFRESH_DELAYS = (0.5, 1.5)


class InventoryMonitor:
    """Keeps the latest inventory and low-stock list up to date.

    Use as a context manager so every pending job is removed when the owning
    session ends::

        with InventoryMonitor(service.list_inventory) as monitor:
            monitor.start()
            ...
    """

    def __init__(
        self,
        fetch: Callable[[], list[InventoryItem]],
        scheduler: Optional[BackgroundScheduler] = None,
        interval: float = 3.0,
    ):
        """Initialize inventory monitor.

        Args:
            fetch: Returns the current inventory
            scheduler: Scheduler to run jobs on. A private one is created if
                omitted and shut down by ``close``; a shared one is left running.
            interval: Seconds between polls
        """
        self.fetch = fetch
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler if scheduler is not None else BackgroundScheduler()
        self.interval = interval
        self._lock = threading.Lock()
        self._job_ids: set[str] = set()
        self._refresh_count = 0
        self.inventory: list[InventoryItem] = []
        self.low_stock: list[InventoryItem] = []
        self.last_refreshed: Optional[datetime] = None

    def __enter__(self) -> "InventoryMonitor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def refresh(self) -> list[InventoryItem]:
        """Fetch inventory now and recompute the low-stock list."""
        try:
            inventory = self.fetch()
        except DomainError:
            logger.exception("Error refreshing inventory")
            return self.inventory
        with self._lock:
            self.inventory = list(inventory)
            self.low_stock = low_stock_items(self.inventory)
            self.last_refreshed = datetime.now(UTC)
        if self.low_stock:
            logger.warning("%d inventory items are low on stock", len(self.low_stock))
        return self.inventory

    def start(self) -> None:
        """Fetch once, then poll every ``interval`` seconds."""
        self.refresh()
        self.scheduler.add_job(
            func=self.refresh,
            trigger="interval",
            seconds=self.interval,
            id=POLL_JOB_ID,
            name="Poll inventory levels",
            replace_existing=True,
            max_instances=1,
        )
        self._job_ids.add(POLL_JOB_ID)
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info("Inventory polling every %.1f seconds", self.interval)

    def schedule_post_invoice_refresh(self) -> None:
        """Refresh now, then again 0.5 and 1.5 seconds later."""
        self.refresh()
        now = datetime.now(UTC)
        self._refresh_count += 1
        for delay in REFRESH_DELAYS:
            job_id = f"inventory_refresh_{self._refresh_count}_{delay}"
            self.scheduler.add_job(
                func=self._delayed_refresh,
                trigger="date",
                run_date=now + timedelta(seconds=delay),
                args=[job_id],
                id=job_id,
                name=f"Refresh inventory {delay}s after invoice",
                replace_existing=True,
            )
            self._job_ids.add(job_id)

    def _delayed_refresh(self, job_id: str) -> None:
        self._job_ids.discard(job_id)
        self.refresh()

    def pending_jobs(self) -> list[str]:
        """IDs of jobs this monitor still has scheduled."""
        return sorted(job.id for job in self.scheduler.get_jobs() if job.id in self._job_ids)

    def close(self) -> None:
        """Remove this monitor's jobs and stop the scheduler if the monitor owns it."""
        for job in self.scheduler.get_jobs():
            if job.id in self._job_ids:
                self.scheduler.remove_job(job.id)
        self._job_ids.clear()
        if self._owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
