"""
Core - Periodic Task Scheduler

Lightweight periodic scheduler for automated history maintenance.
"""
from typing import Awaitable, Callable, Dict, List
import asyncio
from loguru import logger

from historystore.core.base_system import BaseSystem

Job = Callable[[], Awaitable[None]]
HISTORY_JOB = "history_repopulate"


class PeriodicTaskScheduler(BaseSystem):
    """
    Runs registered maintenance jobs on fixed intervals.

    The built-in `history_repopulate` job refreshes the top-sites cache
    (and prunes when over the bound) every
    `history.maintenance_interval_minutes`; 0 disables it.
    Changes to that setting take effect immediately: the job is
    cancelled and rescheduled with the new interval.

    Example config:
        {
          "history": {
            "maintenance_interval_minutes": 30
          }
        }
    """

    depends_on = ["SQLiteHistory"]

    def __init__(self, locator, config):
        super().__init__(locator, config)
        self._running = False
        self._jobs: Dict[str, Dict] = {}
        self._scheduled_tasks: List[asyncio.Task] = []
        self._tasks_by_name: Dict[str, asyncio.Task] = {}

    def register_job(self, name: str, job: Job, interval_seconds: float,
                     initial_delay_seconds: float = 0) -> None:
        """Add a job; must be called before initialize() to be scheduled."""
        self._jobs[name] = {
            'job': job,
            'interval_seconds': interval_seconds,
            'initial_delay_seconds': initial_delay_seconds,
        }

    async def initialize(self):
        """Initialize scheduler and start scheduled tasks."""
        logger.info("PeriodicTaskScheduler initializing...")

        interval_minutes = self.config.data.history.maintenance_interval_minutes
        if interval_minutes > 0 and HISTORY_JOB not in self._jobs:
            self._register_history_job(interval_minutes)

        self._running = True
        for task_name in list(self._jobs):
            self._start_job(task_name)
        self.config.on_changed.connect(self._on_config_changed)

        await super().initialize()
        logger.info(f"PeriodicTaskScheduler ready ({len(self._scheduled_tasks)} tasks)")

    async def shutdown(self):
        """Shutdown scheduler and cancel all scheduled tasks."""
        logger.info("PeriodicTaskScheduler shutting down...")
        self._running = False
        self.config.on_changed.disconnect(self._on_config_changed)

        for task in self._scheduled_tasks:
            if not task.done():
                task.cancel()

        if self._scheduled_tasks:
            await asyncio.gather(*self._scheduled_tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(self._scheduled_tasks)} scheduled tasks")

        await super().shutdown()

    def _register_history_job(self, interval_minutes: int) -> None:
        from historystore.history.store import SQLiteHistory
        history = self.locator.get_system(SQLiteHistory)
        self.register_job(
            HISTORY_JOB,
            lambda: history.repopulate(invalidate_top_sites=True),
            interval_minutes * 60,
        )

    def _start_job(self, task_name: str) -> None:
        task = asyncio.create_task(self._run_periodic_task(task_name, self._jobs[task_name]))
        self._scheduled_tasks.append(task)
        self._tasks_by_name[task_name] = task
        logger.info(f"Scheduled periodic task: {task_name}")

    def _on_config_changed(self, section, key, value):
        if section != "history" or key != "maintenance_interval_minutes" or not self._running:
            return
        old = self._tasks_by_name.pop(HISTORY_JOB, None)
        if old is not None and not old.done():
            old.cancel()
        self._jobs.pop(HISTORY_JOB, None)
        if value > 0:
            self._register_history_job(value)
            self._start_job(HISTORY_JOB)
        logger.info(f"History maintenance interval changed to {value} min")

    async def _run_periodic_task(self, task_name: str, config: Dict):
        """
        Run a job on its interval until shutdown.

        A failing run is logged and retried on the next interval.
        """
        interval_seconds = config['interval_seconds']
        if interval_seconds <= 0:
            logger.warning(f"Task {task_name} has zero interval, skipping")
            return

        initial_delay = config.get('initial_delay_seconds', 0)
        if initial_delay > 0:
            logger.info(f"Task {task_name}: Initial delay {initial_delay}s")
            try:
                await asyncio.sleep(initial_delay)
            except asyncio.CancelledError:
                logger.info(f"Task {task_name} cancelled during initial delay")
                return

        logger.info(f"Starting periodic task: {task_name} (interval: {interval_seconds}s)")

        while self._running:
            try:
                await self._execute_task(task_name)
                await asyncio.sleep(interval_seconds)
            except asyncio.CancelledError:
                logger.info(f"Periodic task cancelled: {task_name}")
                break

    async def _execute_task(self, task_name: str) -> bool:
        """Run one job once. Returns False if it raised."""
        job = self._jobs[task_name]['job']
        try:
            await job()
            logger.debug(f"Periodic task {task_name} completed")
            return True
        except Exception as e:
            logger.error(f"Error in periodic task {task_name}: {e}")
            return False
