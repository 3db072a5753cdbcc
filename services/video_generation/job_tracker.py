"""
Job Tracker - Local state for in-flight video generation jobs.

Keeps the ids of jobs that have not reached a terminal state, persisted so
they survive a restart, and reconciles the in-memory job records with the
status the API reports.
"""

import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional

from core.config import get_config
from core.storage import KeyValueStore
from services.notifications import Notifier

from .client import VideoJob

logger = logging.getLogger(__name__)

FetchJob = Callable[[str], Awaitable[Optional[VideoJob]]]


class JobTracker:
    """
    Tracks in-flight jobs against persisted local state.

    Usage:
        tracker = JobTracker(store)

        # Record a newly created job
        tracker.track(job)

        # One reconciliation pass
        await tracker.reconcile(client.fetch_job)

        # Or keep reconciling in the background
        await tracker.start(client.fetch_job)
        await tracker.stop()

    The id list may hold duplicates; removal drops every occurrence.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: Optional[str] = None,
        poll_interval_seconds: Optional[float] = None,
        notifier: Optional[Notifier] = None,
    ):
        config = get_config()
        self.store = store
        self.notifier = notifier
        self.key = key or config.storage.videos_key
        self.poll_interval = (
            config.polling.interval_seconds
            if poll_interval_seconds is None
            else poll_interval_seconds
        )

        self._job_ids: list[str] = self._load_ids()
        self._jobs: list[VideoJob] = []

        self._running = False
        self._task: Optional[asyncio.Task] = None

    def _load_ids(self) -> list[str]:
        raw = self.store.get(self.key)
        if not raw:
            return []

        try:
            ids = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding unparsable in-flight job list: {e}")
            return []

        if not isinstance(ids, list):
            logger.warning("Discarding in-flight job list: expected a JSON array")
            return []

        return [str(job_id) for job_id in ids]

    def _persist(self):
        # In-memory state stays authoritative when the write fails
        try:
            self.store.set(self.key, json.dumps(self._job_ids))
        except OSError as e:
            logger.error(f"Failed to persist in-flight job list: {e}")
            if self.notifier:
                self.notifier.error(
                    f"Failed to save in-flight videos. They will not be restored after a restart. Error details: {e}"
                )

    @property
    def job_ids(self) -> tuple[str, ...]:
        """Ids still awaiting a terminal state, in creation order."""
        return tuple(self._job_ids)

    @property
    def jobs(self) -> tuple[VideoJob, ...]:
        """Latest known records for jobs created in this session."""
        return tuple(self._jobs)

    @property
    def is_running(self) -> bool:
        return self._running

    def track(self, job: VideoJob):
        """Record a newly created or remixed job."""
        self._job_ids.append(job.id)
        self._jobs.append(job)
        self._persist()
        logger.info(f"Tracking job {job.id} ({len(self._job_ids)} in flight)")

    def forget(self, job_id: str):
        """Stop tracking a job."""
        self._job_ids = [i for i in self._job_ids if i != job_id]
        self._jobs = [j for j in self._jobs if j.id != job_id]
        self._persist()

    def apply(self, job_id: str, job: Optional[VideoJob]):
        """
        Reconcile one fetched job with local state.

        Args:
            job_id: The tracked id the job was fetched for
            job: Latest server record, or None if the fetch failed
        """
        if job is None:
            return

        # Zero progress counts as no update
        if job.progress:
            for index, existing in enumerate(self._jobs):
                if existing.id == job_id:
                    self._jobs[index] = job
                    break

        if job.is_terminal:
            logger.info(f"Job {job_id} finished with status {job.status}")
            self.forget(job_id)

    async def reconcile(self, fetch_job: FetchJob):
        """
        Fetch every in-flight job and apply the results.

        Fetches run concurrently; each result is applied as it arrives.
        """
        job_ids = list(self._job_ids)
        if not job_ids:
            return

        logger.debug(f"Reconciling {len(job_ids)} in-flight jobs")
        await asyncio.gather(*(self._refresh(fetch_job, job_id) for job_id in job_ids))

    async def _refresh(self, fetch_job: FetchJob, job_id: str):
        try:
            job = await fetch_job(job_id)
        except Exception as e:
            logger.error(f"Status fetch for job {job_id} failed: {e}")
            return
        self.apply(job_id, job)

    async def start(self, fetch_job: FetchJob):
        """
        Start reconciling in-flight jobs every poll interval.

        Args:
            fetch_job: Coroutine returning the current job or None
        """
        if self._running:
            logger.warning("Job tracker already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._refresh_loop(fetch_job))
        logger.info(f"Job tracker started (interval: {self.poll_interval}s)")

    async def stop(self):
        """Stop the refresh loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Job tracker stopped")

    async def _refresh_loop(self, fetch_job: FetchJob):
        """Main refresh loop."""
        while self._running:
            await asyncio.sleep(self.poll_interval)
            try:
                await self.reconcile(fetch_job)
            except Exception as e:
                logger.error(f"Error reconciling in-flight jobs: {e}")
