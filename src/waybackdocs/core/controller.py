"""
waybackdocs Orchestrator: runs the end-to-end pipeline.

Index (CDX) -> task filter -> unbuffered channel -> fixed worker pool ->
output directory. The calling thread generates all tasks, feeds them to
the pool one at a time and then waits for every worker to finish.
"""

from __future__ import annotations

import time
from contextlib import closing
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional
from concurrent.futures import ThreadPoolExecutor

import requests

from .cdx_client import CDXClient
from .channel import TaskChannel
from .downloader import DocumentDownloader, TaskResult
from .logger import ErrorTracker
from .task_filter import DEFAULT_ARCHIVE_HOST, DownloadTask, build_tasks
from ..utils.file_manager import DEFAULT_OUTPUT_DIR, FileManager
from ..utils.rate_limiter import DEFAULT_TASK_DELAY, Pacer, TokenBucket


DEFAULT_WORKERS = 5


@dataclass
class RunConfig:
    domain: str
    output_dir: str = DEFAULT_OUTPUT_DIR
    workers: int = DEFAULT_WORKERS
    delay_secs: float = DEFAULT_TASK_DELAY
    max_tasks: int = 0  # 0 = no cap
    archive_host: str = DEFAULT_ARCHIVE_HOST
    timeout: Optional[float] = None
    global_rate: bool = False  # add a pool-wide bucket on top of the per-worker delay


@dataclass
class RunStats:
    tasks: int = 0
    downloaded: int = 0
    failed: int = 0
    failures: List[TaskResult] = field(default_factory=list)


class WaybackDocsController:
    def __init__(self,
                 config: RunConfig,
                 logger: Optional[logging.Logger] = None,
                 error_tracker: Optional[ErrorTracker] = None,
                 session_factory: Callable[[], requests.Session] = requests.Session,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            config: Run configuration
            logger: Logger shared by the controller and every worker
            error_tracker: Collects per-task failures (one is created if omitted)
            session_factory: Builds the HTTP session for the index and each worker
            sleep: Sleep function used by the pacers (tests pass a no-op)
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.error_tracker = error_tracker or ErrorTracker(self.logger)
        self.session_factory = session_factory
        self.sleep = sleep
        self.files = FileManager(config.output_dir, logger=self.logger)
        self.rate_limiter: Optional[TokenBucket] = None
        if config.global_rate:
            # Shared bucket: ~1 request per delay_secs across the whole pool
            rate = 1.0 / max(config.delay_secs, 0.1)
            self.rate_limiter = TokenBucket(rate_per_sec=rate, burst=1, jitter_ms=300, sleep=sleep)

    def collect_tasks(self) -> List[DownloadTask]:
        """
        Fetch the CDX index and filter it into download tasks.

        Raises:
            IndexFetchError: On any index failure (fatal)
        """
        session = self.session_factory()
        cdx = CDXClient(archive_host=self.config.archive_host,
                        timeout=self.config.timeout,
                        session=session,
                        logger=self.logger)
        try:
            with closing(cdx.fetch_index_lines(self.config.domain)) as lines:
                tasks = build_tasks(lines, self.config.max_tasks)
        finally:
            session.close()
        self.logger.info(f"Total tasks: {len(tasks)}")
        return tasks

    def _make_worker(self, worker_id: int) -> DocumentDownloader:
        pacer = Pacer(self.config.delay_secs, sleep=self.sleep, shared=self.rate_limiter)
        return DocumentDownloader(worker_id,
                                  files=self.files,
                                  pacer=pacer,
                                  archive_host=self.config.archive_host,
                                  timeout=self.config.timeout,
                                  session=self.session_factory(),
                                  logger=self.logger,
                                  error_tracker=self.error_tracker)

    def dispatch(self, tasks: Iterable[DownloadTask]) -> RunStats:
        """
        Run the worker pool over tasks and block until every worker is done.

        Tasks are handed out in order through an unbuffered channel; the
        channel is closed after the last one, which ends each worker loop.
        """
        stats = RunStats()
        channel: TaskChannel[DownloadTask] = TaskChannel()
        workers = [self._make_worker(i) for i in range(1, max(self.config.workers, 1) + 1)]

        with ThreadPoolExecutor(max_workers=len(workers), thread_name_prefix="worker") as ex:
            futures = [ex.submit(w.run, channel) for w in workers]
            try:
                for task in tasks:
                    channel.put(task)
                    stats.tasks += 1
            finally:
                channel.close()

            # Completion barrier: every worker has seen the close and finished its task
            for fut in futures:
                for result in fut.result():
                    if result.ok:
                        stats.downloaded += 1
                    else:
                        stats.failed += 1
                        stats.failures.append(result)

        for w in workers:
            w.session.close()
        return stats

    def run(self) -> RunStats:
        """Create the output directory, collect tasks, download them all."""
        self.files.create_output_directory()
        tasks = self.collect_tasks()
        stats = self.dispatch(tasks)

        if stats.failures:
            self.logger.warning(f"{stats.failed} task(s) failed:")
            for failure in stats.failures:
                self.logger.warning(f"  {failure.task.original_url} @ {failure.task.timestamp}: {failure.error}")
        self.logger.info(f"Done! Total downloaded files: {stats.downloaded}")
        return stats
