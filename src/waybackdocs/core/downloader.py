"""
Document Download Worker

Each DocumentDownloader is one worker of the pool: it takes tasks from the
shared channel, paces itself, fetches the archived snapshot and streams it
into the output directory. A failing task is logged and abandoned; it never
stops the worker or the rest of the pool.
"""

import requests
from dataclasses import dataclass
from typing import List, Optional
import logging

from .logger import ErrorTracker
from .task_filter import DEFAULT_ARCHIVE_HOST, DownloadTask
from ..utils.file_manager import FileManager
from ..utils.rate_limiter import Pacer


CHUNK_SIZE = 8192

# The archive varies its answer by client signature; present as curl.
DEFAULT_HEADERS = {
    'User-Agent': 'curl/7.64.1',
    'Accept': '*/*',
    'Connection': 'keep-alive',
}


@dataclass
class TaskResult:
    task: DownloadTask
    ok: bool
    worker_id: int
    path: Optional[str] = None
    error: Optional[str] = None


class DocumentDownloader:
    """
    One download worker.

    The worker keeps its own HTTP session and its own pacer, so the
    fixed delay applies per worker rather than across the pool.
    """

    def __init__(self,
                 worker_id: int,
                 files: FileManager,
                 pacer: Pacer,
                 archive_host: str = DEFAULT_ARCHIVE_HOST,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None,
                 error_tracker: Optional[ErrorTracker] = None):
        """
        Args:
            worker_id: 1-based worker number used in progress lines
            files: Output directory manager shared by the pool
            pacer: This worker's pacing delay
            archive_host: Host serving the snapshots
            timeout: Per-request timeout (None = transport default)
            session: Optional session; a fresh one is created otherwise
            logger: Injected logger for progress and errors
            error_tracker: Optional tracker that records task failures
        """
        self.worker_id = worker_id
        self.files = files
        self.pacer = pacer
        self.archive_host = archive_host
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.error_tracker = error_tracker
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    def _fail(self, task: DownloadTask, context: str, message: str,
              error: Optional[BaseException] = None) -> TaskResult:
        text = f"[Worker {self.worker_id}] {message}"
        if self.error_tracker is not None:
            self.error_tracker.log_error(error, context, url=task.original_url, message=text)
        else:
            self.logger.error(text)
        return TaskResult(task=task, ok=False, worker_id=self.worker_id, error=message)

    def download(self, task: DownloadTask) -> TaskResult:
        """
        Process one task end to end.

        Returns:
            TaskResult describing the outcome; never raises for per-task
            failures (transport, status, file creation, write)
        """
        self.pacer.wait()

        download_url = task.wayback_url(self.archive_host)
        self.logger.info(f"[Worker {self.worker_id}] Downloading: {download_url}")

        try:
            response = self.session.get(download_url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            return self._fail(task, 'request', f"Error downloading {download_url}: {e}", e)

        with response:
            if response.status_code != 200:
                return self._fail(
                    task, 'status',
                    f"Download failed for {download_url}: status {response.status_code} {response.reason or ''}".rstrip(),
                )

            filename = self.files.resolve_filename(task.original_url, response.headers)
            out_path = self.files.get_file_path(filename)

            try:
                out_file = self.files.open_destination(filename)
            except OSError as e:
                return self._fail(task, 'create', f"Could not create file {out_path}: {e}", e)

            with out_file:
                try:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            out_file.write(chunk)
                except (requests.RequestException, OSError) as e:
                    return self._fail(task, 'write', f"Error writing to file {out_path}: {e}", e)

        self.logger.info(f"[Worker {self.worker_id}] Completed: {out_path}")
        return TaskResult(task=task, ok=True, worker_id=self.worker_id, path=out_path)

    def run(self, tasks) -> List[TaskResult]:
        """
        Consume tasks until the source is exhausted.

        Args:
            tasks: Iterable of DownloadTask (normally a TaskChannel)

        Returns:
            Results for every task this worker processed
        """
        results: List[TaskResult] = []
        try:
            for task in tasks:
                try:
                    result = self.download(task)
                except Exception as e:
                    result = self._fail(task, 'unexpected', f"Unexpected error for {task.original_url}: {e}", e)
                results.append(result)
        finally:
            self.close()
        self.logger.debug(f"[Worker {self.worker_id}] Finished after {len(results)} task(s)")
        return results

    def close(self):
        """Close the HTTP session if this worker created it."""
        if self._owns_session:
            self.session.close()
