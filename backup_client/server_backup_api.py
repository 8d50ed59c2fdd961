# Client that triggers a server backup and polls it until it finishes
import json
import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable, Optional

from backup_client import metrics
from backup_client.api_result import ApiRequestBuilder, ApiResult
from backup_client.config import DEFAULT_API_BASE, Settings
from backup_client.models import ServerBackup

logger = logging.getLogger(__name__)

CREATE_BACKUP_PATH = "/api/backups"

BackupCallback = Callable[[ServerBackup], None]
ErrorCallback = Callable[[str], None]


class BackupFailed(Exception):
    """Raised through the future returned by ServerBackupAPI.start."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


def timer_scheduler(delay_seconds: float, fn: Callable[[], None]) -> None:
    timer = threading.Timer(delay_seconds, fn)
    timer.daemon = True
    timer.start()


class ServerBackupAPI:
    def __init__(self, base_url: str = DEFAULT_API_BASE, request_builder: Optional[ApiRequestBuilder] = None,
                 scheduler=timer_scheduler, max_polls: Optional[int] = None):
        if max_polls is not None and max_polls < 1:
            raise ValueError(f"max_polls must be at least 1, got {max_polls}")
        self.base_url = base_url.rstrip("/")
        self.requests = request_builder or ApiRequestBuilder()
        self.scheduler = scheduler
        self.max_polls = max_polls

    @classmethod
    def from_settings(cls, settings: Settings, session=None, scheduler=timer_scheduler) -> "ServerBackupAPI":
        builder = ApiRequestBuilder(session=session, token=settings.api_token, timeout=settings.request_timeout)
        return cls(settings.api_base, builder, scheduler=scheduler, max_polls=settings.max_polls)

    def create_backup_url(self) -> str:
        return f"{self.base_url}{CREATE_BACKUP_PATH}"

    def start(self, on_progress: BackupCallback, on_completion: BackupCallback,
              on_error: ErrorCallback) -> Future:
        """Trigger a backup and poll the URL the server hands back.

        Returns a future that resolves to the final ServerBackup, or fails with
        BackupFailed. Callbacks always run before the future settles.
        """
        future = Future()
        future.set_running_or_notify_cancel()
        polls = 0

        def finish_ok(backup):
            metrics.backup_in_progress.set(0)
            metrics.backup_last_success_timestamp.set(time.time())
            logger.info("Server backup completed: %s", backup.message)
            if self._invoke(on_completion, backup, future) and not future.done():
                future.set_result(backup)

        def finish_error(message):
            metrics.backup_in_progress.set(0)
            metrics.backup_last_failure_timestamp.set(time.time())
            logger.error("Server backup failed: %s", message)
            if self._invoke(on_error, message, future) and not future.done():
                future.set_exception(BackupFailed(message))

        try:
            result = self.requests.post(self.create_backup_url())
        except Exception as exc:  # noqa: BLE001 - reported through on_error and the future
            logger.exception("Creating server backup raised")
            result = ApiResult.from_exception(exc)
        if result.ok and not result.redirect_url:
            result = ApiResult(result.status_code, result.body,
                               error_message="response did not include a Location header")
        if not result.ok:
            finish_error(f"Failed to start server backup. Reason: {result.error_message}")
            return future

        polling_url = result.redirect_url
        retry_interval = result.retry_after_millis
        logger.info("Server backup started, polling %s every %sms", polling_url, retry_interval)
        metrics.backup_in_progress.set(1)

        def poll_once():
            try:
                self.check_backup_progress(polling_url, on_progress_with_retry, finish_ok, finish_error)
            except Exception as exc:  # noqa: BLE001 - a dead timer thread would leave the future pending
                logger.exception("Polling %s raised", polling_url)
                if not future.done():
                    metrics.backup_poll_failures_total.inc()
                    finish_error(f"Failed to poll for server backup. Reason: {exc}")

        def on_progress_with_retry(backup):
            nonlocal polls
            if not self._invoke(on_progress, backup, future):
                metrics.backup_in_progress.set(0)
                metrics.backup_last_failure_timestamp.set(time.time())
                logger.error("Server backup polling stopped: progress callback raised")
                return
            polls += 1
            if self.max_polls is not None and polls >= self.max_polls:
                finish_error(f"Gave up polling for server backup after {polls} attempt(s)")
                return
            self.scheduler(retry_interval / 1000.0, poll_once)

        poll_once()
        return future

    def get(self, backup_url: str) -> ApiResult:
        return self.requests.get(backup_url).map(lambda body: ServerBackup.from_json(json.loads(body)))

    def check_backup_progress(self, polling_url: str, on_progress: BackupCallback,
                              on_completion: BackupCallback, on_error: ErrorCallback) -> None:
        metrics.backup_polls_total.inc()

        def on_success(result):
            backup = result.body
            if backup.is_in_progress():
                logger.info("Server backup in progress (%s): %s", backup.progress_status or "-", backup.message)
                on_progress(backup)
            elif backup.is_complete():
                on_completion(backup)
            else:
                on_error(backup.message)

        def on_failure(result):
            metrics.backup_poll_failures_total.inc()
            on_error(f"Failed to poll for server backup. Reason: {result.error_message}")

        self.get(polling_url).do(on_success, on_failure)

    poll = check_backup_progress

    def start_and_wait(self, timeout: Optional[float] = None) -> ServerBackup:
        future = self.start(lambda backup: None, lambda backup: None, lambda message: None)
        return future.result(timeout=timeout)

    @staticmethod
    def _invoke(callback, value, future: Future) -> bool:
        try:
            callback(value)
        except Exception as exc:  # noqa: BLE001 - user callback, surfaced through the future
            logger.exception("Backup callback %r raised", callback)
            if not future.done():
                future.set_exception(exc)
            return False
        return True
