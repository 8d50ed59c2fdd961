# Backup status record returned by each poll
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class BackupStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class ServerBackup:
    status: BackupStatus
    message: str = ""
    progress_status: Optional[str] = None
    time: Optional[str] = None
    username: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict) -> "ServerBackup":
        raw_status = data.get("status")
        try:
            status = BackupStatus(raw_status)
        except ValueError:
            logger.warning("Unknown backup status %r, treating it as an error", raw_status)
            status = BackupStatus.ERROR

        user = data.get("user")
        username = user.get("name") if isinstance(user, dict) else data.get("username")

        return cls(
            status=status,
            message=data.get("message") or "",
            progress_status=data.get("progress_status"),
            time=data.get("time"),
            username=username,
        )

    def to_json(self) -> dict:
        payload = {"status": self.status.value, "message": self.message}
        if self.progress_status is not None:
            payload["progress_status"] = self.progress_status
        if self.time is not None:
            payload["time"] = self.time
        if self.username is not None:
            payload["user"] = {"name": self.username}
        return payload

    def is_in_progress(self) -> bool:
        return self.status is BackupStatus.IN_PROGRESS

    def is_complete(self) -> bool:
        return self.status is BackupStatus.COMPLETED

    def is_error(self) -> bool:
        return self.status is BackupStatus.ERROR
