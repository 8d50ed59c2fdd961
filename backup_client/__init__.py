from backup_client.models import BackupStatus, ServerBackup
from backup_client.server_backup_api import BackupFailed, ServerBackupAPI

__all__ = ["BackupStatus", "ServerBackup", "ServerBackupAPI", "BackupFailed"]
