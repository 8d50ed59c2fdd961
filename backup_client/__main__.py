# Trigger a server backup and wait for it to finish
import argparse
import dataclasses
import concurrent.futures
import logging
import sys

from backup_client.config import Settings
from backup_client.metrics import serve_metrics
from backup_client.notifier import notify_result
from backup_client.server_backup_api import BackupFailed, ServerBackupAPI


def main(argv=None, settings=None, session=None):
    settings = settings or Settings.from_env()

    parser = argparse.ArgumentParser(prog="backup_client", description="Trigger a server backup and wait for it to finish")
    parser.add_argument("--base-url", default=settings.api_base, help="server base URL")
    parser.add_argument("--timeout", type=float, default=None, help="give up waiting after this many seconds")
    parser.add_argument("--notify", action="store_true", default=settings.notify, help="post the outcome to Slack")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    settings = dataclasses.replace(settings, api_base=args.base_url.rstrip("/"))

    if settings.metrics_port:
        serve_metrics(settings.metrics_port)

    client = ServerBackupAPI.from_settings(settings, session=session)
    try:
        backup = client.start_and_wait(timeout=args.timeout)
    except BackupFailed as e:
        if args.notify:
            notify_result(e.message, webhook=settings.slack_webhook)
        return 1
    except concurrent.futures.TimeoutError:
        logging.getLogger(__name__).error("Timed out after %ss waiting for server backup", args.timeout)
        return 1

    if args.notify:
        notify_result(backup, webhook=settings.slack_webhook)
    return 0


if __name__ == "__main__":
    sys.exit(main())
