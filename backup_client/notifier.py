# Notifier (Slack webhook)
import logging

import requests

from backup_client.config import DEFAULT_SLACK_WEBHOOK

logger = logging.getLogger(__name__)


def send_slack(msg, webhook=DEFAULT_SLACK_WEBHOOK):
    payload = {'text': msg}
    try:
        requests.post(webhook, json=payload, timeout=5)
    except requests.RequestException as e:
        logger.warning('Failed to send slack message: %s', e)


def format_result(result):
    """Build the notification text for a finished backup or an error string."""
    if isinstance(result, str):
        return f':x: Server backup failed: {result}'
    if result.is_complete():
        who = f' (triggered by {result.username})' if result.username else ''
        return f':white_check_mark: Server backup completed{who}: {result.message}'
    return f':x: Server backup failed: {result.message}'


def notify_result(result, webhook=DEFAULT_SLACK_WEBHOOK):
    send_slack(format_result(result), webhook=webhook)
