from prometheus_client import Counter, Gauge, start_http_server

# -----------------------------
# Prometheus Metrics (GLOBAL)
# -----------------------------
backup_polls_total = Counter(
    "backup_polls_total",
    "Total number of backup status polls"
)

backup_poll_failures_total = Counter(
    "backup_poll_failures_total",
    "Total number of failed backup status polls"
)

backup_in_progress = Gauge(
    "backup_in_progress",
    "Backup polling loop active (1 = polling, 0 = idle)"
)

backup_last_success_timestamp = Gauge(
    "backup_last_success_timestamp",
    "Last successful backup timestamp"
)

backup_last_failure_timestamp = Gauge(
    "backup_last_failure_timestamp",
    "Last failed backup timestamp"
)


def serve_metrics(port: int) -> None:
    start_http_server(port)
