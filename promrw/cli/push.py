"""Push command: send a single sample to a remote write endpoint."""

from typing import List, Optional

import typer

from promrw.cli.output import print_error, print_info, print_success
from promrw.client import RemoteWriteClient
from promrw.config import get_settings
from promrw.exceptions import PromRWError, TransmitError
from promrw.labels import parse_label
from promrw.logging_config import get_logger, log_error
from promrw.metric import Metric

logger = get_logger(__name__)


def push(
    name: str = typer.Argument(..., help="Metric name (value of the __name__ label)"),
    value: float = typer.Argument(..., help="Sample value"),
    label: Optional[List[str]] = typer.Option(
        None,
        "--label",
        "-l",
        help="Series label as name=value, may be repeated",
    ),
    timestamp: Optional[int] = typer.Option(
        None,
        "--timestamp",
        "-t",
        help="Sample timestamp in milliseconds since the Unix epoch (default: now)",
    ),
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="Remote write URL (default: from config)"
    ),
    user_agent: Optional[str] = typer.Option(
        None, "--user-agent", help="User-Agent identity (default: from config)"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds", min=0.001
    ),
) -> None:
    """
    Push one sample for a metric.

    Global labels, headers and compression come from the configuration;
    --url, --user-agent and --timeout override it.

    Examples:
        promrw push promrw_example 20 --label job=batch

        promrw push queue_depth 3 -l queue=emails -t 1698765432000 \\
            --url http://localhost:9090/api/v1/write
    """
    settings = get_settings()
    endpoint = url or settings.remote_write_url

    if not endpoint:
        print_error("No remote write URL configured, pass --url or set REMOTE_WRITE_URL")
        raise typer.Exit(1)

    try:
        labels = [parse_label(item) for item in label or []]
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    try:
        metric = Metric(name, labels)
        sample = metric.add_sample(value, timestamp)

        with RemoteWriteClient(
            endpoint,
            user_agent or settings.remote_write_user_agent,
            labels=settings.global_labels,
            timeout=timeout or settings.remote_write_timeout_seconds,
            compression=settings.remote_write_compression,
            headers=settings.remote_write_headers,
        ) as client:
            print_info(f"Pushing {name}={sample.value} @ {sample.timestamp} to {endpoint}")
            client.push(metric)

    except TransmitError as e:
        log_error(logger, e, "push", metric=name, status_code=e.status_code)
        print_error(e.message)
        raise typer.Exit(1)
    except PromRWError as e:
        log_error(logger, e, "push", metric=name)
        print_error(e.message)
        raise typer.Exit(1)

    print_success(f"Pushed 1 sample for {name}")
