"""
Snapshot telemetry.

Span events only carry sizes, timings and the generation mode.
Record contents (ids, hashes, user ids) never leave the process.
"""
import os
import logging
from typing import Literal

from azure.monitor.opentelemetry import configure_azure_monitor
from opentelemetry.trace import get_current_span

logger = logging.getLogger("drumfeed.telemetry")


_configured = False


def init_telemetry():
    """
    Hooks the feed into Application Insights when
    AZURE_APPINSIGHTS_CONNECTION_STRING is set.

    create_app() may run more than once per process (the module-level
    app plus any test or server instance); the exporter is only
    installed on the first call.
    """
    global _configured

    connection_string = os.getenv("AZURE_APPINSIGHTS_CONNECTION_STRING")
    if not connection_string or _configured:
        return

    configure_azure_monitor(
        connection_string=connection_string
    )
    _configured = True
    logger.info("Azure Monitor telemetry enabled for drumfeed")


def emit_snapshot_telemetry(
    generation_latency_ms: int,
    record_count: int,
    snapshot_mode: Literal["synthesized", "evolved"],
):
    """
    Emit one event per successful snapshot generation.

    Attributes are fixed:
    - generation_latency_ms: int
    - record_count: int
    - snapshot_mode: "synthesized" | "evolved"
    """
    assert isinstance(generation_latency_ms, int), "generation_latency_ms must be int"
    assert isinstance(record_count, int), "record_count must be int"
    assert snapshot_mode in ("synthesized", "evolved"), f"snapshot_mode must be 'synthesized' or 'evolved', got {snapshot_mode}"

    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="drumfeed.snapshot",
        attributes={
            "generation_latency_ms": generation_latency_ms,
            "record_count": record_count,
            "snapshot_mode": snapshot_mode,
        }
    )


def scrub_exception_for_telemetry(exception: Exception) -> str:
    """
    Class names only. Engine failures are wrapped in
    SnapshotGenerationError, so the wrapped cause's class is appended
    (e.g. "SnapshotGenerationError:RuntimeError"); messages may quote
    drum ids or user ids and are never exported.
    """
    name = type(exception).__name__
    cause = exception.__cause__
    if cause is not None:
        name = f"{name}:{type(cause).__name__}"
    return name


def emit_exception_telemetry(
    exception: Exception,
    failure_stage: Literal["generation", "unhandled"],
):
    """
    One event per failed request: "generation" for snapshot
    synthesis/evolution failures, "unhandled" for anything that
    reached the catch-all handler.
    """
    assert failure_stage in ("generation", "unhandled"), f"failure_stage must be 'generation' or 'unhandled', got {failure_stage}"

    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="drumfeed.exception",
        attributes={
            "exception_type": scrub_exception_for_telemetry(exception),
            "failure_stage": failure_stage,
        }
    )
