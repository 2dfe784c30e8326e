"""Observability Module - Logging, Tracing, and Metrics

This module provides:
1. Logging setup shared by the CLI and tests
2. Tracing of collaborator calls (Completion / Analysis services)
3. Latency and success metrics per collaborator
"""
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime

LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'

logger = logging.getLogger("nightmind")


def configure_logging(level: str = "INFO"):
    """Configure structured logging for the process."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )


@dataclass
class CallTrace:
    """A single collaborator call."""
    service_name: str
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    duration_ms: Optional[float] = None
    input_summary: str = ""
    success: bool = True
    error: Optional[str] = None

    def complete(self, success: bool = True, error: str = None):
        """Mark trace as complete."""
        self.end_time = datetime.now()
        self.duration_ms = (self.end_time - self.start_time).total_seconds() * 1000
        self.success = success
        self.error = error


@dataclass
class ServiceMetrics:
    """Aggregated metrics for collaborator calls."""
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    total_latency_ms: float = 0
    service_latencies: Dict[str, list] = field(default_factory=dict)
    service_failures: Dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if self.total_calls == 0:
            return 0.0
        return self.successful_calls / self.total_calls

    @property
    def avg_latency_ms(self) -> float:
        if self.total_calls == 0:
            return 0.0
        return self.total_latency_ms / self.total_calls

    def record(self, trace: CallTrace):
        """Record a trace into metrics."""
        self.total_calls += 1
        if trace.success:
            self.successful_calls += 1
        else:
            self.failed_calls += 1
            self.service_failures[trace.service_name] = self.service_failures.get(trace.service_name, 0) + 1

        if trace.duration_ms is not None:
            self.total_latency_ms += trace.duration_ms
            self.service_latencies.setdefault(trace.service_name, []).append(trace.duration_ms)

    def summary(self) -> Dict[str, Any]:
        """Return metrics summary."""
        service_avg = {}
        for service, latencies in self.service_latencies.items():
            if latencies:
                service_avg[service] = sum(latencies) / len(latencies)

        return {
            "total_calls": self.total_calls,
            "success_rate": f"{self.success_rate:.1%}",
            "avg_latency_ms": f"{self.avg_latency_ms:.0f}ms",
            "service_avg_latency": service_avg,
            "service_failures": dict(self.service_failures),
        }

    def reset(self):
        self.__init__()


# Global metrics instance
metrics = ServiceMetrics()


class Tracer:
    """Context manager for tracing a collaborator call."""

    def __init__(self, service_name: str, input_data: Any = None):
        self.trace = CallTrace(service_name=service_name)
        if input_data:
            self.trace.input_summary = str(input_data)[:200]

    def __enter__(self):
        logger.info(f"▶ {self.trace.service_name} started")
        return self.trace

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.trace.complete(success=False, error=str(exc_val))
            logger.error(f"✖ {self.trace.service_name} failed: {exc_val}")
        else:
            self.trace.complete(success=True)
            logger.info(f"✔ {self.trace.service_name} completed in {self.trace.duration_ms:.0f}ms")

        metrics.record(self.trace)
        return False  # Don't suppress exceptions


def get_metrics_summary() -> Dict[str, Any]:
    """Get current metrics summary for dashboard/API."""
    return metrics.summary()
