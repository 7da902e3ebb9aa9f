"""Performance profiler for parsing and formatting runs."""

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import psutil


@dataclass
class PerformanceMetrics:
    """Performance metrics for one profiled operation."""
    operation_name: str
    start_time: float
    end_time: float
    duration: float
    input_size: int
    output_size: int
    iterations: int
    memory_peak_mb: float
    memory_start_mb: float
    memory_end_mb: float
    cpu_percent: float
    throughput_mbps: float
    documents_per_second: float


class PerformanceProfiler:
    """
    Profiler measuring wall time, throughput, memory and CPU usage.

    Used by ``eonfmt bench`` to time repeated parse/format cycles of a document.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the performance profiler.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.metrics_history: List[PerformanceMetrics] = []
        self.current_operation: Optional[str] = None
        self.start_time: Optional[float] = None
        self.start_memory: Optional[float] = None
        self.peak_memory: float = 0
        self.cpu_samples: List[float] = []
        self.input_size = 0
        self.output_size = 0
        self.iterations = 1
        self._process: Optional[psutil.Process] = None

    @contextmanager
    def profile_operation(self, operation_name: str, input_size: int = 0, iterations: int = 1):
        """
        Context manager for profiling operations.

        Set ``output_size`` on the yielded profiler to record how much text
        the operation produced.

        Args:
            operation_name: Name of the operation being profiled
            input_size: Bytes processed per iteration
            iterations: How many times the operation repeats the work
        """
        self.start_profiling(operation_name, input_size, iterations)
        try:
            yield self
        finally:
            self.stop_profiling(self.output_size)

    def start_profiling(self, operation_name: str, input_size: int = 0, iterations: int = 1):
        """Begin a profiling session; ``input_size`` is the bytes handled per iteration."""
        self.current_operation = operation_name
        self.input_size = input_size
        self.output_size = 0
        self.iterations = max(iterations, 1)
        self.cpu_samples = []

        self._process = psutil.Process()
        self._process.cpu_percent()  # primes the counter, first reading is always 0
        self.start_memory = self._rss_mb()
        self.peak_memory = self.start_memory
        self.start_time = time.perf_counter()

        self.logger.debug(f"Profiling {operation_name} ({self.iterations} iterations, {input_size} bytes)")

    def sample_performance(self):
        """Record current memory and CPU usage of the running session."""
        if not self.current_operation:
            return
        try:
            self.peak_memory = max(self.peak_memory, self._rss_mb())
            self.cpu_samples.append(self._process.cpu_percent())
        except psutil.Error as e:
            self.logger.warning(f"Performance sampling failed: {e}")

    def stop_profiling(self, output_size: int = 0) -> PerformanceMetrics:
        """
        Close the running session and append its metrics to the history.

        Raises:
            ValueError: if no session was started
        """
        if not self.current_operation or self.start_time is None:
            raise ValueError("No active profiling session")

        end_time = time.perf_counter()
        self.sample_performance()
        duration = end_time - self.start_time
        try:
            end_memory = self._rss_mb()
        except psutil.Error:
            end_memory = self.start_memory

        if duration > 0:
            throughput = self.input_size * self.iterations / (1024 * 1024) / duration
            per_second = self.iterations / duration
        else:
            throughput = per_second = 0.0

        metrics = PerformanceMetrics(
            operation_name=self.current_operation,
            start_time=self.start_time,
            end_time=end_time,
            duration=duration,
            input_size=self.input_size,
            output_size=output_size,
            iterations=self.iterations,
            memory_peak_mb=self.peak_memory,
            memory_start_mb=self.start_memory,
            memory_end_mb=end_memory,
            cpu_percent=sum(self.cpu_samples) / len(self.cpu_samples) if self.cpu_samples else 0.0,
            throughput_mbps=throughput,
            documents_per_second=per_second,
        )
        self.metrics_history.append(metrics)
        self.logger.info(f"{metrics.operation_name}: {duration:.4f}s, {throughput:.2f} MB/s, "
                         f"{per_second:.1f} documents/s, peak {self.peak_memory:.1f} MB")

        self.current_operation = None
        self.start_time = None
        self.start_memory = None
        return metrics

    def _rss_mb(self) -> float:
        return self._process.memory_info().rss / (1024 * 1024)

    def get_performance_summary(self) -> Dict[str, Any]:
        """
        Get summary of all performance metrics.

        Returns:
            Dictionary with performance summary
        """
        if not self.metrics_history:
            return {"total_operations": 0}

        count = len(self.metrics_history)
        return {
            "total_operations": count,
            "total_duration": sum(m.duration for m in self.metrics_history),
            "average_throughput_mbps": sum(m.throughput_mbps for m in self.metrics_history) / count,
            "average_memory_peak_mb": sum(m.memory_peak_mb for m in self.metrics_history) / count,
            "operations": [
                {
                    "name": m.operation_name,
                    "duration": m.duration,
                    "throughput": m.throughput_mbps,
                    "documents_per_second": m.documents_per_second,
                }
                for m in self.metrics_history
            ]
        }

    def export_metrics(self, format: str = "summary") -> str:
        """
        Export performance metrics in the given format.

        Args:
            format: Export format ("json", "csv", "summary")

        Returns:
            Formatted metrics string
        """
        if format == "json":
            return json.dumps([asdict(m) for m in self.metrics_history], indent=2)

        elif format == "csv":
            lines = ["operation,duration,iterations,input_size,output_size,memory_peak_mb,throughput_mbps"]
            for m in self.metrics_history:
                lines.append(f"{m.operation_name},{m.duration},{m.iterations},{m.input_size},"
                             f"{m.output_size},{m.memory_peak_mb},{m.throughput_mbps}")
            return "\n".join(lines)

        elif format == "summary":
            lines = []
            for m in self.metrics_history:
                lines.extend([
                    f"{m.operation_name}:",
                    f"  Iterations: {m.iterations}",
                    f"  Duration: {m.duration:.4f}s ({m.duration / m.iterations * 1000:.3f} ms each)",
                    f"  Throughput: {m.throughput_mbps:.2f} MB/s",
                    f"  Documents/s: {m.documents_per_second:.1f}",
                    f"  Memory Peak: {m.memory_peak_mb:.1f} MB",
                    f"  CPU Average: {m.cpu_percent:.1f}%",
                ])
            return "\n".join(lines)

        else:
            raise ValueError(f"Unsupported export format: {format}")
