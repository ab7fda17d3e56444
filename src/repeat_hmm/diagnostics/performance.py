"""
Performance monitoring of pipeline runs.
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import psutil

MONITOR_THREAD_NAME = "repeat-hmm-perf"


@dataclass
class PerformanceMetrics:
    """Performance metrics container."""
    start_time: float
    end_time: Optional[float] = None
    peak_memory_mb: float = 0.0
    reads_processed: int = 0
    cpu_percent: List[float] = field(default_factory=list)

    @property
    def total_time(self) -> float:
        """Total execution time in seconds."""
        if self.end_time is None:
            return 0.0
        return self.end_time - self.start_time


class PerformanceMonitor:
    """Monitor performance metrics during pipeline execution."""

    def __init__(self, sampling_interval: float = 1.0):
        """
        Initialize performance monitor.

        Args:
            sampling_interval: Time between samples in seconds
        """
        self.sampling_interval = sampling_interval
        self.metrics = PerformanceMetrics(start_time=time.time())
        self.monitoring = False
        self.thread = None
        self.cpu_samples = []
        self.memory_samples = []
        self._stop_event = threading.Event()

    def start(self):
        """Start performance monitoring."""
        self.metrics = PerformanceMetrics(start_time=time.time())
        self.cpu_samples = []
        self.memory_samples = []
        self._stop_event.clear()
        self.monitoring = True
        self.thread = threading.Thread(target=self._monitor_loop, name=MONITOR_THREAD_NAME, daemon=True)
        self.thread.start()

    def stop(self):
        """Stop performance monitoring."""
        self.monitoring = False
        self._stop_event.set()
        if self.thread:
            self.thread.join(timeout=2.0)
        self.metrics.end_time = time.time()

        if self.memory_samples:
            self.metrics.peak_memory_mb = max(self.memory_samples)

        if self.cpu_samples:
            self.metrics.cpu_percent = list(self.cpu_samples)

    def record_reads(self, count: int = 1):
        self.metrics.reads_processed += count

    def _monitor_loop(self):
        """Background monitoring loop."""
        process = psutil.Process()

        while self.monitoring:
            try:
                self.cpu_samples.append(process.cpu_percent(interval=None))
                self.memory_samples.append(process.memory_info().rss / (1024 * 1024))
            except psutil.NoSuchProcess:
                break
            self._stop_event.wait(self.sampling_interval)

    def get_report(self) -> Dict:
        """Get performance report."""
        total = self.metrics.total_time
        report = {
            'total_time_seconds': total,
            'peak_memory_mb': self.metrics.peak_memory_mb,
            'avg_cpu_percent': sum(self.cpu_samples) / len(self.cpu_samples) if self.cpu_samples else 0,
            'reads_processed': self.metrics.reads_processed,
            'reads_per_second': self.metrics.reads_processed / total if total > 0 else 0,
            'start_time': datetime.fromtimestamp(self.metrics.start_time).isoformat(),
            'end_time': datetime.fromtimestamp(self.metrics.end_time).isoformat() if self.metrics.end_time else None,
            'system_info': self._get_system_info(),
        }

        if self.memory_samples:
            report['memory_timeline'] = {
                'samples': len(self.memory_samples),
                'min_mb': min(self.memory_samples),
                'max_mb': max(self.memory_samples),
                'avg_mb': sum(self.memory_samples) / len(self.memory_samples),
            }

        return report

    def _get_system_info(self) -> Dict:
        """Get system information."""
        try:
            return {
                'cpu_count': psutil.cpu_count(),
                'total_memory_mb': psutil.virtual_memory().total / (1024 * 1024),
                'available_memory_mb': psutil.virtual_memory().available / (1024 * 1024),
            }
        except (psutil.Error, OSError):
            return {'error': 'Could not get system info'}

    def format_report(self) -> str:
        """Performance report as text."""
        report = self.get_report()

        lines = [
            "=" * 60,
            "PERFORMANCE REPORT",
            "=" * 60,
            f"Total time: {report['total_time_seconds']:.2f} seconds",
            f"Reads: {report['reads_processed']} ({report['reads_per_second']:.2f} reads/s)",
            f"Peak memory: {report['peak_memory_mb']:.1f} MB",
            f"Average CPU: {report['avg_cpu_percent']:.1f}%",
        ]

        if 'memory_timeline' in report:
            mem = report['memory_timeline']
            lines.append(f"Memory: {mem['min_mb']:.1f}-{mem['max_mb']:.1f} MB over {mem['samples']} samples")

        lines.append("=" * 60)
        return '\n'.join(lines)


__all__ = [
    'MONITOR_THREAD_NAME',
    'PerformanceMetrics',
    'PerformanceMonitor',
]
