"""Многопоточный генератор I/O нагрузки"""

from .base import GenericTest, PhaseResult, run_generic_test
from .config import TestConfiguration
from .coordinator import ThreadTest
from .latency import Latency
from .metrics import MetricsCollector
from .timing import Timing
from .workloads import Phase, WorkloadConfig

__all__ = [
    'GenericTest',
    'PhaseResult',
    'run_generic_test',
    'TestConfiguration',
    'ThreadTest',
    'Latency',
    'MetricsCollector',
    'Timing',
    'Phase',
    'WorkloadConfig',
]
