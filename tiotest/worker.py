"""Состояние потока и сам рабочий поток"""

import logging
import mmap
import threading
import time
import zlib
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from .base import run_generic_test
from .errors import IOFailure, TiotestError
from .latency import Latency
from .timing import THREAD_SCOPE, Timing
from .workloads import MBYTE, Phase, WorkloadConfig


log = logging.getLogger(__name__)


@dataclass
class PhaseRecord:
    """Замеры одного потока в одной фазе"""
    timing: Timing = field(default_factory=lambda: Timing(scope=THREAD_SCOPE))
    latency: Latency = field(default_factory=Latency)
    blocks: int = 0


@dataclass
class WorkerState:
    """Файл, буфер и замеры, принадлежащие одному потоку"""
    number: int
    path: str
    file_size_mb: int
    block_size: int
    random_ops: int
    file_offset: int = 0  # смещение на raw-устройстве, для файлов 0
    buffer: Optional[mmap.mmap] = field(default=None, repr=False)
    buffer_crc: int = 0
    created: bool = False
    random_write_seed: Optional[int] = None
    records: Dict[Phase, PhaseRecord] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        for phase in Phase:
            self.records.setdefault(phase, PhaseRecord())

    @property
    def file_size(self) -> int:
        return self.file_size_mb * MBYTE

    def record(self, phase: Phase) -> PhaseRecord:
        return self.records[phase]

    def allocate(self):
        """Выровненный по странице буфер с фиксированным случайным содержимым"""
        self.buffer = mmap.mmap(-1, self.block_size)
        rng = np.random.default_rng(self.number)
        self.buffer[:] = rng.integers(0, 256, size=self.block_size, dtype=np.uint8).tobytes()
        self.buffer_crc = zlib.crc32(self.buffer)

    def release(self):
        if self.buffer is not None:
            self.buffer.close()
            self.buffer = None


class StartBarrier:
    """
    Общий старт для параллельной фазы.

    Поток отмечает свою готовность и ждёт, пока координатор его отпустит.
    Если координатор отпускает с abort, потоки выходят без I/O.
    """

    def __init__(self, parties: int):
        self.ready: List[bool] = [False] * parties
        self.aborted = False
        self._event = threading.Event()

    def mark_ready(self, slot: int):
        self.ready[slot] = True

    def ready_count(self) -> int:
        return sum(1 for flag in self.ready if flag)

    def wait_ready(self, timeout: float) -> bool:
        """Ждать готовности всех потоков не дольше timeout секунд"""
        deadline = time.monotonic() + timeout
        while self.ready_count() < len(self.ready):
            if time.monotonic() >= deadline:
                return False
            time.sleep(WorkloadConfig.READY_POLL_INTERVAL)
        return True

    def release(self, abort: bool = False):
        self.aborted = abort
        self._event.set()

    def wait(self) -> bool:
        """False означает, что фаза отменена"""
        self._event.wait()
        return not self.aborted


class Worker(threading.Thread):
    """Выполняет одну фазу для одного WorkerState"""

    def __init__(self, phase: Phase, state: WorkerState, config,
                 barrier: Optional[StartBarrier] = None):
        super().__init__(name=f"tiotest-{phase.terse_key}-{state.number}", daemon=True)
        self.phase = phase
        self.state = state
        self.config = config
        self.barrier = barrier
        self.error: Optional[TiotestError] = None

    def _mark_ready(self):
        if self.barrier is not None:
            self.barrier.mark_ready(self.state.number)

    def run(self):
        self._mark_ready()
        if self.barrier is not None and not self.barrier.wait():
            log.debug("%s: start aborted", self.name)
            return

        try:
            run_generic_test(self.phase, self.state, self.config)
        except TiotestError as e:
            self.error = e
        except Exception as e:
            # любая ошибка потока фатальна для всего запуска
            log.debug("%s: unexpected error", self.name, exc_info=True)
            self.error = IOFailure(f"{self.name}: {e}")
