"""Создание потоков и прогон их через включённые фазы"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Set

from .config import TestConfiguration
from .errors import WorkerStartError
from .timing import Timing
from .worker import StartBarrier, Worker, WorkerState
from .workloads import MBYTE, Phase


log = logging.getLogger(__name__)


class ThreadTest:
    """
    Полный запуск: подготовка потоков, четыре фазы, очистка.

    Работает как context manager: временные файлы и буферы
    освобождаются на выходе, даже если фаза упала.
    """

    def __init__(self, config: TestConfiguration):
        self.config = config
        self.workers: List[WorkerState] = []
        self.totals: Dict[Phase, Timing] = {phase: Timing() for phase in Phase}
        self.completed: Set[Phase] = set()

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return False

    def initialize(self):
        config = self.config
        pid = os.getpid()

        if config.raw_drives:
            if config.thread_offset_mb != 0:
                stride = (config.thread_offset_mb + config.file_size_mb) * MBYTE
            else:
                stride = config.file_size_mb * MBYTE
            first = config.thread_offset_mb * MBYTE if config.offset_first_thread else 0
        else:
            stride = first = 0
        next_offset = {path: first for path in config.paths}

        for number in range(config.threads):
            target = config.paths[number % len(config.paths)]
            if config.raw_drives:
                path = target
                file_offset = next_offset[target]
                next_offset[target] += stride
            else:
                path = str(Path(target) / f"_tiotest_pid{pid}.thr{number}")
                file_offset = 0

            state = WorkerState(
                number=number,
                path=path,
                file_size_mb=config.file_size_mb,
                block_size=config.block_size,
                random_ops=config.random_ops,
                file_offset=file_offset,
            )
            state.allocate()
            self.workers.append(state)
            log.debug("worker %d: %s at offset 0x%x", number, path, file_offset)

    def cleanup(self):
        for state in self.workers:
            if not self.config.raw_drives:
                try:
                    os.unlink(state.path)
                except FileNotFoundError:
                    pass
            state.release()
        self.workers = []

    def run(self):
        """Запуск всех включённых фаз по порядку"""
        for phase in self.config.phases:
            sequential = phase is Phase.WRITE and self.config.sequential_writing
            log.info("Waiting %s threads to finish...", phase.label.lower())
            self.run_phase(phase, sequential)

    def run_phase(self, phase: Phase, sequential: bool = False) -> bool:
        """False, если фаза пропущена: потоки не успели подготовиться"""
        timing = self.totals[phase]

        if sequential:
            timing.start()
            for state in self.workers:
                worker = Worker(phase, state, self.config)
                self._start(worker)
                log.info("Waiting previous thread to finish before starting a new one")
                worker.join()
                self._raise_failure([worker])
            timing.stop()
            self.completed.add(phase)
            return True

        barrier = StartBarrier(len(self.workers))
        workers = [Worker(phase, state, self.config, barrier) for state in self.workers]
        started = []
        try:
            for worker in workers:
                self._start(worker)
                started.append(worker)
        except WorkerStartError:
            barrier.release(abort=True)
            for worker in started:
                worker.join()
            raise

        if not barrier.wait_ready(self.config.ready_timeout):
            print(f"Unable to start {len(workers)} threads "
                  f"(started {barrier.ready_count()})", file=sys.stderr)
            barrier.release(abort=True)
            for worker in workers:
                worker.join()
            return False

        log.info("Created threads")
        timing.start()
        barrier.release()
        for worker in workers:
            worker.join()
        timing.stop()
        log.info("Done!")

        self._raise_failure(workers)
        self.completed.add(phase)
        return True

    @staticmethod
    def _start(worker: Worker):
        try:
            worker.start()
        except RuntimeError as e:
            raise WorkerStartError(f"Error starting {worker.name}: {e}") from e

    @staticmethod
    def _raise_failure(workers: List[Worker]):
        for worker in workers:
            if worker.error is not None:
                raise worker.error
