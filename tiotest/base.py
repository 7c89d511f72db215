"""Общий драйвер теста для всех четырёх фаз"""

import logging
import mmap
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict

from .errors import ConsistencyError, IOFailure
from .operations import OpStatus, descriptor_operation, mapped_operation
from .strategies import ReentrantRandom, get_random_seed, location_strategy, offset_strategy
from .workloads import Phase, WorkloadConfig


log = logging.getLogger(__name__)


@dataclass
class PhaseResult:
    """Итоговые показатели одной фазы по всем потокам"""
    name: str
    megabytes: float
    blocks: int
    realtime_sec: float
    usertime_sec: float
    systime_sec: float
    throughput_mbps: float
    user_cpu_pct: float
    sys_cpu_pct: float
    latency_avg_ms: float
    latency_max_ms: float
    latency_p95_ms: float
    latency_p99_ms: float
    pct_over_stat1: float
    pct_over_stat2: float
    samples: int

    def to_dict(self):
        return asdict(self)


class GenericTest(ABC):
    """
    Одна фаза для одного потока.

    Открывает файл и задаёт ему размер, замеряет весь цикл операций
    таймером фазы, пишет latency каждой операции и в конце добавляет
    число операций к счётчику блоков. Сам цикл реализуют подклассы.
    """

    def __init__(self, phase: Phase, state, config):
        self.phase = phase
        self.state = state
        self.config = config
        self.record = state.record(phase)
        self.op_count = config.operation_count(phase)
        self.fd = None

    def setup(self):
        """Открытие и подготовка файла"""
        flags = os.O_RDWR
        if not self.config.raw_drives:
            flags |= os.O_CREAT
            # следующие фазы должны видеть данные предыдущих
            if not self.state.created:
                flags |= os.O_TRUNC
        if self.config.sync_writing:
            flags |= os.O_SYNC

        try:
            self.fd = os.open(self.state.path, flags, 0o600)
        except OSError as e:
            raise IOFailure(f"{e.strerror}: {self.state.path}") from e
        self.state.created = True

        if not self.config.raw_drives:
            log.debug("calling ftruncate() on file descriptor")
            try:
                os.ftruncate(self.fd, self.config.blocks * self.state.block_size)
            except OSError as e:
                self.close()
                raise IOFailure(f"ftruncate() failed on {self.state.path}: {e}") from e

        advice = self.phase.pattern.fadvise
        if advice is not None:
            try:
                os.posix_fadvise(self.fd, self.state.file_offset, self.state.file_size, advice)
            except OSError as e:
                log.debug("posix_fadvise() ignored on %s: %s", self.state.path, e)

    @abstractmethod
    def execute(self, rng: ReentrantRandom):
        """Выполнить self.op_count операций"""
        pass

    def close(self):
        if self.fd is not None:
            os.close(self.fd)
            self.fd = None

    def seed(self) -> int:
        """
        Seed генератора смещений для фазы.

        При проверке данных случайное чтение повторяет последовательность
        случайной записи, иначе оно попадало бы в незаписанные блоки.
        """
        state = self.state
        if (self.phase is Phase.RANDOM_READ and self.config.consistency_check
                and state.random_write_seed is not None):
            return state.random_write_seed

        seed = get_random_seed()
        if self.phase is Phase.RANDOM_WRITE:
            state.random_write_seed = seed
        return seed

    def run(self) -> int:
        log.info("Doing %s test", self.phase.label.lower())
        rng = ReentrantRandom(self.seed())
        timing = self.record.timing

        self.setup()
        try:
            timing.start()
            self.execute(rng)
            os.fsync(self.fd)
        except OSError as e:
            raise IOFailure(f"{self.phase.label} on {self.state.path} failed: {e}") from e
        finally:
            self.close()
        timing.stop()

        self.record.blocks += self.op_count
        return self.op_count

    def _timed(self, operation, target, location: int, mapping=None):
        start = time.perf_counter()
        status = operation(target, location, self.state)
        if mapping is not None and self.config.sync_writing:
            mapping.flush()
        self.record.latency.record(time.perf_counter() - start)

        if status is OpStatus.MISMATCH:
            raise ConsistencyError(
                f"{self.phase.label}: data mismatch at 0x{location:x} in {self.state.path}")
        if status is not OpStatus.OK:
            raise IOFailure(
                f"{self.phase.label}: short transfer at 0x{location:x} in {self.state.path}")


class DescriptorTest(GenericTest):
    """Цикл pread/pwrite по дескриптору"""

    def execute(self, rng: ReentrantRandom):
        block_size = self.state.block_size
        strategy = offset_strategy(self.phase, block_size, self.state.file_offset,
                                   self.config.blocks, rng)
        operation = descriptor_operation(self.phase, self.config.consistency_check)

        offset = strategy.first(self.state.file_offset)
        for _ in range(self.op_count):
            offset = strategy.next(offset)
            self._timed(operation, self.fd, offset)


class MappedTest(GenericTest):
    """Копирование через mmap, файл отображается по частям"""

    def execute(self, rng: ReentrantRandom):
        block_size = self.state.block_size
        chunk_limit = WorkloadConfig.MMAP_CHUNK_SIZE
        total_size = self.config.blocks * block_size
        chunks = (total_size + chunk_limit - 1) // chunk_limit
        operation = mapped_operation(self.phase, self.config.consistency_check)

        remaining = self.op_count
        for chunk in range(chunks):
            chunk_offset = self.state.file_offset + chunk * chunk_limit
            chunk_size = min(chunk_limit, total_size - chunk * chunk_limit)
            chunk_blocks = chunk_size // block_size

            # случайные операции делятся между частями поровну
            if self.phase.is_random:
                ops = remaining // (chunks - chunk)
            else:
                ops = chunk_blocks
            remaining -= ops

            strategy = location_strategy(self.phase, block_size, chunk_blocks, rng)
            self._run_chunk(operation, strategy, chunk_offset, chunk_size, ops)

    def _run_chunk(self, operation, strategy, chunk_offset: int, chunk_size: int, ops: int):
        try:
            mapping = mmap.mmap(self.fd, chunk_size, offset=chunk_offset)
        except (OSError, ValueError) as e:
            raise IOFailure(f"Error mmap()ing {self.state.path}: size={chunk_size}, "
                            f"offset=0x{chunk_offset:x}: {e}") from e

        with mapping:
            advice = self.phase.pattern.madvise
            if advice is not None:
                mapping.madvise(advice)

            location = strategy.first(0)
            for _ in range(ops):
                location = strategy.next(location)
                self._timed(operation, mapping, location, mapping=mapping)


def run_generic_test(phase: Phase, state, config) -> int:
    """Запуск фазы для одного потока, возвращает число обработанных блоков"""
    test_cls = MappedTest if config.use_mmap else DescriptorTest
    return test_cls(phase, state, config).run()
