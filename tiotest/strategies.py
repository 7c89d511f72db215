"""Выбор следующего смещения для фазы теста

Фазы через дескриптор работают с абсолютными смещениями в файле.
Фазы через mmap работают со смещениями от начала
текущей отображённой части.
"""

import time
from abc import ABC, abstractmethod

from .workloads import Phase


FALLBACK_SEED = 0xDEADBEEF

_UINT32 = 0xFFFFFFFF
_UINT64 = 0xFFFFFFFFFFFFFFFF


def rand_r(seed: int):
    """Один шаг генератора rand_r из glibc. Возвращает (value, new_seed)."""
    nxt = seed & _UINT32

    nxt = (nxt * 1103515245 + 12345) & _UINT32
    result = (nxt // 65536) % 2048

    nxt = (nxt * 1103515245 + 12345) & _UINT32
    result <<= 10
    result ^= (nxt // 65536) % 1024

    nxt = (nxt * 1103515245 + 12345) & _UINT32
    result <<= 10
    result ^= (nxt // 65536) % 1024

    return result, nxt


def get_random_seed() -> int:
    """Микросекунды текущего времени"""
    try:
        return int(time.time() * 1000000) % 1000000
    except OSError:
        return FALLBACK_SEED


class ReentrantRandom:
    """Генератор со своим состоянием, один на поток и фазу"""

    def __init__(self, seed: int):
        self.seed = seed & _UINT32

    def next(self) -> int:
        value, self.seed = rand_r(self.seed)
        return value

    def uniform(self, limit: int) -> int:
        """Число из [0, limit), расширяется, если диапазона генератора мало"""
        rr = self.next()
        if rr < limit:
            # сдвиг 32-битного int со знаковым расширением до 64 бит
            high = (self.next() << 16) & _UINT32
            if high & 0x80000000:
                high -= 1 << 32
            rr = (rr | high) & _UINT64
        return rr % limit


class OffsetStrategy(ABC):
    """Следующее смещение по предыдущему"""

    def __init__(self, block_size: int):
        self.block_size = block_size

    @abstractmethod
    def next(self, previous: int) -> int:
        pass

    def first(self, base: int) -> int:
        """Начальное `previous`, чтобы первый последовательный шаг попал на base"""
        return base - self.block_size


class SequentialOffset(OffsetStrategy):
    def next(self, previous: int) -> int:
        return previous + self.block_size


class RandomOffset(OffsetStrategy):
    """Равномерные выровненные по блоку смещения по всему файлу"""

    def __init__(self, block_size: int, base_offset: int, blocks: int, rng: ReentrantRandom):
        super().__init__(block_size)
        self.base_offset = base_offset
        self.blocks = blocks
        self.rng = rng

    def next(self, previous: int) -> int:
        return self.base_offset + self.rng.uniform(self.blocks) * self.block_size


class SequentialLocation(SequentialOffset):
    """Последовательный проход по отображённой части"""


class RandomLocation(OffsetStrategy):
    """Равномерные выровненные по блоку смещения внутри одной части"""

    def __init__(self, block_size: int, chunk_blocks: int, rng: ReentrantRandom):
        super().__init__(block_size)
        self.chunk_blocks = chunk_blocks
        self.rng = rng

    def next(self, previous: int) -> int:
        return self.rng.uniform(self.chunk_blocks) * self.block_size


def offset_strategy(phase: Phase, block_size: int, base_offset: int, blocks: int,
                    rng: ReentrantRandom) -> OffsetStrategy:
    if phase.is_random:
        return RandomOffset(block_size, base_offset, blocks, rng)
    return SequentialOffset(block_size)


def location_strategy(phase: Phase, block_size: int, chunk_blocks: int,
                      rng: ReentrantRandom) -> OffsetStrategy:
    if phase.is_random:
        return RandomLocation(block_size, chunk_blocks, rng)
    return SequentialLocation(block_size)
