"""Фазы теста и параметры нагрузки по умолчанию"""

import mmap
import os
from enum import Enum


KBYTE = 1024
MBYTE = 1024 * KBYTE


class WorkloadConfig:
    """Значения по умолчанию и ограничения"""

    FILE_SIZE_MB = 10  # на поток
    THREADS = 4
    RANDOM_OPS = 1000
    DIRECTORY = "."
    BLOCK_SIZE = 4 * KBYTE
    RAW_OFFSET_MB = 0

    MAX_PATHS = 50
    MMAP_CHUNK_SIZE = 1024 * MBYTE

    # Пороги latency, секунды
    LATENCY_STAT1 = 2
    LATENCY_STAT2 = 10

    READY_TIMEOUT = 30.0
    READY_POLL_INTERVAL = 0.01


class AccessPattern(Enum):
    """Подсказка ядру о характере доступа"""
    SEQUENTIAL = "sequential"
    RANDOM = "random"

    @property
    def fadvise(self):
        if not hasattr(os, "posix_fadvise"):
            return None
        if self is AccessPattern.SEQUENTIAL:
            return os.POSIX_FADV_SEQUENTIAL
        return os.POSIX_FADV_RANDOM

    @property
    def madvise(self):
        name = "MADV_SEQUENTIAL" if self is AccessPattern.SEQUENTIAL else "MADV_RANDOM"
        return getattr(mmap, name, None)


class Phase(Enum):
    """Четыре фазы теста в порядке запуска"""
    WRITE = 0
    RANDOM_WRITE = 1
    READ = 2
    RANDOM_READ = 3

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def terse_key(self) -> str:
        return _TERSE_KEYS[self]

    @property
    def is_random(self) -> bool:
        return self in (Phase.RANDOM_WRITE, Phase.RANDOM_READ)

    @property
    def is_write(self) -> bool:
        return self in (Phase.WRITE, Phase.RANDOM_WRITE)

    @property
    def pattern(self) -> AccessPattern:
        return AccessPattern.RANDOM if self.is_random else AccessPattern.SEQUENTIAL


_LABELS = {
    Phase.WRITE: "Write",
    Phase.RANDOM_WRITE: "Random Write",
    Phase.READ: "Read",
    Phase.RANDOM_READ: "Random Read",
}

_TERSE_KEYS = {
    Phase.WRITE: "write",
    Phase.RANDOM_WRITE: "rwrite",
    Phase.READ: "read",
    Phase.RANDOM_READ: "rread",
}
