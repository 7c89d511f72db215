"""Проверенная неизменяемая конфигурация запуска"""

import sys
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import ConfigurationError
from .workloads import MBYTE, Phase, WorkloadConfig


@dataclass(frozen=True)
class TestConfiguration:
    """Всё, что координатору и потокам нужно знать о запуске"""
    threads: int = WorkloadConfig.THREADS
    block_size: int = WorkloadConfig.BLOCK_SIZE
    file_size_mb: int = WorkloadConfig.FILE_SIZE_MB
    random_ops: int = WorkloadConfig.RANDOM_OPS
    paths: Tuple[str, ...] = (WorkloadConfig.DIRECTORY,)
    raw_drives: bool = False
    sync_writing: bool = False
    use_mmap: bool = False
    consistency_check: bool = False
    sequential_writing: bool = False
    show_latency: bool = True
    terse: bool = False
    thread_offset_mb: int = WorkloadConfig.RAW_OFFSET_MB
    offset_first_thread: bool = False
    tests_to_run: Tuple[bool, ...] = (True, True, True, True)
    debug_level: int = 0
    ready_timeout: float = WorkloadConfig.READY_TIMEOUT
    output_dir: Optional[str] = None
    plots: bool = False

    __test__ = False  # чтобы pytest не собирал этот класс

    def __post_init__(self):
        self.validate()

    @property
    def file_size(self) -> int:
        return self.file_size_mb * MBYTE

    @property
    def blocks(self) -> int:
        """Целых блоков на поток, размер файла округляется вниз до кратного блоку"""
        return self.file_size // self.block_size

    @property
    def phases(self):
        return [phase for phase in Phase if self.tests_to_run[phase.value]]

    def runs(self, phase: Phase) -> bool:
        return self.tests_to_run[phase.value]

    def operation_count(self, phase: Phase) -> int:
        return self.random_ops if phase.is_random else self.blocks

    def validate(self):
        if self.file_size_mb <= 0:
            raise ConfigurationError("Wrong file size")
        if self.file_size_mb > sys.maxsize // MBYTE:
            raise ConfigurationError("Specified file size too large for this platform")
        if self.block_size <= 0:
            raise ConfigurationError("Wrong block size")
        if self.block_size > self.file_size:
            raise ConfigurationError("Block size larger than file size")
        if self.threads <= 0:
            raise ConfigurationError("Wrong number of threads")
        if self.random_ops <= 0:
            raise ConfigurationError("Wrong number of random I/O operations")
        if self.thread_offset_mb < 0:
            raise ConfigurationError("Wrong offset between threads")
        if not self.paths:
            raise ConfigurationError("No target directory or device given")
        if len(self.paths) > WorkloadConfig.MAX_PATHS:
            raise ConfigurationError(f"At most {WorkloadConfig.MAX_PATHS} paths are supported")
        if len(self.tests_to_run) != len(Phase):
            raise ConfigurationError("Wrong test selection")
        if self.ready_timeout <= 0:
            raise ConfigurationError("Wrong readiness timeout")
        if self.plots and not self.output_dir:
            raise ConfigurationError("--plots needs --output-dir")

    @classmethod
    def from_args(cls, args) -> "TestConfiguration":
        """Создание из argparse namespace"""
        skip = set(args.skip or [])
        for index in skip:
            if not 0 <= index < len(Phase):
                raise ConfigurationError(f"Wrong test number {index}")

        return cls(
            threads=args.threads,
            block_size=args.block,
            file_size_mb=args.size,
            random_ops=args.random,
            paths=tuple(args.dir or [WorkloadConfig.DIRECTORY]),
            raw_drives=args.raw,
            sync_writing=args.sync,
            use_mmap=args.mmap,
            consistency_check=args.check,
            sequential_writing=args.sequential_write,
            show_latency=not args.hide_latency,
            terse=args.terse,
            thread_offset_mb=args.offset,
            offset_first_thread=args.offset_first,
            tests_to_run=tuple(phase.value not in skip for phase in Phase),
            debug_level=args.debug,
            output_dir=args.output_dir,
            plots=args.plots,
        )
