"""Примитивы чтения/записи одного блока

Каждый примитив переносит ровно один блок между буфером потока и
файлом и возвращает OpStatus вместо исключения. Что значит ошибка
для фазы, решает драйвер.
"""

import os
import sys
import zlib
from abc import ABC, abstractmethod
from enum import Enum

from .workloads import Phase


class OpStatus(Enum):
    OK = "ok"
    SHORT = "short"
    MISMATCH = "mismatch"


def _verify(state) -> OpStatus:
    crc = zlib.crc32(state.buffer)
    if crc != state.buffer_crc:
        print(f"Consistency check failed on {state.path}: "
              f"crc 0x{crc:08x} != 0x{state.buffer_crc:08x}", file=sys.stderr)
        return OpStatus.MISMATCH
    return OpStatus.OK


class DescriptorOperation(ABC):
    """pread/pwrite по открытому дескриптору"""

    def __init__(self, check_data: bool = False):
        self.check_data = check_data

    @abstractmethod
    def __call__(self, fd: int, offset: int, state) -> OpStatus:
        pass


class PositionedRead(DescriptorOperation):
    def __call__(self, fd: int, offset: int, state) -> OpStatus:
        try:
            rc = os.preadv(fd, [state.buffer], offset)
        except OSError as e:
            print(f"Error pread()ing from file {state.path}: {e}", file=sys.stderr)
            return OpStatus.SHORT

        if rc != state.block_size:
            print(f"Tried to read {state.block_size} bytes from offset 0x{offset:x} "
                  f"of file {state.path} of length 0x{state.file_size:x}, "
                  f"but only read {rc} bytes", file=sys.stderr)
            return OpStatus.SHORT

        if self.check_data:
            return _verify(state)
        return OpStatus.OK


class PositionedWrite(DescriptorOperation):
    def __call__(self, fd: int, offset: int, state) -> OpStatus:
        try:
            rc = os.pwrite(fd, state.buffer, offset)
        except OSError as e:
            print(f"Error pwrite()ing to file {state.path}: {e}", file=sys.stderr)
            return OpStatus.SHORT

        if rc != state.block_size:
            print(f"Tried to write {state.block_size} bytes from offset 0x{offset:x} "
                  f"of file {state.path} of length 0x{state.file_size:x}, "
                  f"but only wrote {rc} bytes", file=sys.stderr)
            return OpStatus.SHORT
        return OpStatus.OK


class MappedOperation(ABC):
    """Копирование блока между буфером потока и отображённой частью файла"""

    def __init__(self, check_data: bool = False):
        self.check_data = check_data

    @abstractmethod
    def __call__(self, mapping, location: int, state) -> OpStatus:
        pass


class MappedRead(MappedOperation):
    def __call__(self, mapping, location: int, state) -> OpStatus:
        block = mapping[location:location + state.block_size]
        if len(block) != state.block_size:
            print(f"Mapped read at 0x{location:x} of {state.path} "
                  f"returned {len(block)} bytes", file=sys.stderr)
            return OpStatus.SHORT
        state.buffer[:] = block

        if self.check_data:
            return _verify(state)
        return OpStatus.OK


class MappedWrite(MappedOperation):
    def __call__(self, mapping, location: int, state) -> OpStatus:
        end = location + state.block_size
        if end > len(mapping):
            print(f"Mapped write at 0x{location:x} of {state.path} "
                  f"runs past the mapped chunk", file=sys.stderr)
            return OpStatus.SHORT
        mapping[location:end] = state.buffer[:]
        return OpStatus.OK


def descriptor_operation(phase: Phase, check_data: bool) -> DescriptorOperation:
    if phase.is_write:
        return PositionedWrite(check_data)
    return PositionedRead(check_data)


def mapped_operation(phase: Phase, check_data: bool) -> MappedOperation:
    if phase.is_write:
        return MappedWrite(check_data)
    return MappedRead(check_data)
