#!/usr/bin/env python3
"""
Многопоточный тест I/O
Пропускная способность последовательного/случайного чтения и записи, CPU и latency
"""
import argparse
import logging
import sys
from pathlib import Path

from .config import TestConfiguration
from .coordinator import ThreadTest
from .errors import ConfigurationError, TiotestError
from .metrics import MetricsCollector
from .workloads import WorkloadConfig


VERSION = "tiotest 0.4.0"
HINT = "Try 'tiotest -h' for more information."

# уровни отладки: NONE=0 FATAL=10 ERROR=20 WARN=30 INFO=40 DEBUG=50 TRACE=60
DEBUG_LEVELS = [
    (50, logging.DEBUG),
    (40, logging.INFO),
    (30, logging.WARNING),
    (20, logging.ERROR),
    (10, logging.CRITICAL),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tiotest',
        description=VERSION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 8 threads, 100 MB each, in two directories
  tiotest -t 8 -f 100 -d /mnt/a -d /mnt/b

  # Only random write and random read, with data verification
  tiotest -k 0 -k 2 -c

  # Two raw devices, 1 GB regions 512 MB apart
  tiotest -R -d /dev/sdb -d /dev/sdc -f 1024 -o 512
        """
    )

    parser.add_argument('-f', '--size', type=int, default=WorkloadConfig.FILE_SIZE_MB,
                        help='Filesize per thread in MBytes (default: %(default)s)')
    parser.add_argument('-b', '--block', type=int, default=WorkloadConfig.BLOCK_SIZE,
                        help='Blocksize to use in bytes (default: %(default)s)')
    parser.add_argument('-d', '--dir', action='append', default=None,
                        help='Directory for test files, repeatable (default: %s)'
                             % WorkloadConfig.DIRECTORY)
    parser.add_argument('-t', '--threads', type=int, default=WorkloadConfig.THREADS,
                        help='Number of concurrent test threads (default: %(default)s)')
    parser.add_argument('-r', '--random', type=int, default=WorkloadConfig.RANDOM_OPS,
                        help='Random I/O operations per thread (default: %(default)s)')
    parser.add_argument('-o', '--offset', type=int, default=WorkloadConfig.RAW_OFFSET_MB,
                        help='Offset in MB on disk between threads. Use with -R option')
    parser.add_argument('-k', '--skip', type=int, action='append', default=None,
                        help='Skip test number n (0 write, 1 random write, 2 read, '
                             '3 random read). Could be used several times.')
    parser.add_argument('-L', dest='hide_latency', action='store_true',
                        help='Hide latency output')
    parser.add_argument('-R', dest='raw', action='store_true',
                        help='Use raw devices. Set device name with -d option')
    parser.add_argument('-T', dest='terse', action='store_true',
                        help='More terse output')
    parser.add_argument('-M', dest='mmap', action='store_true',
                        help='Use mmap for I/O')
    parser.add_argument('-W', dest='sequential_write', action='store_true',
                        help='Do writing phase sequentially')
    parser.add_argument('-S', dest='sync', action='store_true',
                        help='Do writing synchronously')
    parser.add_argument('-O', dest='offset_first', action='store_true',
                        help='Use offset from -o option for first thread. Use with -R option')
    parser.add_argument('-c', dest='check', action='store_true',
                        help='Consistency check data (will slow io and raise cpu%%)')
    parser.add_argument('-D', dest='debug', type=int, default=0,
                        help='Debug level (default: %(default)s)')
    parser.add_argument('--output-dir', default=None,
                        help='Save raw JSON data and a text report here')
    parser.add_argument('--plots', action='store_true',
                        help='Also save PNG charts into --output-dir')
    parser.add_argument('--version', action='version', version=VERSION)
    return parser


def setup_logging(debug_level: int):
    level = logging.CRITICAL + 1
    for threshold, logging_level in DEBUG_LEVELS:
        if debug_level >= threshold:
            level = logging_level
            break
    logging.basicConfig(level=level, stream=sys.stderr,
                        format='%(threadName)s: %(message)s')


def save_results(collector: MetricsCollector, config: TestConfiguration):
    """Сохранение отчётов; ошибки здесь не роняют запуск"""
    output_dir = Path(config.output_dir)
    try:
        raw = collector.save_raw_data(output_dir)
        report = collector.generate_report(output_dir)
        saved = [raw, report]
        if config.plots and collector.active_results():
            from .visualize import generate_all_plots
            saved.extend(generate_all_plots(collector.active_results(), output_dir))
    except (OSError, ValueError) as e:
        print(f"Warning: could not save results to {output_dir}: {e}", file=sys.stderr)
        return

    if not config.terse:
        for path in saved:
            print(f"✅ Saved: {path}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = TestConfiguration.from_args(args)
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        print(HINT, file=sys.stderr)
        return e.exit_code

    setup_logging(config.debug_level)

    try:
        with ThreadTest(config) as test:
            test.run()
            collector = MetricsCollector.from_test(test)
    except TiotestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code

    collector.print_report(terse=config.terse)

    if config.output_dir:
        save_results(collector, config)

    return 0


if __name__ == '__main__':
    sys.exit(main())
