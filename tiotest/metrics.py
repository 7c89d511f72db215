"""Сбор метрик потоков и вывод отчёта"""

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .base import PhaseResult
from .latency import Latency, LatencySummary
from .workloads import MBYTE, Phase, WorkloadConfig


def _percent(part: float, whole: float) -> float:
    return part * 100.0 / whole if whole > 0 else 0.0


class MetricsCollector:
    """Результаты по фазам и общая latency"""

    def __init__(self, threads: int, block_size: int, show_latency: bool = True):
        self.threads = threads
        self.block_size = block_size
        self.show_latency = show_latency
        self.results: Dict[Phase, PhaseResult] = {}
        self.total_latency = Latency()
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.config: Optional[dict] = None

    @classmethod
    def from_test(cls, test) -> "MetricsCollector":
        """Суммирование CPU, блоков и latency потоков по каждой фазе ThreadTest"""
        config = test.config
        collector = cls(config.threads, config.block_size, config.show_latency)
        collector.config = asdict(config)

        for phase in Phase:
            latency = Latency()
            usertime = systime = 0.0
            blocks = 0
            for state in test.workers:
                record = state.record(phase)
                usertime += record.timing.usertime()
                systime += record.timing.systime()
                blocks += record.blocks
                latency.merge(record.latency)

            collector.add_phase(phase, blocks, test.totals[phase].realtime(),
                                usertime, systime, latency)
        return collector

    def add_phase(self, phase: Phase, blocks: int, realtime: float,
                  usertime: float, systime: float, latency: Latency) -> PhaseResult:
        megabytes = blocks * self.block_size / MBYTE
        summary = latency.finalize()

        result = PhaseResult(
            name=phase.label,
            megabytes=megabytes,
            blocks=blocks,
            realtime_sec=realtime,
            usertime_sec=usertime,
            systime_sec=systime,
            throughput_mbps=megabytes / realtime if realtime > 0 else 0.0,
            user_cpu_pct=_percent(usertime, realtime),
            sys_cpu_pct=_percent(systime, realtime),
            latency_avg_ms=summary.average * 1000,
            latency_max_ms=summary.max * 1000,
            latency_p95_ms=summary.p95 * 1000,
            latency_p99_ms=summary.p99 * 1000,
            pct_over_stat1=summary.pct_over_stat1,
            pct_over_stat2=summary.pct_over_stat2,
            samples=summary.count,
        )
        self.results[phase] = result
        self.total_latency.merge(latency)
        return result

    def total(self) -> LatencySummary:
        return self.total_latency.finalize()

    def active_results(self) -> List[PhaseResult]:
        """Фазы, которые реально передавали данные"""
        return [self.results[p] for p in Phase if p in self.results and self.results[p].blocks]

    def render_terse(self) -> str:
        lines = []
        for phase in Phase:
            r = self.results[phase]
            lines.append(
                f"{phase.terse_key}:{r.megabytes:.5f},{r.realtime_sec:.5f},"
                f"{r.usertime_sec:.5f},{r.systime_sec:.5f},"
                f"{r.latency_avg_ms:.5f},{r.latency_max_ms:.5f},"
                f"{r.pct_over_stat1:.5f},{r.pct_over_stat2:.5f}")
        total = self.total()
        lines.append(f"total:{total.average * 1000:.5f},{total.max * 1000:.5f},"
                     f"{total.pct_over_stat1:.5f},{total.pct_over_stat2:.5f}")
        return "\n".join(lines)

    def render_table(self) -> str:
        lines = []
        lines.append(f"Tiotest results for {self.threads} concurrent io threads:")
        lines.append(",----------------------------------------------------------------------.")
        lines.append("| Item                  | Time     | Rate         | Usr CPU  | Sys CPU |")
        lines.append("+-----------------------+----------+--------------+----------+---------+")
        for r in self.active_results():
            width = 16 - len(r.name)
            lines.append(
                f"| {r.name} {r.megabytes:{width}.0f} MBs | {r.realtime_sec:6.1f} s | "
                f"{r.throughput_mbps:7.3f} MB/s | {r.user_cpu_pct:5.1f} %  | "
                f"{r.sys_cpu_pct:5.1f} % |")
        lines.append("`----------------------------------------------------------------------'")

        if self.show_latency:
            stat1 = WorkloadConfig.LATENCY_STAT1
            stat2 = WorkloadConfig.LATENCY_STAT2
            lines.append("Tiotest latency results:")
            lines.append(",-------------------------------------------------------------------------.")
            lines.append(f"| Item         | Average latency | Maximum latency | % >{stat1} sec | % >{stat2} sec |")
            lines.append("+--------------+-----------------+-----------------+----------+-----------+")
            for r in self.active_results():
                lines.append(
                    f"| {r.name:<12} | {r.latency_avg_ms:12.3f} ms | {r.latency_max_ms:12.3f} ms | "
                    f"{r.pct_over_stat1:8.5f} | {r.pct_over_stat2:9.5f} |")
            lines.append("|--------------+-----------------+-----------------+----------+-----------|")
            total = self.total()
            lines.append(
                f"| {'Total':<12} | {total.average * 1000:12.3f} ms | {total.max * 1000:12.3f} ms | "
                f"{total.pct_over_stat1:8.5f} | {total.pct_over_stat2:9.5f} |")
            lines.append("`--------------+-----------------+-----------------+----------+-----------'")
            lines.append("")
        return "\n".join(lines)

    def print_report(self, terse: bool = False):
        print(self.render_terse() if terse else self.render_table())

    def save_raw_data(self, output_dir: Path) -> Path:
        """Сохранить результаты по фазам в JSON"""
        output_dir.mkdir(parents=True, exist_ok=True)

        data = {
            'timestamp': self.timestamp,
            'threads': self.threads,
            'block_size': self.block_size,
            'config': self.config,
            'results': [self.results[p].to_dict() for p in Phase if p in self.results],
            'total_latency': self.total().to_dict(),
        }

        output_file = output_dir / f"tiotest_raw_{self.timestamp}.json"
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        return output_file

    def generate_report(self, output_dir: Path) -> Path:
        """Сохранить таблицы результатов текстовым отчетом"""
        output_dir.mkdir(parents=True, exist_ok=True)

        report_file = output_dir / f"tiotest_report_{self.timestamp}.txt"
        with open(report_file, 'w', encoding='utf-8') as f:
            f.write(self.render_table())
            f.write("\n")
        return report_file
