"""Накопление latency по операциям"""

from array import array
from dataclasses import dataclass, field, asdict
from typing import List

import numpy as np

from .workloads import WorkloadConfig


@dataclass
class LatencySummary:
    """Итоговые значения latency: секунды и проценты"""
    average: float
    max: float
    count: int
    pct_over_stat1: float
    pct_over_stat2: float
    p95: float
    p99: float

    def to_dict(self):
        return asdict(self)


@dataclass
class Latency:
    """
    Накопитель latency.

    `average` хранит сумму замеров, пока finalize() не поделит её на
    `count`. Собственные замеры лежат в `samples`; merge() не копирует
    чужие замеры, а запоминает ссылки на них в `parts`.
    """
    average: float = 0.0
    max: float = 0.0
    count: int = 0
    count1: int = 0
    count2: int = 0
    samples: array = field(default_factory=lambda: array("d"), repr=False)
    parts: List[array] = field(default_factory=list, repr=False)

    def record(self, value: float):
        if value > self.max:
            self.max = value
        self.average += value
        self.count += 1
        if value > WorkloadConfig.LATENCY_STAT1:
            self.count1 += 1
        if value > WorkloadConfig.LATENCY_STAT2:
            self.count2 += 1
        self.samples.append(value)

    def merge(self, other: "Latency"):
        """Добавить счётчики другого накопителя"""
        if other.max > self.max:
            self.max = other.max
        self.average += other.average
        self.count += other.count
        self.count1 += other.count1
        self.count2 += other.count2
        self.parts.append(other.samples)
        self.parts.extend(other.parts)

    def sample_arrays(self) -> List[array]:
        return [a for a in [self.samples, *self.parts] if len(a)]

    def percentiles(self, *q: float) -> List[float]:
        arrays = self.sample_arrays()
        if not arrays:
            return [0.0] * len(q)
        values = np.concatenate([np.frombuffer(a, dtype=np.float64) for a in arrays])
        return [float(v) for v in np.percentile(values, q)]

    def finalize(self) -> LatencySummary:
        if self.count > 0:
            average = self.average / self.count
            pct1 = self.count1 * 100.0 / self.count
            pct2 = self.count2 * 100.0 / self.count
        else:
            average = pct1 = pct2 = 0.0

        p95, p99 = self.percentiles(95, 99)

        return LatencySummary(
            average=average,
            max=self.max,
            count=self.count,
            pct_over_stat1=pct1,
            pct_over_stat2=pct2,
            p95=p95,
            p99=p99,
        )
