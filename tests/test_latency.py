import pytest

from tiotest.latency import Latency


def test_record_counts_thresholds():
    lat = Latency()
    for sample in [1.0, 3.0, 11.0]:
        lat.record(sample)

    assert lat.count == 3
    assert lat.count1 == 2
    assert lat.count2 == 1
    assert lat.max == 11.0
    assert lat.average == 15.0  # raw sum until finalize


def test_finalize_divides_and_computes_percentages():
    lat = Latency()
    for sample in [1.0, 3.0, 11.0]:
        lat.record(sample)

    summary = lat.finalize()
    assert summary.average == pytest.approx(5.0)
    assert summary.max == 11.0
    assert summary.pct_over_stat1 == pytest.approx(200.0 / 3)
    assert summary.pct_over_stat2 == pytest.approx(100.0 / 3)
    # finalize does not touch the raw accumulator
    assert lat.average == 15.0


def test_finalize_empty():
    summary = Latency().finalize()
    assert summary.average == 0.0
    assert summary.max == 0.0
    assert summary.count == 0
    assert summary.pct_over_stat1 == 0.0
    assert summary.pct_over_stat2 == 0.0
    assert summary.p95 == 0.0


def test_threshold_is_strictly_greater():
    lat = Latency()
    lat.record(2.0)
    lat.record(10.0)
    assert lat.count1 == 1
    assert lat.count2 == 0


def test_merge_sums_raw_counters():
    a, b = Latency(), Latency()
    a.record(1.0)
    a.record(3.0)
    b.record(11.0)

    a.merge(b)
    assert a.count == 3
    assert a.count1 == 2
    assert a.count2 == 1
    assert a.max == 11.0
    assert a.average == 15.0
    assert a.finalize().average == pytest.approx(5.0)


def test_percentiles():
    lat = Latency()
    for i in range(1, 101):
        lat.record(i / 1000.0)

    summary = lat.finalize()
    assert summary.p95 == pytest.approx(0.09505)
    assert summary.p99 == pytest.approx(0.09901)


def test_merge_keeps_references_instead_of_copying():
    workers = [Latency(), Latency()]
    for i, lat in enumerate(workers):
        for j in range(50):
            lat.record((i * 50 + j + 1) / 1000.0)

    phase = Latency()
    for lat in workers:
        phase.merge(lat)
    total = Latency()
    total.merge(phase)

    assert len(phase.samples) == 0
    assert len(total.samples) == 0
    assert all(any(a is lat.samples for a in total.parts) for lat in workers)
    assert sum(len(a) for a in total.sample_arrays()) == 100


def test_merged_percentiles_match_single_accumulator():
    single = Latency()
    workers = [Latency(), Latency(), Latency()]
    for i in range(1, 301):
        single.record(i / 1000.0)
        workers[i % 3].record(i / 1000.0)

    merged = Latency()
    for lat in workers:
        merged.merge(lat)

    expected = single.finalize()
    summary = merged.finalize()
    assert summary.p95 == pytest.approx(expected.p95)
    assert summary.p99 == pytest.approx(expected.p99)
    assert summary.count == 300


def test_record_after_finalize():
    lat = Latency()
    lat.record(0.001)
    lat.finalize()
    lat.record(0.002)
    assert lat.count == 2
