import json

import pytest

from tiotest.latency import Latency
from tiotest.metrics import MetricsCollector
from tiotest.workloads import Phase


def _latency(*samples):
    lat = Latency()
    for s in samples:
        lat.record(s)
    return lat


@pytest.fixture
def collector():
    c = MetricsCollector(threads=2, block_size=4096)
    c.add_phase(Phase.WRITE, 256, 2.0, 0.5, 0.25, _latency(0.001, 0.003))
    c.add_phase(Phase.RANDOM_WRITE, 0, 0.0, 0.0, 0.0, Latency())
    c.add_phase(Phase.READ, 512, 1.0, 0.1, 0.2, _latency(0.002))
    c.add_phase(Phase.RANDOM_READ, 0, 0.0, 0.0, 0.0, Latency())
    return c


def test_phase_figures(collector):
    write = collector.results[Phase.WRITE]
    assert write.megabytes == pytest.approx(1.0)
    assert write.throughput_mbps == pytest.approx(0.5)
    assert write.user_cpu_pct == pytest.approx(25.0)
    assert write.sys_cpu_pct == pytest.approx(12.5)
    assert write.latency_avg_ms == pytest.approx(2.0)
    assert write.latency_max_ms == pytest.approx(3.0)


def test_empty_phase_has_zero_rates(collector):
    rwrite = collector.results[Phase.RANDOM_WRITE]
    assert rwrite.throughput_mbps == 0.0
    assert rwrite.user_cpu_pct == 0.0
    assert rwrite.latency_avg_ms == 0.0


def test_total_latency_spans_all_phases(collector):
    total = collector.total()
    assert total.count == 3
    assert total.average == pytest.approx(0.002)
    assert total.max == pytest.approx(0.003)


def test_terse_output(collector):
    lines = collector.render_terse().splitlines()
    assert [line.split(":")[0] for line in lines] == ["write", "rwrite", "read", "rread", "total"]
    assert lines[0] == ("write:1.00000,2.00000,0.50000,0.25000,"
                        "2.00000,3.00000,0.00000,0.00000")
    assert lines[1] == "rwrite:" + ",".join(["0.00000"] * 8)
    assert lines[4] == "total:2.00000,3.00000,0.00000,0.00000"


def test_table_lists_only_active_phases(collector):
    table = collector.render_table()
    assert table.startswith("Tiotest results for 2 concurrent io threads:")
    assert "| Write" + " " * 11 + "1 MBs |    2.0 s |   0.500 MB/s |  25.0 %  |  12.5 % |" in table
    assert "| Read" + " " * 12 + "2 MBs |" in table
    assert "Random Write" not in table
    assert "| Total        |        2.000 ms |        3.000 ms |  0.00000 |   0.00000 |" in table
    assert "% >2 sec | % >10 sec |" in table


def test_table_hides_latency(collector):
    collector.show_latency = False
    assert "Tiotest latency results" not in collector.render_table()


def test_save_raw_data(collector, tmp_path):
    path = collector.save_raw_data(tmp_path / "out")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["threads"] == 2
    assert [r["name"] for r in data["results"]] == ["Write", "Random Write", "Read", "Random Read"]
    assert data["total_latency"]["count"] == 3


def test_generate_report(collector, tmp_path):
    path = collector.generate_report(tmp_path)
    assert "Tiotest results" in path.read_text(encoding="utf-8")
