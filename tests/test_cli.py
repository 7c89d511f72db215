import json

import pytest

from tiotest.main import main


def test_bad_block_size(capsys):
    assert main(["-b", "0"]) == 1
    err = capsys.readouterr().err
    assert "Wrong block size" in err
    assert "Try 'tiotest -h' for more information." in err


@pytest.mark.parametrize("argv, message", [
    (["-t", "0"], "Wrong number of threads"),
    (["-f", "-1"], "Wrong file size"),
    (["-r", "0"], "Wrong number of random I/O operations"),
    (["-o", "-5"], "Wrong offset between threads"),
    (["-k", "4"], "Wrong test number 4"),
    (["--plots"], "--plots needs --output-dir"),
])
def test_configuration_errors(capsys, argv, message):
    assert main(argv) == 1
    assert message in capsys.readouterr().err


def test_terse_run(tmp_path, capsys):
    rc = main(["-t", "2", "-f", "1", "-r", "50", "-d", str(tmp_path), "-T", "-c"])
    assert rc == 0

    lines = capsys.readouterr().out.splitlines()
    assert [line.split(":")[0] for line in lines] == ["write", "rwrite", "read", "rread", "total"]
    write_fields = lines[0].split(":")[1].split(",")
    assert len(write_fields) == 8
    assert float(write_fields[0]) == pytest.approx(2.0)
    assert list(tmp_path.iterdir()) == []


def test_mmap_run_with_skips(tmp_path, capsys):
    rc = main(["-t", "2", "-f", "1", "-r", "20", "-d", str(tmp_path), "-M", "-c",
               "-k", "1", "-k", "3"])
    assert rc == 0

    out = capsys.readouterr().out
    assert "Tiotest results for 2 concurrent io threads:" in out
    assert "| Write" in out
    assert "| Read" in out
    assert "Random" not in out


def test_output_dir_and_plots(tmp_path, capsys):
    work, out = tmp_path / "work", tmp_path / "out"
    work.mkdir()
    rc = main(["-t", "1", "-f", "1", "-r", "10", "-d", str(work), "-L",
               "--output-dir", str(out), "--plots"])
    assert rc == 0

    raw = list(out.glob("tiotest_raw_*.json"))
    assert len(raw) == 1
    data = json.loads(raw[0].read_text(encoding="utf-8"))
    assert data["config"]["threads"] == 1
    assert list(out.glob("tiotest_report_*.txt"))
    assert (out / "01_throughput.png").exists()
    assert (out / "02_latency.png").exists()
    assert (out / "03_cpu.png").exists()
    assert "Tiotest latency results" not in capsys.readouterr().out


def test_missing_directory_is_io_failure(tmp_path, capsys):
    rc = main(["-t", "1", "-f", "1", "-d", str(tmp_path / "nope")])
    assert rc == 3
    assert "Error:" in capsys.readouterr().err


def test_random_only_run_with_check(tmp_path, capsys):
    rc = main(["-t", "2", "-b", "4096", "-f", "1", "-r", "100", "-d", str(tmp_path),
               "-k", "0", "-k", "2", "-c", "-T"])
    assert rc == 0

    captured = capsys.readouterr()
    assert "Consistency check failed" not in captured.err
    lines = captured.out.splitlines()
    assert lines[0] == "write:" + ",".join(["0.00000"] * 8)
    rread = lines[3].split(":")[1].split(",")
    assert float(rread[0]) == pytest.approx(2 * 100 * 4096 / 1048576)
