import pytest

import run_sim
from memory.allocator import Failure, RegionAllocator


@pytest.fixture
def alloc():
    return RegionAllocator(100)


@pytest.fixture
def stats():
    return run_sim.new_stats()


def run(alloc, stats, *lines, **kwargs):
    results = [run_sim.run_command(alloc, line, stats, **kwargs) for line in lines]
    return results


def test_request_and_status(alloc, stats, capsys):
    run(alloc, stats, "RQ P0 40 F", "STAT")
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "Successfully allocated 40 bytes to P0",
        "Addresses [0:39] Process P0",
        "Addresses [40:99] Unused",
    ]
    assert stats["requests"] == 1


def test_failed_request(alloc, stats, capsys):
    run(alloc, stats, "RQ P0 200 B")
    assert capsys.readouterr().out.strip() == "Error: Cannot allocate 200 bytes to P0"
    assert stats[Failure.INSUFFICIENT_SPACE.value] == 1


def test_invalid_strategy(alloc, stats, capsys):
    run(alloc, stats, "RQ P0 10 Z")
    assert capsys.readouterr().out.splitlines() == [
        "Invalid allocation strategy",
        "Error: Cannot allocate 10 bytes to P0",
    ]
    assert stats[Failure.UNKNOWN_STRATEGY.value] == 1


def test_release(alloc, stats, capsys):
    run(alloc, stats, "RQ P0 10 F", "RL P0", "RL P0")
    out = capsys.readouterr().out.splitlines()
    assert out[1:] == ["Successfully released memory for P0", "Error: Process P0 not found"]
    assert stats["releases"] == 2
    assert stats[Failure.OWNER_NOT_FOUND.value] == 1


def test_compact(alloc, stats, capsys):
    run(alloc, stats, "RQ A 10 F", "RQ B 10 F", "RL A", "C")
    assert capsys.readouterr().out.splitlines()[-1] == "Memory compacted"
    assert alloc.status()[0].owner == "B"
    assert stats["compact"] == 1


def test_malformed_commands(alloc, stats, capsys):
    results = run(alloc, stats, "RQ P0", "RQ P0 ten F", "RL", "HELLO", "")
    assert all(results)
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "Usage: RQ <process> <size> <F|B|W>",
        "Error: Invalid size ten",
        "Usage: RL <process>",
        "Unknown command",
    ]
    assert alloc.status()[0].owner is None


def test_exit(alloc, stats):
    assert run_sim.run_command(alloc, "X", stats) is False


def test_strategy_override(stats, capsys):
    alloc = RegionAllocator(75)
    for owner, size in [("h1", 30), ("a", 5), ("h2", 10), ("b", 5), ("h3", 20), ("c", 5)]:
        alloc.allocate(owner, size, "F")
    for owner in ("h1", "h2", "h3"):
        alloc.release(owner)
    run(alloc, stats, "RQ P 10 F", strategy="B")
    assert "P" in alloc.owners()
    assert [e for e in alloc.status() if e.owner == "P"][0].start == 35


def test_auto_compact_retries_fragmented_request(stats, capsys):
    alloc = RegionAllocator(40)
    run(alloc, stats, "RQ A 10 F", "RQ B 10 F", "RQ C 10 F", "RL A", "RL C", "RQ D 25 F", auto_compact=True)
    assert capsys.readouterr().out.splitlines()[-1] == "Successfully allocated 25 bytes to D"
    assert stats["auto_compact"] == 1
    assert alloc.status()[0].owner == "B"


def test_auto_compact_skips_plain_shortage(stats, capsys):
    alloc = RegionAllocator(40)
    run(alloc, stats, "RQ A 30 F", "RQ D 25 F", auto_compact=True)
    assert capsys.readouterr().out.splitlines()[-1] == "Error: Cannot allocate 25 bytes to D"
    assert stats["auto_compact"] == 0
    assert alloc.moved_total == 0


def test_load_script_skips_comments(tmp_path):
    script = tmp_path / "cmds.txt"
    script.write_text("# header\n\nRQ A 10 F  # trailing\nSTAT\n", encoding="utf-8")
    assert list(run_sim.load_script(str(script))) == ["RQ A 10 F", "STAT"]


def test_hash_inside_label_is_not_a_comment(tmp_path, stats, capsys):
    script = tmp_path / "cmds.txt"
    script.write_text("RQ job 10 F\nRQ job#1 10 F # first\nRQ job#2 10 F\nRL job#2\n", encoding="utf-8")
    lines = list(run_sim.load_script(str(script)))
    assert lines == ["RQ job 10 F", "RQ job#1 10 F", "RQ job#2 10 F", "RL job#2"]
    alloc = RegionAllocator(100)
    run(alloc, stats, *lines)
    assert alloc.owners() == ["job", "job#1"]


def test_main_replays_script(tmp_path, capsys):
    script = tmp_path / "cmds.txt"
    script.write_text("RQ A 10 F\nRQ B 10 F\nRL A\nC\nX\nRQ never 5 F\n", encoding="utf-8")
    run_sim.main(["--capacity", "50", "--script", str(script), "--show-map"])
    out = capsys.readouterr().out
    assert "Requests: 2  Releases: 1  Owners: 1" in out
    assert "Compactions: 1  Auto: 0  Units moved: 10" in out
    assert "Fragmentation: LFE=40 holes=1 external_frag=0.000 entropy=0.000" in out
    assert "Memory map (ASCII):" in out


def test_main_missing_script(tmp_path):
    with pytest.raises(SystemExit):
        run_sim.main(["--capacity", "50", "--script", str(tmp_path / "nope.txt")])


def test_main_bad_capacity(tmp_path):
    with pytest.raises(SystemExit):
        run_sim.main(["--capacity", "0", "--script", str(tmp_path / "nope.txt")])


def test_main_interactive(monkeypatch, capsys):
    answers = iter(["30", "RQ A 10 W", "STAT"])

    def fake_input(prompt=""):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    run_sim.main([])
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "Successfully allocated 10 bytes to A",
        "Addresses [0:9] Process A",
        "Addresses [10:29] Unused",
    ]
