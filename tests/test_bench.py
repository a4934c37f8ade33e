import cProfile

from torus_life_bench import (
    main,
    make_grid,
    profile_report,
    run_benchmark,
    stats_line,
    time_frames,
)


def test_make_grid_is_seeded():
    assert make_grid(12, 8, 0.4, 3) == make_grid(12, 8, 0.4, 3)


def test_time_frames():
    grid = make_grid(10, 10, 0.3, 0)
    timings = time_frames(grid, 5)
    assert set(timings) == {"update()", "render()", "TOTAL"}
    assert all(len(v) == 5 for v in timings.values())
    assert all(t >= 0 for v in timings.values() for t in v)
    assert grid.generation == 5


def test_stats_line():
    line = stats_line("update()", [0.001, 0.002, 0.003])
    assert line.startswith("update()")
    assert "2.00" in line


def test_line_timing_report(capsys):
    run_benchmark(3, width=8, height=8, line_timing=True)
    out = capsys.readouterr().out
    assert "Grid: 8x8" in out
    assert "Per-Frame Component Breakdown" in out
    assert "update()" in out


def test_profile_dump(tmp_path, capsys):
    dump = tmp_path / "prof.out"
    main(["-n", "2", "--width", "8", "--height", "8", "--dump", str(dump)])
    assert dump.exists()
    assert "Wall time" in capsys.readouterr().out


def test_profile_report_sorts_by_key():
    grid = make_grid(8, 8, 0.3, 0)
    profiler = cProfile.Profile()
    profiler.enable()
    grid.update()
    profiler.disable()

    assert "cumulative time" in profile_report(profiler, "cumulative", 5)
    assert "internal time" in profile_report(profiler, "tottime", 5)
