#!/usr/bin/env python3
"""
Profiling harness for the torus Life grid.

Runs update() + render() headlessly, either under cProfile or with
per-frame timing, then prints where the time goes.

Usage:
  python3 torus_life_bench.py                  # 500 frames, cProfile summary
  python3 torus_life_bench.py -n 1000          # 1000 frames
  python3 torus_life_bench.py --line-timing    # per-frame component timing
  python3 torus_life_bench.py --dump prof.out  # dump cProfile binary for snakeviz etc.
"""

from __future__ import annotations

import argparse
import cProfile
import pstats
import time
from io import StringIO
from typing import Sequence

import numpy as np

from torus_life import DEFAULT_HEIGHT, DEFAULT_WIDTH, Grid


def make_grid(width: int, height: int, density: float, seed: int | None) -> Grid:
    grid = Grid(width, height)
    grid.randomize(density, seed)
    return grid


def time_frames(grid: Grid, n_frames: int) -> dict[str, list[float]]:
    """
    Advance `grid` n_frames times, timing each component.

    Returns component → per-frame seconds.
    """
    timings: dict[str, list[float]] = {"update()": [], "render()": [], "TOTAL": []}

    for _ in range(n_frames):
        frame_t0 = time.perf_counter()

        t0 = time.perf_counter()
        grid.update()
        timings["update()"].append(time.perf_counter() - t0)

        t0 = time.perf_counter()
        grid.render()
        timings["render()"].append(time.perf_counter() - t0)

        timings["TOTAL"].append(time.perf_counter() - frame_t0)

    return timings


def stats_line(name: str, data: Sequence[float]) -> str:
    arr = np.array(data) * 1000  # to ms
    return (f"{name:<25} {arr.mean():8.2f} {np.median(arr):8.2f} "
            f"{np.percentile(arr, 95):8.2f} {np.percentile(arr, 99):8.2f} "
            f"{arr.max():8.2f}")


def profile_report(profiler: cProfile.Profile, sort_key: str, limit: int) -> str:
    """Top `limit` functions of a finished profile, sorted by `sort_key`."""
    buf = StringIO()
    ps = pstats.Stats(profiler, stream=buf)
    ps.sort_stats(sort_key)
    ps.print_stats(limit)
    return buf.getvalue()


def run_benchmark(
    n_frames: int,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    density: float = 0.35,
    seed: int | None = 0,
    line_timing: bool = False,
    dump_path: str | None = None,
) -> None:
    """Run the benchmark for n_frames and report results."""

    grid = make_grid(width, height, density, seed)

    print(f"Grid: {grid.width}x{grid.height}  "
          f"Density: {density}  "
          f"Frames: {n_frames}")
    print()

    # ── Per-frame component timing ─────────────────────────────────
    if line_timing:
        timings = time_frames(grid, n_frames)

        print("=== Per-Frame Component Breakdown (ms) ===")
        print(f"{'Component':<25} {'Mean':>8} {'P50':>8} {'P95':>8} {'P99':>8} {'Max':>8}")
        print("-" * 73)
        for name, data in timings.items():
            print(stats_line(name, data))
        print(f"\nFinal population: {grid.population():,}")
        return

    # ── cProfile run ───────────────────────────────────────────────
    profiler = cProfile.Profile()
    wall_t0 = time.perf_counter()
    profiler.enable()
    try:
        for _ in range(n_frames):
            grid.update()
            grid.render()
    finally:
        profiler.disable()
    wall_dt = time.perf_counter() - wall_t0

    print(f"Wall time: {wall_dt:.2f}s  ({wall_dt / n_frames * 1000:.1f}ms/frame)")
    print(f"Effective FPS: {n_frames / wall_dt:.1f}")
    print()

    if dump_path:
        profiler.dump_stats(dump_path)
        print(f"Profile data saved to: {dump_path}")
        print(f"  View with: python3 -m pstats {dump_path}")
        print()

    print(profile_report(profiler, "cumulative", 30))
    print("\n=== By Self-Time (tottime) ===")
    print(profile_report(profiler, "tottime", 20))


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Profile the torus Life grid")
    parser.add_argument("-n", "--frames", type=int, default=500,
                        help="Number of generations to simulate (default: 500)")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH,
                        help=f"Grid width (default: {DEFAULT_WIDTH})")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT,
                        help=f"Grid height (default: {DEFAULT_HEIGHT})")
    parser.add_argument("--density", type=float, default=0.35,
                        help="Initial alive probability (default: 0.35)")
    parser.add_argument("--seed", type=int, default=0,
                        help="Random seed; negative for clock-based (default: 0)")
    parser.add_argument("--line-timing", action="store_true",
                        help="Per-frame component timing instead of cProfile")
    parser.add_argument("--dump", type=str, default=None,
                        help="Dump cProfile binary to this path")
    args = parser.parse_args(argv)

    run_benchmark(
        n_frames=args.frames,
        width=args.width,
        height=args.height,
        density=args.density,
        seed=args.seed,
        line_timing=args.line_timing,
        dump_path=args.dump,
    )


if __name__ == "__main__":
    main()
