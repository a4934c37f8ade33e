#!/usr/bin/env python3
"""
  T O R U S   L I F E
  Conway's Game of Life on a fixed-size, wraparound grid.

  The grid is a torus: walk off the right edge and you come back on the
  left, walk off the bottom and you come back at the top. Every cell has
  exactly eight neighbours and every integer coordinate is valid.

  Seed it with noise or with one of the classic patterns (glider, pulsar,
  Gosper glider gun), then watch it go, either as plain text frames on
  stdout or inside a curses window.

  Controls (--curses):
    q         quit               SPACE     pause / resume
    r         reseed with noise  c         clear
    +/-       speed

  Pass --stats PATH to log per-generation population to CSV.
"""

from __future__ import annotations

import argparse
import curses
import sys
import time
from pathlib import Path
from typing import IO, ClassVar, Sequence, TextIO

import numpy as np
from numpy.typing import NDArray

# ── Defaults ────────────────────────────────────────────────────────────
DEFAULT_WIDTH = 70
DEFAULT_HEIGHT = 30
DEFAULT_DELAY_MS = 100
DEFAULT_ALIVE_PROBABILITY = 0.5

# ── Cell markers (patterns and rendered output) ─────────────────────────
DEAD = "."
LIVE = "X"

# ── Neighbour displacements ─────────────────────────────────────────────
# XXX
# X0X
# XXX
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)

# ── Pattern library ─────────────────────────────────────────────────────
GLIDER: tuple[str, ...] = (
    ".X.",
    "..X",
    "XXX",
)

PULSAR: tuple[str, ...] = (
    ".................",
    ".................",
    "....XXX...XXX....",
    ".................",
    "..X....X.X....X..",
    "..X....X.X....X..",
    "..X....X.X....X..",
    "....XXX...XXX....",
    ".................",
    "....XXX...XXX....",
    "..X....X.X....X..",
    "..X....X.X....X..",
    "..X....X.X....X..",
    ".................",
    "....XXX...XXX....",
    ".................",
    ".................",
)

GOSPER_GLIDER_GUN: tuple[str, ...] = (
    "......................................",
    ".........................X............",
    ".......................X.X............",
    ".............XX......XX............XX.",
    "............X...X....XX............XX.",
    ".XX........X.....X...XX...............",
    ".XX........X...X.XX....X.X............",
    "...........X.....X.......X............",
    "............X...X.....................",
    ".............XX.......................",
)

PATTERNS: dict[str, tuple[str, ...]] = {
    "glider": GLIDER,
    "pulsar": PULSAR,
    "gosper_gun": GOSPER_GLIDER_GUN,
}


# ═══════════════════════════════════════════════════════════════════════
#  Errors
# ═══════════════════════════════════════════════════════════════════════

class LifeError(ValueError):
    """Base class for invalid grid parameters."""


class InvalidDimension(LifeError):
    """Width or height is not a positive integer."""


class InvalidProbability(LifeError):
    """Alive probability lies outside [0, 1]."""


# ═══════════════════════════════════════════════════════════════════════
#  The grid
# ═══════════════════════════════════════════════════════════════════════

class Grid:
    """
    A fixed-size toroidal Game of Life field.

    Cells live in a (height, width) boolean array, row-major. Coordinates
    are given as (x, y) = (column, row) and wrap in both axes, so negative
    or oversized coordinates address a real cell rather than failing.

    update() scatters +1 from every live cell into a separate neighbour
    buffer, then builds the next generation from the untouched current
    one and swaps it in. Callers never see a half-updated field.
    """

    def __init__(self, width: int, height: int) -> None:
        for name, value in (("width", width), ("height", height)):
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, np.integer))
                or value <= 0
            ):
                raise InvalidDimension(
                    f"{name} should be a positive integer, got {value!r}"
                )

        self._width: int = int(width)
        self._height: int = int(height)
        self._cells: NDArray[np.bool_] = np.zeros(
            (self._height, self._width), dtype=np.bool_
        )
        # Working buffer for update(); contents are meaningless between calls
        self.neighbor_counts: NDArray[np.int16] = np.zeros(
            (self._height, self._width), dtype=np.int16
        )
        self.generation: int = 0

    @classmethod
    def from_pattern(
        cls,
        pattern: Sequence[str],
        width: int | None = None,
        height: int | None = None,
    ) -> Grid:
        """Build a grid holding `pattern` at the origin.

        Missing dimensions default to the pattern's bounding box.
        """
        if width is None:
            width = max((len(row) for row in pattern), default=0)
        if height is None:
            height = len(pattern)
        grid = cls(width, height)
        grid.set_pattern(pattern)
        return grid

    # ── Shape ───────────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def cells(self) -> NDArray[np.bool_]:
        """Row-major snapshot of the cell state (length width*height)."""
        return self._cells.flatten()

    def _wrap(self, x: int, y: int) -> tuple[int, int]:
        # Python's % is floored, so negative input lands in [0, dim)
        return y % self._height, x % self._width

    # ── Seeding ─────────────────────────────────────────────────────

    def randomize(
        self,
        alive_probability: float = DEFAULT_ALIVE_PROBABILITY,
        seed: int | None = None,
    ) -> int:
        """
        Overwrite every cell with independent Bernoulli(alive_probability) noise.

        One uniform draw per cell, in row-major order, from a single
        generator seeded with `seed`. The same seed, probability and
        dimensions always produce the same field. A missing or negative
        seed is taken from the clock. Returns the seed actually used.
        """
        if not 0.0 <= alive_probability <= 1.0:
            raise InvalidProbability(
                f"alive_probability should be within [0, 1], got {alive_probability!r}"
            )
        if seed is None or seed < 0:
            seed = time.time_ns()

        rng = np.random.default_rng(seed)
        draws = rng.random(self._width * self._height)
        self._cells = (draws < alive_probability).reshape(self._height, self._width)
        self.generation = 0
        return seed

    def clear(self) -> None:
        self._cells = np.zeros((self._height, self._width), dtype=np.bool_)
        self.generation = 0

    # ── Cell access ─────────────────────────────────────────────────

    def get(self, x: int, y: int) -> bool:
        return bool(self._cells[self._wrap(x, y)])

    def set(self, x: int, y: int, state: bool) -> None:
        self._cells[self._wrap(x, y)] = bool(state)

    def set_pattern(
        self,
        pattern: Sequence[str],
        offset_x: int = 0,
        offset_y: int = 0,
        live: str = LIVE,
    ) -> None:
        """
        Stamp `pattern` onto the grid with its top-left corner at the offset.

        Every character writes one cell: `live` means alive, anything else
        dead. Rows may differ in length; cells past the end of a short row
        and outside the pattern are left alone.
        """
        for y, row in enumerate(pattern):
            for x, char in enumerate(row):
                self.set(x + offset_x, y + offset_y, char == live)

    # ── Simulation ──────────────────────────────────────────────────

    def update(self) -> None:
        """Advance exactly one generation."""
        counts = self.neighbor_counts
        counts.fill(0)

        # Each live cell adds one to all eight wrapped neighbours.
        # np.add.at so that repeated targets (narrow grids) all count.
        ys, xs = np.nonzero(self._cells)
        for dy, dx in NEIGHBOR_OFFSETS:
            np.add.at(counts, ((ys + dy) % self._height, (xs + dx) % self._width), 1)

        # 3 -> alive, 2 -> unchanged, anything else -> dead
        self._cells = (counts == 3) | ((counts == 2) & self._cells)
        self.generation += 1

    def population(self) -> int:
        return int(np.count_nonzero(self._cells))

    def copy(self) -> Grid:
        clone = Grid(self._width, self._height)
        clone._cells = self._cells.copy()
        clone.generation = self.generation
        return clone

    # ── Display ─────────────────────────────────────────────────────

    def rows(self, dead: str = DEAD, live: str = LIVE) -> list[str]:
        return ["".join(live if c else dead for c in row) for row in self._cells.tolist()]

    def render(self, dead: str = DEAD, live: str = LIVE) -> str:
        """Text form: one character per cell, every row ends with a newline."""
        return "".join(row + "\n" for row in self.rows(dead, live))

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"Grid(width={self._width}, height={self._height}, "
            f"population={self.population()}, generation={self.generation})"
        )

    # ── Comparison ──────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self._width == other._width
            and self._height == other._height
            and bool(np.array_equal(self._cells, other._cells))
        )

    __hash__ = None  # type: ignore[assignment]


def find_period(grid: Grid, max_generations: int = 1000) -> int | None:
    """
    Number of generations until `grid` first returns to its current state.

    1 for a still life, the period for an oscillator, None if the start
    state does not recur within `max_generations`. `grid` is not modified.
    """
    start = grid.copy()
    probe = grid.copy()
    for n in range(1, max_generations + 1):
        probe.update()
        if probe == start:
            return n
    return None


# ═══════════════════════════════════════════════════════════════════════
#  Stats logger
# ═══════════════════════════════════════════════════════════════════════

class StatsLogger:
    """Writes per-generation population to CSV for post-hoc inspection."""

    HEADER: ClassVar[str] = "gen,time_s,population,event\n"

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self._t0: float = time.monotonic()

    def open(self) -> None:
        try:
            self._fh = open(self._path, "w")
            self._fh.write(self.HEADER)
            self._fh.flush()
        except OSError:
            self._fh = None

    def log(self, gen: int, pop: int, event: str = "") -> None:
        if self._fh is None:
            return
        t = time.monotonic() - self._t0
        try:
            self._fh.write(f"{gen},{t:.3f},{pop},{event}\n")
            # Flush on events or periodically
            if event or gen % 50 == 0:
                self._fh.flush()
        except OSError:
            self.close()

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


# ═══════════════════════════════════════════════════════════════════════
#  Runners
# ═══════════════════════════════════════════════════════════════════════

def run_plain(
    grid: Grid,
    generations: int | None = None,
    delay_ms: float = DEFAULT_DELAY_MS,
    out: TextIO | None = None,
    logger: StatsLogger | None = None,
) -> int:
    """
    Print a frame, advance, sleep; repeat.

    Runs `generations` updates (forever if None) and returns how many ran.
    """
    out = out if out is not None else sys.stdout
    if logger is not None:
        logger.log(gen=grid.generation, pop=grid.population(), event="start")

    done = 0
    while generations is None or done < generations:
        out.write(grid.render() + "\n")
        out.flush()
        grid.update()
        done += 1
        if logger is not None:
            logger.log(gen=grid.generation, pop=grid.population())
        if delay_ms > 0:
            time.sleep(delay_ms / 1000.0)
    return done


def _draw(stdscr: curses.window, grid: Grid, paused: bool, delay_ms: float) -> None:
    max_y, max_x = stdscr.getmaxyx()
    for y, row in enumerate(grid.rows(dead=" ", live="█")[: max_y - 1]):
        try:
            stdscr.addstr(y, 0, row[: max_x - 1])
        except curses.error:
            pass

    status = (
        f" gen {grid.generation:,}  pop {grid.population():,}  "
        f"{grid.width}x{grid.height}  {delay_ms:.0f}ms"
        f"{'  [paused]' if paused else ''}"
    )
    try:
        stdscr.addstr(max_y - 1, 0, status[: max_x - 1], curses.A_REVERSE)
    except curses.error:
        pass


def run_curses(
    stdscr: curses.window,
    grid: Grid,
    delay_ms: float = DEFAULT_DELAY_MS,
    logger: StatsLogger | None = None,
    alive_probability: float = DEFAULT_ALIVE_PROBABILITY,
    generations: int | None = None,
) -> int:
    """
    Interactive loop; meant to be driven by curses.wrapper.

    Runs until `q` or until `generations` updates (forever if None).
    Returns how many updates ran.
    """
    curses.curs_set(0)
    stdscr.nodelay(True)
    stdscr.timeout(0)

    paused = False
    done = 0
    if logger is not None:
        logger.log(gen=grid.generation, pop=grid.population(), event="start")

    while generations is None or done < generations:
        # ── Input ──────────────────────────────────────────────
        try:
            key = stdscr.getch()
        except curses.error:
            key = -1

        event = ""
        if key in (ord("q"), ord("Q")):
            break
        elif key == ord(" "):
            paused = not paused
        elif key in (ord("r"), ord("R")):
            grid.randomize(alive_probability)
            event = "reseed"
        elif key in (ord("c"), ord("C")):
            grid.clear()
            event = "clear"
        elif key in (ord("+"), ord("=")):
            delay_ms = max(10, delay_ms - 10)
        elif key in (ord("-"), ord("_")):
            delay_ms = min(1000, delay_ms + 10)

        # ── Simulate ───────────────────────────────────────────
        if not paused:
            grid.update()
            done += 1
        if logger is not None and (event or not paused):
            logger.log(gen=grid.generation, pop=grid.population(), event=event)

        # ── Render ─────────────────────────────────────────────
        stdscr.erase()
        _draw(stdscr, grid, paused, delay_ms)
        stdscr.refresh()

        if delay_ms > 0:
            time.sleep(delay_ms / 1000.0)
    return done


# ═══════════════════════════════════════════════════════════════════════
#  Entry point
# ═══════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Conway's Game of Life on a wraparound grid"
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH,
                        help=f"Grid width in cells (default: {DEFAULT_WIDTH})")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT,
                        help=f"Grid height in cells (default: {DEFAULT_HEIGHT})")
    parser.add_argument("--pattern", action="append", choices=sorted(PATTERNS),
                        default=[], help="Place a named pattern (repeatable)")
    parser.add_argument("--offset", action="append", nargs=2, type=int,
                        metavar=("X", "Y"), default=[],
                        help="Offset for the matching --pattern (default: 0 0)")
    parser.add_argument("--random", type=float, default=None, metavar="P",
                        help="Seed with noise, each cell alive with probability P")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed, requires --random (default: from the clock)")
    parser.add_argument("--delay", type=float, default=DEFAULT_DELAY_MS,
                        help=f"Milliseconds between frames, >= 0 (default: {DEFAULT_DELAY_MS})")
    parser.add_argument("-n", "--generations", type=int, default=None,
                        help="Stop after N generations; with --period, the search limit "
                             "(default: run forever, or 1000 for --period)")
    parser.add_argument("--curses", action="store_true",
                        help="Animate in a curses window instead of printing frames")
    parser.add_argument("--period", action="store_true",
                        help="Print the period of the seeded grid and exit")
    parser.add_argument("--stats", type=Path, default=None, metavar="PATH",
                        help="Log per-generation population to this CSV file")
    return parser


def build_grid(args: argparse.Namespace, parser: argparse.ArgumentParser) -> Grid:
    if len(args.offset) > len(args.pattern):
        parser.error("more --offset values than --pattern values")
    if args.seed is not None and args.random is None:
        parser.error("--seed only applies together with --random")
    if args.delay < 0:
        parser.error(f"--delay should be non-negative, got {args.delay:g}")
    if args.generations is not None and args.generations < 0:
        parser.error(f"--generations should be non-negative, got {args.generations}")

    try:
        grid = Grid(args.width, args.height)
        if args.random is not None:
            grid.randomize(args.random, args.seed)
    except LifeError as e:
        parser.error(str(e))

    offsets = args.offset + [[0, 0]] * (len(args.pattern) - len(args.offset))
    for name, (dx, dy) in zip(args.pattern, offsets):
        grid.set_pattern(PATTERNS[name], dx, dy)

    if args.random is None and not args.pattern:
        grid.set_pattern(GOSPER_GLIDER_GUN)
    return grid


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    grid = build_grid(args, parser)

    if args.period:
        limit = args.generations if args.generations is not None else 1000
        period = find_period(grid, limit)
        if period is None:
            print(f"No repeat within {limit} generations.")
            return 1
        print(f"Repeats in {period} generations.")
        return 0

    logger: StatsLogger | None = None
    if args.stats is not None:
        logger = StatsLogger(args.stats)
        logger.open()

    try:
        if args.curses:
            alive_probability = (
                args.random if args.random is not None else DEFAULT_ALIVE_PROBABILITY
            )
            curses.wrapper(run_curses, grid, args.delay, logger,
                           alive_probability, args.generations)
        else:
            run_plain(grid, args.generations, args.delay, logger=logger)
    except KeyboardInterrupt:
        pass
    finally:
        if logger is not None:
            logger.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
