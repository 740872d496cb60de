from __future__ import annotations

"""
Exhaustive Dragster race solver

- Sweeps every launch frame counter, searching all clutch/shift sequences
- Reports the best race time, its sub-distance and the simulation count
- Prints the winning trace (per-frame physics and the raw input listing)

Usage:
  python run_solver.py

Exits with status 0 when a finishing race exists under the frame ceiling, 1 otherwise.
"""

import logging
import os
import sys
import time
from typing import Optional, TextIO

from physics import SimState, decode_input, replay
from evaluation import RaceLimits, finish_time, race_timer
from solver import SearchResult, run_search


def print_report(result: SearchResult, limits: RaceLimits, out: Optional[TextIO] = None) -> None:
    out = out if out is not None else sys.stdout
    out.write("\n")
    if not result.found:
        out.write(f"It's not possible to do the race under {finish_time(limits.max_frames):0.2f}s.\n")
        out.write(f"{result.simulations} simulations were performed.\n")
        return

    best = result.champion
    t = race_timer(best)
    out.write(f"The best possible race is {t:0.2f}s.\n")
    out.write(f"The best subdistance reachable with a {t:0.2f}s timer is {best.distance % 256}.\n")
    out.write(f"{result.simulations} simulations were performed.\n")


def print_trace(state: SimState, show_physics: bool = True, out: Optional[TextIO] = None) -> None:
    """
    Replay a state's inputs and print them frame by frame.
    show_physics=True: "frame: clutch,shift | gear - speed - tach - delta - distance"
    show_physics=False: one "shift<TAB>clutch" line per frame.
    """
    out = out if out is not None else sys.stdout
    for frame, s in enumerate(replay(state)):
        clutch, shift = decode_input(s.last_input)
        if show_physics:
            out.write(
                f"{frame}: {int(clutch)},{int(shift)} | "
                f"{s.gear} - {s.speed} - {s.tachometer} - {s.tachometer_delta} - {s.distance}\n"
            )
        else:
            out.write(f"{int(shift)}\t{int(clutch)}\n")
    out.write(f"Initial frame_counter: {state.initial_frame_counter}\n")
    out.write(f"Initial tachometer: {state.initial_tachometer}\n")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    limits = RaceLimits()
    workers = max(1, os.cpu_count() or 1)

    t0 = time.perf_counter()
    result = run_search(limits, workers=workers)
    dt = time.perf_counter() - t0
    logging.getLogger(__name__).info("Search finished in %.1f s using %d worker(s).", dt, workers)

    print_report(result, limits)
    if not result.found:
        return 1

    print()
    print_trace(result.champion, show_physics=True)
    print()
    print_trace(result.champion, show_physics=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
