from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional

from physics import MAX_FRAME_COUNTER, MAX_TACHOMETER, SimState, seed_state, step
from state_key import GenerationTable, encode_state
from evaluation import ChampionTracker, RaceLimits

logger = logging.getLogger(__name__)

CONTROLS = ((False, False), (False, True), (True, False), (True, True))  # (clutch, shift)


@dataclass
class GroupResult:
    frame_counter: int
    won: bool
    frames_explored: int
    simulations: int
    champion: Optional[SimState] = None  # best finish of this group, if any


@dataclass
class SearchResult:
    champion: SimState
    found: bool
    simulations: int
    groups: List[GroupResult]


def frame_counters(limits: RaceLimits) -> List[int]:
    return list(range(0, MAX_FRAME_COUNTER, limits.frame_counter_step))


def seed_tachometers(limits: RaceLimits) -> List[int]:
    return list(range(0, MAX_TACHOMETER, limits.tachometer_step))


class SearchSession:
    """
    Generational breadth-first search over every reachable race state.

    - Generation: all live states sharing the same elapsed frame count.
    - Expansion: each live state is stepped with the four clutch/shift inputs.
    - Pruning: states over-revving the tachometer, or too far behind to reach
      the line even at top speed, are dropped.
    - Deduplication: survivors are keyed by encode_state(); per key only the
      state with the greatest distance is kept.

    The session owns both generation tables and the champion; tables are
    allocated once and reused for every launch-condition group.
    """

    def __init__(self, limits: RaceLimits = RaceLimits()) -> None:
        self.limits = limits
        self.current = GenerationTable()
        self.upcoming = GenerationTable()
        self.tracker = ChampionTracker(limits)
        self.group_tracker = ChampionTracker(limits)  # reset for every group
        self.simulations = 0
        logger.debug("Allocated two generation tables of %d states.", self.current.capacity)

    @property
    def champion(self) -> SimState:
        return self.tracker.champion

    # ---------- seeding ----------
    def seed_group(self, frame_counter: int) -> None:
        """Fill the current generation with every launch state for one frame counter."""
        self.current.clear()
        self.upcoming.clear()
        for tachometer in seed_tachometers(self.limits):
            for clutch in (False, True):
                for shift in (False, True):
                    s0 = seed_state(tachometer, frame_counter, clutch, shift)
                    self.current.put(encode_state(s0), s0)

    # ---------- generational step ----------
    def advance(self, frame: int) -> bool:
        """
        Expand every state due for `frame` into the next generation, then swap.
        Returns True when some state crossed the finish line during this frame.
        """
        limits = self.limits
        upcoming = self.upcoming
        won = False

        for state in self.current:
            if state.elapsed_frames != frame - 1:
                continue
            for clutch, shift in CONTROLS:
                nxt = step(state, clutch, shift)
                self.simulations += 1

                if nxt.tachometer >= MAX_TACHOMETER or not limits.can_still_win(nxt, frame):
                    continue
                if limits.has_won(nxt):
                    self.tracker.consider(nxt)
                    self.group_tracker.consider(nxt)
                    won = True
                    continue
                upcoming.offer(encode_state(nxt), nxt)

        self.current, self.upcoming = self.upcoming, self.current
        self.upcoming.clear()
        return won

    # ---------- drivers ----------
    def run_group(self, frame_counter: int) -> GroupResult:
        """
        Search every race launched with `frame_counter`.
        Stops after the first frame that produced a finish, or when no state survives.
        """
        logger.info("Now testing all configurations with an initial frame counter equal to %d.", frame_counter)
        sims_before = self.simulations
        self.group_tracker = ChampionTracker(self.limits)
        self.seed_group(frame_counter)

        won = False
        frame = 0
        while frame < self.limits.max_frames and self.current and not won:
            frame += 1
            won = self.advance(frame)
            logger.debug("frame %d: %d live states", frame, len(self.current))

        result = GroupResult(
            frame_counter=frame_counter,
            won=won,
            frames_explored=frame,
            simulations=self.simulations - sims_before,
            champion=self.group_tracker.champion if self.group_tracker.found else None,
        )
        self.current.clear()
        self.upcoming.clear()
        logger.info(
            "Frame counter %d: %s after %d frames, %d simulations.",
            frame_counter,
            "finished" if won else "no finish",
            result.frames_explored,
            result.simulations,
        )
        return result

    def run(self, counters: Optional[Iterable[int]] = None) -> SearchResult:
        if counters is None:
            counters = frame_counters(self.limits)
        groups = [self.run_group(fc) for fc in counters]
        return SearchResult(
            champion=self.champion,
            found=self.tracker.found,
            simulations=self.simulations,
            groups=groups,
        )


def _run_group_worker(limits: RaceLimits, frame_counter: int) -> GroupResult:
    """Process-pool entry point: one fresh session per group."""
    return SearchSession(limits).run_group(frame_counter)


def run_search(
    limits: RaceLimits = RaceLimits(),
    counters: Optional[Iterable[int]] = None,
    workers: int = 1,
) -> SearchResult:
    """
    Run the whole search, optionally spreading launch-condition groups over
    worker processes. Group champions are merged in group order, so the
    outcome matches a sequential run exactly.
    """
    counters = list(frame_counters(limits) if counters is None else counters)
    if workers <= 1 or len(counters) <= 1:
        return SearchSession(limits).run(counters)

    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_run_group_worker, limits, fc) for fc in counters]
        groups = [future.result() for future in futures]

    tracker = ChampionTracker(limits)
    for group in groups:
        if group.champion is not None:
            tracker.consider(group.champion)
    return SearchResult(
        champion=tracker.champion,
        found=tracker.found,
        simulations=sum(g.simulations for g in groups),
        groups=groups,
    )
