from __future__ import annotations

from dataclasses import dataclass

from physics import MAX_FRAME_COUNTER, MAX_SPEED, MAX_TACHOMETER, SimState


@dataclass(frozen=True)
class RaceLimits:
    """
    Constants bounding the search.
    Defaults describe the real quarter-mile: 97 * 256 distance units, and no
    race slower than 167 frames is worth exploring.
    """
    winning_distance: int = 97 * 256
    max_frames: int = 167
    max_speed: int = MAX_SPEED

    # Launch conditions swept per run
    tachometer_step: int = 3
    frame_counter_step: int = 2

    def __post_init__(self) -> None:
        if self.winning_distance <= 0:
            raise ValueError("winning_distance must be positive")
        if self.max_frames <= 0:
            raise ValueError("max_frames must be positive")
        if self.max_speed <= 0:
            raise ValueError("max_speed must be positive")
        if not 0 < self.tachometer_step <= MAX_TACHOMETER:
            raise ValueError(f"tachometer_step must be in (0, {MAX_TACHOMETER}]")
        if not 0 < self.frame_counter_step <= MAX_FRAME_COUNTER:
            raise ValueError(f"frame_counter_step must be in (0, {MAX_FRAME_COUNTER}]")

    def can_still_win(self, state: SimState, frame: int) -> bool:
        """Upper bound: even flat out for every remaining frame, could it reach the line?"""
        return state.distance + self.max_speed * (self.max_frames - frame) >= self.winning_distance

    def has_won(self, state: SimState) -> bool:
        return state.distance >= self.winning_distance


def finish_time(frames: int) -> float:
    """
    Convert a frame count to in-game seconds: floor(frames * 3.34) / 100.
    Integer math keeps the truncation exact.
    """
    return (frames * 334 // 100) / 100.0


def race_timer(state: SimState) -> float:
    """Seconds shown on the in-game timer for this state."""
    return finish_time(state.timer)


def is_better(candidate: SimState, incumbent: SimState) -> bool:
    """Fewer frames wins; on equal frames, the longer distance wins."""
    if candidate.elapsed_frames != incumbent.elapsed_frames:
        return candidate.elapsed_frames < incumbent.elapsed_frames
    return candidate.distance > incumbent.distance


class ChampionTracker:
    """Best finishing state seen so far, starting from a no-result sentinel."""

    def __init__(self, limits: RaceLimits = RaceLimits()) -> None:
        self.limits = limits
        self.champion = SimState(
            elapsed_frames=limits.max_frames,
            distance=0,
            inputs=(0,) * (limits.max_frames + 1),
        )

    @property
    def found(self) -> bool:
        # Any real finish has covered some distance; the sentinel has not.
        return self.champion.distance > 0

    def consider(self, candidate: SimState) -> bool:
        if is_better(candidate, self.champion):
            self.champion = candidate
            return True
        return False
