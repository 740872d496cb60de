from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

INPUT_CLUTCH = 1
INPUT_SHIFT = 2

MAX_TACHOMETER = 32
MAX_FRAME_COUNTER = 16
MAX_GEAR = 4
MAX_SPEED = 256


@dataclass
class SimState:
    """One frame of a simulated race, plus the inputs that led to it."""
    elapsed_frames: int = 0
    frame_counter: int = 0
    tachometer: int = 0
    tachometer_delta: int = 0  # post-update tachometer minus pre-update tachometer
    speed: int = 0
    gear: int = 0
    distance: int = 0
    initial_tachometer: int = 0
    initial_frame_counter: int = 0
    inputs: Tuple[int, ...] = (0,)  # one record per frame, len == elapsed_frames + 1

    @property
    def last_input(self) -> int:
        return self.inputs[self.elapsed_frames]

    @property
    def timer(self) -> int:
        """In-game frame timer; the launch frame already counts as one."""
        return self.elapsed_frames + 1


def encode_input(clutch: bool, shift: bool) -> int:
    return (INPUT_CLUTCH if clutch else 0) | (INPUT_SHIFT if shift else 0)


def decode_input(code: int) -> Tuple[bool, bool]:
    """Return (clutch, shift) for a recorded input."""
    return bool(code & INPUT_CLUTCH), bool(code & INPUT_SHIFT)


def seed_state(tachometer: int, frame_counter: int, clutch: bool, shift: bool) -> SimState:
    """Build a launch state from the initial tachometer/frame counter and first input."""
    if not 0 <= tachometer < MAX_TACHOMETER:
        raise ValueError(f"Initial tachometer {tachometer} outside [0, {MAX_TACHOMETER})")
    if not 0 <= frame_counter < MAX_FRAME_COUNTER:
        raise ValueError(f"Initial frame counter {frame_counter} outside [0, {MAX_FRAME_COUNTER})")
    return SimState(
        frame_counter=frame_counter,
        tachometer=tachometer,
        initial_tachometer=tachometer,
        initial_frame_counter=frame_counter,
        inputs=(encode_input(clutch, shift),),
    )


def speed_limit(tachometer: int, gear: int) -> int:
    """
    Top speed the engine pushes toward for a tachometer/gear pair:
    tach * 2^(gear-1), plus 2^(gear-2) in gears 2+ once the tachometer reaches 20.
    Gear 0 has a half multiplier, truncated like the game's integer math.
    """
    limit = (tachometer << gear) >> 1
    if tachometer >= 20 and gear > 1:
        limit += 1 << (gear - 2)
    return limit


def step(state: SimState, clutch: bool, shift: bool) -> SimState:
    """
    Advance the race by one frame with the given clutch/shift input.
    Returns a new state; the input state is left untouched.
    """
    inputs = state.inputs + (encode_input(clutch, shift),)
    elapsed = state.elapsed_frames + 1
    frame_counter = (state.frame_counter + 2) % MAX_FRAME_COUNTER

    # A shift requested on the previous frame engages now.
    shifted = bool(inputs[elapsed - 1] & INPUT_SHIFT)

    gear = state.gear
    tach = state.tachometer
    delta = state.tachometer_delta
    if shifted:
        gear = min(gear + 1, MAX_GEAR)
        if clutch:
            tach -= delta - 3
        else:
            tach -= delta + 3
    elif frame_counter % (1 << gear) == 0:
        if clutch:
            tach -= delta - 1
        else:
            tach -= delta + 1
    else:
        tach -= delta
    if tach < 0:
        tach = 0

    limit = speed_limit(tach, gear)

    if shifted:
        delta = 0
    else:
        delta = 1 if limit - state.speed >= 16 else 0

    speed = state.speed
    if gear and not shifted:
        if speed > limit:
            speed -= 1
        if speed < limit:
            speed += 2

    return SimState(
        elapsed_frames=elapsed,
        frame_counter=frame_counter,
        tachometer=tach,
        tachometer_delta=delta,
        speed=speed,
        gear=gear,
        distance=state.distance + speed,
        initial_tachometer=state.initial_tachometer,
        initial_frame_counter=state.initial_frame_counter,
        inputs=inputs,
    )


def simulate_inputs(s0: SimState, inputs: Sequence[int]) -> List[SimState]:
    """
    Apply a sequence of recorded inputs from s0, one frame each.
    Returns the trajectory, starting with s0 itself.
    """
    trajectory = [s0]
    prev = s0
    for code in inputs:
        clutch, shift = decode_input(code)
        prev = step(prev, clutch, shift)
        trajectory.append(prev)
    return trajectory


def replay(state: SimState) -> List[SimState]:
    """
    Re-run a state's recorded inputs from its launch conditions.
    The last element reproduces `state` (distance, frames and all physics fields).
    """
    clutch, shift = decode_input(state.inputs[0])
    s0 = seed_state(state.initial_tachometer, state.initial_frame_counter, clutch, shift)
    return simulate_inputs(s0, state.inputs[1:])
