import unittest

from physics import SimState
from evaluation import ChampionTracker, RaceLimits, finish_time, is_better, race_timer


def finisher(frames: int, distance: int) -> SimState:
    return SimState(elapsed_frames=frames, distance=distance, inputs=(0,) * (frames + 1))


class TestEvaluation(unittest.TestCase):
    def test_fewer_frames_replace_champion(self):
        tracker = ChampionTracker()
        tracker.champion = finisher(125, 25000)
        self.assertTrue(tracker.consider(finisher(120, 25000)))
        self.assertEqual(tracker.champion.elapsed_frames, 120)

    def test_same_frames_shorter_distance_does_not_replace(self):
        tracker = ChampionTracker()
        incumbent = finisher(125, 25000)
        tracker.champion = incumbent
        self.assertFalse(tracker.consider(finisher(125, 24000)))
        self.assertIs(tracker.champion, incumbent)

    def test_same_frames_longer_distance_replaces(self):
        self.assertTrue(is_better(finisher(125, 25001), finisher(125, 25000)))
        self.assertFalse(is_better(finisher(125, 25000), finisher(125, 25000)))
        self.assertFalse(is_better(finisher(126, 30000), finisher(125, 25000)))

    def test_sentinel_accepts_first_finish_at_ceiling(self):
        limits = RaceLimits()
        tracker = ChampionTracker(limits)
        self.assertFalse(tracker.found)
        self.assertEqual(tracker.champion.elapsed_frames, limits.max_frames)
        self.assertEqual(tracker.champion.distance, 0)

        self.assertTrue(tracker.consider(finisher(limits.max_frames, limits.winning_distance)))
        self.assertTrue(tracker.found)

    def test_finish_time_truncates(self):
        self.assertEqual(finish_time(167), 5.57)   # 557.78 -> 557
        self.assertEqual(finish_time(166), 5.54)   # 554.44 -> 554
        self.assertEqual(finish_time(50), 1.67)    # exact product stays exact
        self.assertEqual(finish_time(0), 0.0)

    def test_race_timer_counts_launch_frame(self):
        self.assertEqual(race_timer(finisher(166, 24900)), finish_time(167))

    def test_feasibility_bound(self):
        limits = RaceLimits(winning_distance=1000, max_frames=10, max_speed=100)
        self.assertTrue(limits.can_still_win(finisher(5, 500), frame=5))
        self.assertFalse(limits.can_still_win(finisher(5, 499), frame=5))
        self.assertTrue(limits.has_won(finisher(9, 1000)))
        self.assertFalse(limits.has_won(finisher(9, 999)))

    def test_limits_validation(self):
        with self.assertRaises(ValueError):
            RaceLimits(winning_distance=0)
        with self.assertRaises(ValueError):
            RaceLimits(max_frames=-1)
        with self.assertRaises(ValueError):
            RaceLimits(tachometer_step=0)
        with self.assertRaises(ValueError):
            RaceLimits(frame_counter_step=17)


if __name__ == "__main__":
    unittest.main()
