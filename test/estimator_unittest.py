# Copyright (C) 2026 The Android Open Source Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import unittest

import numpy as np

from touchlatency.common.exceptions import TouchLatencyException
from touchlatency.device.platform import StaticPlatformDelegate
from touchlatency.device.power import PerformanceLevel
from touchlatency.device.power import PowerState
from touchlatency.device.profile import DeviceProfile
from touchlatency.device.profile import derive_device_profile
from touchlatency.estimator.api import LatencyEstimator
from touchlatency.estimator.api import LatencyEstimatorConfig
from touchlatency.estimator.clock import FakeClock
from touchlatency.estimator.clock import RealtimeClock
from touchlatency.estimator.history import TrialHistory
from touchlatency.estimator.history import TrialStats
from touchlatency.estimator.pipeline import TrialState


class FixedRng:

  def __init__(self, uniform=0.0, integer=9):
    self.uniform_value = uniform
    self.integer_value = integer

  def uniform(self, low, high):
    return self.uniform_value

  def integers(self, low, high):
    return self.integer_value


class RecordingObserver(LatencyEstimator.Observer):

  def __init__(self, clock):
    self.clock = clock
    self.completed = []
    self.settled = 0

  def trial_completed(self, sample, stats):
    self.completed.append((sample, stats, self.clock.now_ms()))

  def trial_settled(self):
    self.settled += 1


def make_profile(power_state=PowerState.NORMAL,
                 level=PerformanceLevel.NORMAL,
                 refresh=60.0):
  return DeviceProfile(
      refresh_rate_hz=refresh,
      max_refresh_rate_hz=refresh,
      min_refresh_rate_hz=refresh,
      touch_polling_hz=120.0,
      power_state=power_state,
      performance_level=level)


class TestLatencyEstimator(unittest.TestCase):

  def create(self, profile=None, rng=None, settle_delay_ms=300, seed=None):
    clock = FakeClock()
    observer = RecordingObserver(clock)
    estimator = LatencyEstimator(
        profile or make_profile(),
        clock,
        config=LatencyEstimatorConfig(
            seed=seed, settle_delay_ms=settle_delay_ms),
        observer=observer)
    if rng is not None:
      estimator.model.rng = rng
    return estimator, clock, observer

  def test_stage_by_stage(self):
    estimator, clock, observer = self.create(rng=FixedRng())
    self.assertEqual(estimator.state, TrialState.IDLE)
    self.assertTrue(estimator.run_trial())

    # Touch detected after 4ms, next vsync 9ms later.
    self.assertEqual(estimator.state, TrialState.AWAITING_VSYNC)
    clock.advance(12)
    self.assertEqual(estimator.state, TrialState.AWAITING_VSYNC)
    clock.advance(1)
    self.assertEqual(estimator.state, TrialState.AWAITING_PROCESSING)

    # 8.5ms of processing, scheduled as 9ms.
    clock.advance(9)
    self.assertEqual(estimator.state, TrialState.AWAITING_DISPLAY)
    self.assertIsNone(estimator.latest_sample)

    # The frame is shown at the next boundary, 17 - 9 = 8ms later.
    clock.advance(8)
    self.assertEqual(estimator.state, TrialState.SETTLING)
    self.assertEqual(len(observer.completed), 1)

    sample, stats, completed_at = observer.completed[0]
    self.assertEqual(completed_at, 30)
    self.assertEqual(sample.trial_id, 1)
    self.assertEqual(sample.touch_detection_ms, 4)
    self.assertEqual(sample.vsync_wait_ms, 9)
    self.assertEqual(sample.os_processing_ms, 3)
    self.assertEqual(sample.rendering_ms, 6)
    self.assertEqual(sample.display_ms, 8)
    self.assertEqual(sample.frame_time_ms, 17)
    self.assertEqual(sample.correction_ms, 0)
    self.assertEqual(sample.total_ms, 30)
    self.assertEqual(stats, TrialStats(1, 30, 30, 30.0))
    self.assertEqual(estimator.latest_sample, sample)

    clock.advance(299)
    self.assertEqual(estimator.state, TrialState.SETTLING)
    self.assertEqual(observer.settled, 0)
    clock.advance(1)
    self.assertEqual(estimator.state, TrialState.IDLE)
    self.assertEqual(observer.settled, 1)

  def test_correction_in_game_mode(self):
    profile = make_profile(
        power_state=PowerState.GAME_MODE, level=PerformanceLevel.HIGH)
    estimator, clock, observer = self.create(profile=profile, rng=FixedRng())
    estimator.run_trial()
    clock.run_until_idle()

    sample, _, _ = observer.completed[0]
    # 4.17ms * 0.9 touch, 8.1ms of processing leaves 9ms until the boundary.
    self.assertEqual(sample.touch_detection_ms, 4)
    self.assertEqual(sample.os_processing_ms, 2)
    self.assertEqual(sample.rendering_ms, 6)
    self.assertEqual(sample.display_ms, 9)
    self.assertEqual(sample.raw_total_ms, 30)
    self.assertEqual(sample.correction_ms, 8)
    self.assertEqual(sample.total_ms, 22)

  def test_rejects_overlapping_trials(self):
    estimator, clock, observer = self.create(rng=FixedRng())
    self.assertTrue(estimator.run_trial())
    self.assertFalse(estimator.run_trial())
    clock.advance(20)
    self.assertFalse(estimator.run_trial())
    # Sample recorded at 30ms but still settling.
    clock.advance(100)
    self.assertEqual(estimator.state, TrialState.SETTLING)
    self.assertFalse(estimator.run_trial())
    clock.run_until_idle()

    self.assertEqual(len(observer.completed), 1)
    self.assertEqual(estimator.stats().count, 1)
    self.assertFalse(estimator.is_active)
    self.assertTrue(estimator.run_trial())

  def test_trial_ids_are_unique(self):
    estimator, clock, observer = self.create(seed=3)
    for _ in range(5):
      self.assertTrue(estimator.run_trial())
      clock.run_until_idle()
    ids = [sample.trial_id for sample, _, _ in observer.completed]
    self.assertEqual(ids, [1, 2, 3, 4, 5])

  def test_invariants_over_many_trials(self):
    for refresh in [60.0, 90.0, 120.0]:
      estimator, clock, observer = self.create(
          profile=make_profile(refresh=refresh), seed=11)
      frame = estimator.profile.frame_time_ms
      for _ in range(100):
        estimator.run_trial()
        clock.run_until_idle()

      totals = []
      for sample, _, _ in observer.completed:
        stages = (
            sample.touch_detection_ms + sample.vsync_wait_ms +
            sample.os_processing_ms + sample.rendering_ms + sample.display_ms)
        self.assertEqual(sample.raw_total_ms, stages)
        self.assertEqual(sample.total_ms, stages - sample.correction_ms)
        self.assertTrue(1 <= sample.vsync_wait_ms < frame)
        self.assertTrue(0 < sample.display_ms <= frame)

        triggered = stages > frame and sample.display_ms > frame / 2
        if not triggered:
          self.assertEqual(sample.correction_ms, 0)
        elif refresh >= 90:
          self.assertEqual(sample.correction_ms, frame // 3)
        else:
          self.assertEqual(sample.correction_ms, frame // 2)
        totals.append(sample.total_ms)

      stats = estimator.stats()
      self.assertEqual(stats.count, 100)
      self.assertEqual(stats.min_ms, min(totals))
      self.assertEqual(stats.max_ms, max(totals))
      self.assertAlmostEqual(stats.average_ms, float(np.mean(totals)))

  def test_seed_reproducibility(self):
    results = []
    for _ in range(2):
      estimator, clock, observer = self.create(seed=42)
      for _ in range(10):
        estimator.run_trial()
        clock.run_until_idle()
      results.append([s.total_ms for s, _, _ in observer.completed])
    self.assertEqual(results[0], results[1])

  def test_reset_statistics(self):
    estimator, clock, _ = self.create(seed=5)
    for _ in range(3):
      estimator.run_trial()
      clock.run_until_idle()
    self.assertEqual(estimator.stats().count, 3)
    self.assertIsNotNone(estimator.latest_sample)

    estimator.reset_statistics()
    self.assertEqual(estimator.stats(), TrialStats(0, 0, 0, 0.0))
    self.assertIsNone(estimator.latest_sample)

  def test_shared_history(self):
    history = TrialHistory()
    clock = FakeClock()
    profile = make_profile()
    first = LatencyEstimator(profile, clock, history=history)
    second = LatencyEstimator(profile, clock, history=history)
    first.run_trial()
    second.run_trial()
    clock.run_until_idle()
    self.assertEqual(history.stats.count, 2)
    self.assertEqual(first.stats(), second.stats())

  def test_without_observer(self):
    clock = FakeClock()
    estimator = LatencyEstimator(make_profile(), clock)
    self.assertTrue(estimator.run_trial())
    clock.run_until_idle()
    self.assertEqual(estimator.stats().count, 1)

  def test_very_high_refresh_rate(self):
    estimator, clock, observer = self.create(
        profile=make_profile(refresh=3000.0), seed=3)
    for _ in range(5):
      self.assertTrue(estimator.run_trial())
      clock.run_until_idle()
    self.assertEqual(estimator.stats().count, 5)
    for sample, _, _ in observer.completed:
      self.assertEqual(sample.frame_time_ms, 1)
      self.assertEqual(sample.vsync_wait_ms, 1)
      self.assertEqual(sample.display_ms, 1)

  def test_non_finite_refresh_rate(self):
    for rate in [float('inf'), float('nan')]:
      profile = derive_device_profile(
          StaticPlatformDelegate(
              model='Acme A1', os_version=30, refresh_rate_hz=rate))
      estimator, clock, _ = self.create(profile=profile, seed=5)
      self.assertTrue(estimator.run_trial())
      clock.run_until_idle()
      self.assertEqual(estimator.latest_sample.frame_time_ms, 17)
      self.assertEqual(estimator.stats().count, 1)

  def test_default_config_is_not_shared(self):
    clock = FakeClock()
    first = LatencyEstimator(make_profile(), clock)
    first.config.settle_delay_ms = 0
    second = LatencyEstimator(make_profile(), clock)
    self.assertIsNot(first.config, second.config)
    self.assertEqual(second.config.settle_delay_ms, 300)

  def test_rating_of(self):
    self.assertEqual(LatencyEstimator.rating_of(20).label, 'very good')
    self.assertEqual(LatencyEstimator.rating_of(33).label, 'good')

  def test_negative_settle_delay(self):
    with self.assertRaises(TouchLatencyException):
      LatencyEstimatorConfig(settle_delay_ms=-1)

  def test_observer_is_abstract(self):
    with self.assertRaises(TypeError):
      LatencyEstimator.Observer()

  def test_realtime_clock(self):
    profile = derive_device_profile(
        StaticPlatformDelegate(
            model='ASUS ROG Phone 6', os_version=31, refresh_rate_hz=165.0))
    clock = RealtimeClock()
    estimator = LatencyEstimator(
        profile, clock, config=LatencyEstimatorConfig(seed=1,
                                                      settle_delay_ms=0))
    self.assertTrue(estimator.run_trial())
    # Vsync, render complete, display and settle continuations.
    self.assertEqual(clock.run_until_idle(), 4)
    self.assertEqual(estimator.state, TrialState.IDLE)
    sample = estimator.latest_sample
    self.assertEqual(sample.frame_time_ms, 6)
    self.assertEqual(sample.total_ms,
                     sample.raw_total_ms - sample.correction_ms)
    self.assertTrue(0 < sample.display_ms <= 6)
