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

import abc
import dataclasses as dc
from typing import Optional

import numpy as np

from touchlatency.common.exceptions import TouchLatencyException
from touchlatency.device.profile import DeviceProfile
from touchlatency.estimator.clock import TrialClock
from touchlatency.estimator.history import TrialHistory
from touchlatency.estimator.history import TrialStats
from touchlatency.estimator.pipeline import DEFAULT_SETTLE_DELAY_MS
from touchlatency.estimator.pipeline import TrialPipeline
from touchlatency.estimator.pipeline import TrialState
from touchlatency.estimator.rating import Rating
from touchlatency.estimator.rating import classify_latency
from touchlatency.estimator.stages import LatencySample
from touchlatency.estimator.stages import StageModel


@dc.dataclass
class LatencyEstimatorConfig:
  # Seed for the random generator drawing stage delays. If not specified,
  # every estimator produces a different sequence of samples.
  seed: Optional[int] = None

  # Time in milliseconds after a sample is recorded during which new trials
  # are still rejected; suppresses rapid repeated triggers.
  settle_delay_ms: float = DEFAULT_SETTLE_DELAY_MS

  def __init__(self,
               seed: Optional[int] = None,
               settle_delay_ms: float = DEFAULT_SETTLE_DELAY_MS):
    if settle_delay_ms < 0:
      raise TouchLatencyException(
          f'settle_delay_ms must not be negative ({settle_delay_ms}).')
    self.seed = seed
    self.settle_delay_ms = settle_delay_ms


class LatencyEstimator:
  """Estimates touch-to-display latency for one device.

  Usage:
    profile = derive_device_profile(StaticPlatformDelegate(...))
    clock = FakeClock()
    estimator = LatencyEstimator(profile, clock)
    estimator.run_trial()
    clock.run_until_idle()
    print(estimator.latest_sample.total_ms, estimator.stats())
  """

  class Observer(abc.ABC):
    """Receives the results of trials, e.g. to update a user interface."""

    @abc.abstractmethod
    def trial_completed(self, sample: LatencySample, stats: TrialStats):
      """Invoked once per trial, when its sample has been recorded.

      Args:
        sample: the breakdown of the trial.
        stats: statistics over the history including this trial.
      """
      raise NotImplementedError

    def trial_settled(self):
      """Invoked when the estimator is ready to accept a new trial."""

  def __init__(self,
               profile: DeviceProfile,
               clock: TrialClock,
               config: Optional[LatencyEstimatorConfig] = None,
               history: Optional[TrialHistory] = None,
               observer: Optional[Observer] = None):
    """Creates an estimator.

    Args:
      profile: capabilities of the device being modelled.
      clock: clock on which the stages of each trial are scheduled.
      config: configuration options of the estimator.
      history: history to record totals into; a fresh one is created if not
        specified. Passing one allows sharing statistics between estimators.
      observer: an optional observer notified of every completed trial.
    """
    self.profile = profile
    self.clock = clock
    self.config = config if config is not None else LatencyEstimatorConfig()
    self.history = history if history is not None else TrialHistory()
    self.observer = observer
    self.model = StageModel(profile, np.random.default_rng(self.config.seed))
    self.pipeline = TrialPipeline(
        self.model,
        clock,
        self.history,
        settle_delay_ms=self.config.settle_delay_ms,
        on_sample=self._on_sample,
        on_settled=self._on_settled)

  def run_trial(self) -> bool:
    """Starts a trial on the clock.

    The trial completes asynchronously as the clock runs. Requests made while
    a trial is in flight or settling are ignored.

    Returns:
      True if a trial was started.
    """
    return self.pipeline.start()

  @property
  def is_active(self) -> bool:
    return self.pipeline.is_active

  @property
  def state(self) -> TrialState:
    return self.pipeline.state

  @property
  def latest_sample(self) -> Optional[LatencySample]:
    return self.pipeline.latest_sample

  def stats(self) -> TrialStats:
    return self.history.stats

  def reset_statistics(self):
    self.history.reset()
    self.pipeline.clear_latest_sample()

  @staticmethod
  def rating_of(total_ms: float) -> Rating:
    return classify_latency(total_ms)

  def _on_sample(self, sample: LatencySample, stats: TrialStats):
    if self.observer:
      self.observer.trial_completed(sample, stats)

  def _on_settled(self):
    if self.observer:
      self.observer.trial_settled()
