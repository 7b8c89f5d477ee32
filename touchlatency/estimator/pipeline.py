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
"""State machine driving a single latency trial through its stages.

  IDLE --start()--> AWAITING_VSYNC --> AWAITING_PROCESSING
       --> AWAITING_DISPLAY --> SETTLING --> IDLE

Each arrow after start() is one continuation scheduled on the TrialClock. The
sample is recorded on entering SETTLING; new trials are only accepted once
the settle delay has elapsed and the pipeline is IDLE again.
"""

import dataclasses as dc
import enum
import logging
import threading
from typing import Callable, Optional

from touchlatency.device.profile import round_half_up
from touchlatency.estimator.clock import TrialClock
from touchlatency.estimator.history import TrialHistory
from touchlatency.estimator.history import TrialStats
from touchlatency.estimator.stages import LatencySample
from touchlatency.estimator.stages import StageModel

LOG = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY_MS = 300

SampleCallback = Callable[[LatencySample, TrialStats], None]


class TrialState(enum.Enum):
  IDLE = 'idle'
  AWAITING_VSYNC = 'awaiting_vsync'
  AWAITING_PROCESSING = 'awaiting_processing'
  AWAITING_DISPLAY = 'awaiting_display'
  SETTLING = 'settling'


@dc.dataclass
class _InFlightTrial:
  trial_id: int
  touch_detection_ms: int
  vsync_wait_ms: int
  vsync_at_ms: float = 0.0
  processing_delay_ms: float = 0.0
  display_ms: int = 0


class TrialPipeline:

  def __init__(self,
               model: StageModel,
               clock: TrialClock,
               history: TrialHistory,
               settle_delay_ms: float = DEFAULT_SETTLE_DELAY_MS,
               on_sample: Optional[SampleCallback] = None,
               on_settled: Optional[Callable[[], None]] = None):
    self.model = model
    self.clock = clock
    self.history = history
    self.settle_delay_ms = settle_delay_ms
    self.on_sample = on_sample
    self.on_settled = on_settled

    self._lock = threading.Lock()
    self._state = TrialState.IDLE
    self._trial: Optional[_InFlightTrial] = None
    self._last_trial_id = 0
    self._latest_sample: Optional[LatencySample] = None

  @property
  def state(self) -> TrialState:
    with self._lock:
      return self._state

  @property
  def is_active(self) -> bool:
    return self.state != TrialState.IDLE

  @property
  def latest_sample(self) -> Optional[LatencySample]:
    with self._lock:
      return self._latest_sample

  def clear_latest_sample(self):
    with self._lock:
      self._latest_sample = None

  def start(self) -> bool:
    """Starts a trial unless one is already in flight.

    Returns:
      True if a trial was started, False if the request was ignored.
    """
    with self._lock:
      if self._state != TrialState.IDLE:
        LOG.debug('Ignoring trial request while %s', self._state.value)
        return False
      self._last_trial_id += 1
      trial = _InFlightTrial(
          trial_id=self._last_trial_id,
          touch_detection_ms=self.model.touch_detection_ms(),
          vsync_wait_ms=self.model.vsync_wait_ms())
      self._trial = trial
      self._transition(TrialState.AWAITING_VSYNC)
    self.clock.call_later(trial.touch_detection_ms + trial.vsync_wait_ms,
                          self._on_vsync)
    return True

  def _transition(self, state: TrialState):
    LOG.debug('Trial %d: %s -> %s', self._trial.trial_id, self._state.value,
              state.value)
    self._state = state

  def _on_vsync(self):
    with self._lock:
      trial = self._trial
      trial.vsync_at_ms = self.clock.now_ms()
      trial.processing_delay_ms = self.model.processing_delay_ms()
      self._transition(TrialState.AWAITING_PROCESSING)
    self.clock.call_later(
        round_half_up(trial.processing_delay_ms), self._on_render_complete)

  def _on_render_complete(self):
    with self._lock:
      trial = self._trial
      since_vsync = self.clock.now_ms() - trial.vsync_at_ms
      trial.display_ms = self.model.display_delay_ms(since_vsync)
      self._transition(TrialState.AWAITING_DISPLAY)
    self.clock.call_later(trial.display_ms, self._on_displayed)

  def _on_displayed(self):
    with self._lock:
      trial = self._trial
      os_ms, render_ms = self.model.split_processing(trial.processing_delay_ms)
      sample = LatencySample(
          trial_id=trial.trial_id,
          touch_detection_ms=trial.touch_detection_ms,
          vsync_wait_ms=trial.vsync_wait_ms,
          os_processing_ms=os_ms,
          rendering_ms=render_ms,
          display_ms=trial.display_ms,
          frame_time_ms=self.model.frame_time_ms)
      sample = dc.replace(
          sample,
          correction_ms=self.model.correction_ms(sample.raw_total_ms,
                                                 sample.display_ms))
      self._latest_sample = sample
      stats = self.history.append(sample.total_ms)
      self._transition(TrialState.SETTLING)
    if self.on_sample:
      self.on_sample(sample, stats)
    self.clock.call_later(self.settle_delay_ms, self._on_settled)

  def _on_settled(self):
    with self._lock:
      self._transition(TrialState.IDLE)
      self._trial = None
    if self.on_settled:
      self.on_settled()
