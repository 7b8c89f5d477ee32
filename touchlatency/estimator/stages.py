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
"""Stochastic model of the stages between a touch and the display update.

A trial is decomposed into five stages:
  touch detection: the touch controller only notices contact at its next
    poll, on average half a polling period after the physical touch.
  vsync wait: the input event waits for the next display refresh boundary.
  os processing and rendering: the app consumes the event and draws a frame;
    the cost scales inversely with the performance multiplier of the device.
  display: the rendered frame waits for the next refresh to be scanned out.
"""

import dataclasses as dc
from typing import Optional

import numpy as np

from touchlatency.device.power import PowerState
from touchlatency.device.profile import DeviceProfile
from touchlatency.device.profile import round_half_up
from touchlatency.estimator.rating import Rating
from touchlatency.estimator.rating import classify_latency

# Fraction of the polling period added as uniform jitter to touch detection.
TOUCH_JITTER_FRACTION = 0.2

TOUCH_POWER_FACTORS = {
    PowerState.POWER_SAVE: 1.2,
    PowerState.GAME_MODE: 0.9,
}

# Fraction of a frame spent processing and rendering at nominal performance.
PROCESSING_FRAME_FRACTION = 0.5
OS_PROCESSING_SHARE = 0.3
RENDERING_SHARE = 0.7

# Refresh rate from which the frame boundary correction removes a third of a
# frame instead of half of one.
HIGH_REFRESH_CORRECTION_HZ = 90.0


@dc.dataclass(frozen=True)
class LatencySample:
  trial_id: int
  touch_detection_ms: int
  vsync_wait_ms: int
  os_processing_ms: int
  rendering_ms: int
  display_ms: int
  frame_time_ms: int
  correction_ms: int = 0

  @property
  def raw_total_ms(self) -> int:
    return (self.touch_detection_ms + self.vsync_wait_ms +
            self.os_processing_ms + self.rendering_ms + self.display_ms)

  @property
  def total_ms(self) -> int:
    return self.raw_total_ms - self.correction_ms

  @property
  def rating(self) -> Rating:
    return classify_latency(self.total_ms)

  def as_dict(self):
    d = dc.asdict(self)
    d['raw_total_ms'] = self.raw_total_ms
    d['total_ms'] = self.total_ms
    d['rating'] = self.rating.label
    return d


class StageModel:
  """Draws the delay of each pipeline stage for a given device."""

  def __init__(self,
               profile: DeviceProfile,
               rng: Optional[np.random.Generator] = None):
    self.profile = profile
    self.rng = rng if rng is not None else np.random.default_rng()

  @property
  def frame_time_ms(self) -> int:
    return self.profile.frame_time_ms

  def touch_detection_ms(self) -> int:
    poll_ms = self.profile.touch_poll_time_ms
    base = poll_ms / 2
    jitter = poll_ms * TOUCH_JITTER_FRACTION
    delay = base + self.rng.uniform(-jitter / 2, jitter / 2)
    delay *= TOUCH_POWER_FACTORS.get(self.profile.power_state, 1.0)
    return max(0, round_half_up(delay))

  def vsync_wait_ms(self) -> int:
    # Uniform over [1, frame time); a frame of 1ms or less leaves only 1.
    if self.frame_time_ms <= 1:
      return 1
    return int(self.rng.integers(1, self.frame_time_ms))

  def processing_delay_ms(self) -> float:
    cost_factor = 1.0 / self.profile.performance_multiplier
    return self.frame_time_ms * PROCESSING_FRAME_FRACTION * cost_factor

  def split_processing(self, processing_delay_ms: float):
    """Returns the (os processing, rendering) share of a processing delay."""
    return (round_half_up(processing_delay_ms * OS_PROCESSING_SHARE),
            round_half_up(processing_delay_ms * RENDERING_SHARE))

  def display_delay_ms(self, time_since_vsync_ms: float) -> int:
    # Timestamps are whole milliseconds, so the wait is within [1, frame].
    frame = self.frame_time_ms
    return frame - (int(time_since_vsync_ms) % frame)

  def correction_ms(self, raw_total_ms: int, display_ms: int) -> int:
    return frame_boundary_correction_ms(
        raw_total_ms, display_ms, self.frame_time_ms,
        self.profile.effective_refresh_rate_hz)


def frame_boundary_correction_ms(raw_total_ms: int, display_ms: int,
                                 frame_time_ms: int,
                                 refresh_rate_hz: float) -> int:
  """Returns how much to subtract from the sum of the stages.

  Both the vsync wait and the display stage end on a frame boundary, so a
  long display stage on top of a total exceeding one frame double counts
  part of a frame.
  """
  if raw_total_ms > frame_time_ms and display_ms > frame_time_ms / 2:
    if refresh_rate_hz >= HIGH_REFRESH_CORRECTION_HZ:
      return frame_time_ms // 3
    return frame_time_ms // 2
  return 0
