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
"""Clocks which sequence the stages of a latency trial.

Every stage of a trial is a continuation scheduled on a TrialClock. Clocks
execute continuations one at a time on a single thread, so no two stages of a
trial ever run concurrently.
"""

import abc
import heapq
import itertools
import sched
import time
from typing import Callable, List, Tuple

Callback = Callable[[], None]


class TrialClock(abc.ABC):

  @abc.abstractmethod
  def now_ms(self) -> float:
    """Returns the current time in milliseconds."""
    raise NotImplementedError

  @abc.abstractmethod
  def call_later(self, delay_ms: float, callback: Callback):
    """Schedules |callback| to run once |delay_ms| milliseconds from now."""
    raise NotImplementedError

  @abc.abstractmethod
  def run_until_idle(self) -> int:
    """Runs scheduled callbacks until none are left.

    Returns:
      The number of callbacks which were run.
    """
    raise NotImplementedError


class FakeClock(TrialClock):
  """Virtual clock which only moves when told to.

  Callbacks due at the same time run in the order they were scheduled.
  """

  def __init__(self, start_ms: float = 0.0):
    self._now_ms = float(start_ms)
    self._seq = itertools.count()
    self._queue: List[Tuple[float, int, Callback]] = []

  def now_ms(self) -> float:
    return self._now_ms

  def call_later(self, delay_ms: float, callback: Callback):
    due = self._now_ms + max(0.0, float(delay_ms))
    heapq.heappush(self._queue, (due, next(self._seq), callback))

  @property
  def pending(self) -> int:
    return len(self._queue)

  def next_due_ms(self):
    return self._queue[0][0] if self._queue else None

  def advance(self, delta_ms: float) -> int:
    """Moves time forward by |delta_ms|, running every callback due."""
    target = self._now_ms + delta_ms
    ran = 0
    while self._queue and self._queue[0][0] <= target:
      due, _, callback = heapq.heappop(self._queue)
      self._now_ms = due
      callback()
      ran += 1
    self._now_ms = target
    return ran

  def run_until_idle(self) -> int:
    ran = 0
    while self._queue:
      due, _, callback = heapq.heappop(self._queue)
      self._now_ms = max(self._now_ms, due)
      callback()
      ran += 1
    return ran


class RealtimeClock(TrialClock):
  """Clock backed by the monotonic wall clock.

  Callbacks run on the thread calling run_until_idle(), which sleeps until
  each one is due.
  """

  def __init__(self):
    self._scheduler = sched.scheduler(time.monotonic, time.sleep)
    self._ran = 0

  def now_ms(self) -> float:
    return time.monotonic() * 1000.0

  def call_later(self, delay_ms: float, callback: Callback):
    self._scheduler.enter(
        max(0.0, delay_ms) / 1000.0, 0, self._run, argument=(callback,))

  def _run(self, callback: Callback):
    self._ran += 1
    callback()

  @property
  def pending(self) -> int:
    return len(self._scheduler.queue)

  def run_until_idle(self) -> int:
    start = self._ran
    self._scheduler.run()
    return self._ran - start
