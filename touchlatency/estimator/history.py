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

import dataclasses as dc
import threading
from typing import Iterable, List

import numpy as np

from touchlatency.common.exceptions import TouchLatencyException

try:
  import pandas as pd
  HAS_PANDAS = True
except ModuleNotFoundError:
  HAS_PANDAS = False
except ImportError:
  HAS_PANDAS = False


@dc.dataclass(frozen=True)
class TrialStats:
  count: int = 0
  min_ms: int = 0
  max_ms: int = 0
  # Arithmetic mean over every recorded trial, not rounded.
  average_ms: float = 0.0


class TrialHistory:
  """Totals of every trial since the last reset, in trial order.

  Statistics are recomputed from the full history on every append. Access is
  serialized so that a history can be shared with a thread other than the one
  running trials.
  """

  def __init__(self):
    self._lock = threading.Lock()
    self._totals: List[int] = []
    self._stats = TrialStats()

  def append(self, total_ms: int) -> TrialStats:
    with self._lock:
      self._totals.append(total_ms)
      self._stats = _compute_stats(self._totals)
      return self._stats

  def reset(self):
    with self._lock:
      self._totals = []
      self._stats = TrialStats()

  @property
  def stats(self) -> TrialStats:
    with self._lock:
      return self._stats

  @property
  def totals(self) -> List[int]:
    with self._lock:
      return list(self._totals)

  def __len__(self):
    with self._lock:
      return len(self._totals)

  def percentiles(self, percentiles: Iterable[float]) -> List[float]:
    totals = self.totals
    if not totals:
      return [0.0 for _ in percentiles]
    return [float(x) for x in np.percentile(totals, list(percentiles))]

  def as_pandas_dataframe(self):
    if not HAS_PANDAS:
      raise TouchLatencyException(
          'pandas dependency missing. Please run `pip3 install pandas`')
    totals = self.totals
    return pd.DataFrame({
        'trial': list(range(1, len(totals) + 1)),
        'total_ms': totals,
    })


def _compute_stats(totals: List[int]) -> TrialStats:
  if not totals:
    return TrialStats()
  return TrialStats(
      count=len(totals),
      min_ms=min(totals),
      max_ms=max(totals),
      average_ms=float(np.mean(totals)))


def samples_to_dataframe(samples):
  """Converts an iterable of LatencySample into a pandas dataframe with one
  row per trial and one column per stage."""
  if not HAS_PANDAS:
    raise TouchLatencyException(
        'pandas dependency missing. Please run `pip3 install pandas`')
  return pd.DataFrame([s.as_dict() for s in samples])
