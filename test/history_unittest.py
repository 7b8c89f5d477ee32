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

import threading
import unittest

from touchlatency.estimator.history import HAS_PANDAS
from touchlatency.estimator.history import TrialHistory
from touchlatency.estimator.history import TrialStats
from touchlatency.estimator.history import samples_to_dataframe
from touchlatency.estimator.stages import LatencySample


class TestTrialHistory(unittest.TestCase):

  def test_empty(self):
    history = TrialHistory()
    self.assertEqual(history.stats, TrialStats(0, 0, 0, 0.0))
    self.assertEqual(len(history), 0)
    self.assertEqual(history.percentiles([50, 90]), [0.0, 0.0])

  def test_append(self):
    history = TrialHistory()
    self.assertEqual(history.append(30), TrialStats(1, 30, 30, 30.0))
    self.assertEqual(history.append(21), TrialStats(2, 21, 30, 25.5))
    stats = history.append(40)
    self.assertEqual(stats.count, 3)
    self.assertEqual(stats.min_ms, 21)
    self.assertEqual(stats.max_ms, 40)
    self.assertAlmostEqual(stats.average_ms, 91 / 3)
    self.assertEqual(history.totals, [30, 21, 40])
    self.assertEqual(history.stats, stats)

  def test_average_is_not_rounded(self):
    history = TrialHistory()
    for total in [10, 11]:
      history.append(total)
    self.assertEqual(history.stats.average_ms, 10.5)

  def test_average_has_no_drift(self):
    history = TrialHistory()
    totals = [17, 23, 19, 31, 22, 18, 27] * 50
    for total in totals:
      history.append(total)
    self.assertEqual(history.stats.average_ms, sum(totals) / len(totals))

  def test_reset(self):
    history = TrialHistory()
    history.append(25)
    history.append(35)
    history.reset()
    self.assertEqual(history.stats, TrialStats(0, 0, 0, 0.0))
    self.assertEqual(history.totals, [])
    self.assertEqual(history.append(12), TrialStats(1, 12, 12, 12.0))

  def test_percentiles(self):
    history = TrialHistory()
    for total in [10, 20, 30]:
      history.append(total)
    self.assertEqual(history.percentiles([0, 50, 100]), [10.0, 20.0, 30.0])

  def test_concurrent_appends(self):
    history = TrialHistory()

    def append_many():
      for i in range(200):
        history.append(i)

    threads = [threading.Thread(target=append_many) for _ in range(4)]
    for t in threads:
      t.start()
    for t in threads:
      t.join()
    self.assertEqual(history.stats.count, 800)
    self.assertEqual(history.stats.average_ms, 99.5)

  @unittest.skipUnless(HAS_PANDAS, 'pandas not installed')
  def test_as_pandas_dataframe(self):
    history = TrialHistory()
    history.append(25)
    history.append(35)
    df = history.as_pandas_dataframe()
    self.assertEqual(list(df.columns), ['trial', 'total_ms'])
    self.assertEqual(df['trial'].tolist(), [1, 2])
    self.assertEqual(df['total_ms'].tolist(), [25, 35])

  @unittest.skipUnless(HAS_PANDAS, 'pandas not installed')
  def test_samples_to_dataframe(self):
    sample = LatencySample(
        trial_id=3,
        touch_detection_ms=4,
        vsync_wait_ms=9,
        os_processing_ms=3,
        rendering_ms=6,
        display_ms=8,
        frame_time_ms=17)
    df = samples_to_dataframe([sample])
    self.assertEqual(df['total_ms'].tolist(), [30])
    self.assertEqual(df['rating'].tolist(), ['very good'])
    self.assertEqual(df['trial_id'].tolist(), [3])
