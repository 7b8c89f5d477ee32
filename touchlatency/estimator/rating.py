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

import enum

GREEN = '#06D6A0'
YELLOW = '#FFC857'
MEDIUM_BLUE = '#0077B6'
ORANGE = '#FF9F1C'
RED = '#EF476F'


class Rating(enum.Enum):
  # (exclusive upper bound in ms, label, display colour)
  EXCELLENT = (20, 'excellent', GREEN)
  VERY_GOOD = (33, 'very good', YELLOW)
  GOOD = (50, 'good', MEDIUM_BLUE)
  AVERAGE = (70, 'average', ORANGE)
  BELOW_AVERAGE = (100, 'below average', RED)
  HIGH_LATENCY = (None, 'high latency', RED)

  def __init__(self, upper_bound_ms, label: str, color: str):
    self.upper_bound_ms = upper_bound_ms
    self.label = label
    self.color = color

  def __str__(self):
    return self.label


def classify_latency(total_ms: float) -> Rating:
  """Maps a total latency onto a rating; bounds are exclusive."""
  for rating in Rating:
    if rating.upper_bound_ms is None or total_ms < rating.upper_bound_ms:
      return rating
  return Rating.HIGH_LATENCY
