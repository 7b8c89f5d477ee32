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
"""Classifies the power and performance mode a device is running in."""

import dataclasses as dc
import enum

# Battery thresholds (percent) below which a discharging device is assumed to
# throttle.
LOW_BATTERY_PCT = 15
MEDIUM_BATTERY_PCT = 50

UNKNOWN_BATTERY_LEVEL = -1


class PowerState(enum.Enum):
  NORMAL = 'normal'
  POWER_SAVE = 'power_save'
  GAME_MODE = 'game_mode'


class PerformanceLevel(enum.Enum):
  # Power saving or nearly flat battery.
  LOW = (0.85, 'Power saving mode')
  # Discharging with some restrictions.
  MEDIUM = (0.95, 'Standard mode')
  NORMAL = (1.0, 'Optimal mode')
  # Vendor game mode.
  HIGH = (1.05, 'High performance mode')

  def __init__(self, multiplier: float, description: str):
    self.multiplier = multiplier
    self.description = description


@dc.dataclass(frozen=True)
class VendorGameModeFlags:
  samsung: bool = False
  miui: bool = False
  oneplus: bool = False

  def any(self) -> bool:
    return self.samsung or self.miui or self.oneplus


@dc.dataclass(frozen=True)
class PowerClassification:
  power_state: PowerState
  performance_level: PerformanceLevel

  @property
  def performance_multiplier(self) -> float:
    return self.performance_level.multiplier


def classify_power_state(game_mode: VendorGameModeFlags, power_save: bool,
                         low_power_setting: int) -> PowerState:
  if game_mode.any():
    return PowerState.GAME_MODE
  if power_save or low_power_setting != 0:
    return PowerState.POWER_SAVE
  return PowerState.NORMAL


def classify_performance_level(power_state: PowerState, battery_level_pct: int,
                               is_charging: bool) -> PerformanceLevel:
  if power_state == PowerState.GAME_MODE:
    return PerformanceLevel.HIGH
  if power_state == PowerState.POWER_SAVE:
    return PerformanceLevel.LOW

  # An unknown battery level says nothing about throttling.
  if battery_level_pct < 0 or is_charging:
    return PerformanceLevel.NORMAL
  if battery_level_pct < LOW_BATTERY_PCT:
    return PerformanceLevel.LOW
  if battery_level_pct < MEDIUM_BATTERY_PCT:
    return PerformanceLevel.MEDIUM
  return PerformanceLevel.NORMAL


def classify_power(game_mode: VendorGameModeFlags, power_save: bool,
                   low_power_setting: int, battery_level_pct: int,
                   is_charging: bool) -> PowerClassification:
  """Combines the power related platform facts into a classification.

  Game mode takes priority over power saving when both are detected.
  """
  state = classify_power_state(game_mode, power_save, low_power_setting)
  level = classify_performance_level(state, battery_level_pct, is_charging)
  return PowerClassification(state, level)
