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
"""Derives the capabilities of a device relevant to touch latency."""

import dataclasses as dc
import logging
import math
from typing import Any, Dict, Optional, Sequence

from touchlatency.device import touch_rate
from touchlatency.device.platform import PlatformDelegate
from touchlatency.device.platform import query_or_default
from touchlatency.device.power import PerformanceLevel
from touchlatency.device.power import PowerState
from touchlatency.device.power import UNKNOWN_BATTERY_LEVEL
from touchlatency.device.power import VendorGameModeFlags
from touchlatency.device.power import classify_power

LOG = logging.getLogger(__name__)

DEFAULT_REFRESH_RATE_HZ = 60.0

# Frame time used when the refresh rate is unusable.
DEFAULT_FRAME_TIME_MS = 16

# Most devices drop to 60Hz while power saving.
POWER_SAVE_REFRESH_RATE_HZ = 60.0


def round_half_up(x: float) -> int:
  return int(math.floor(x + 0.5))


def is_usable_rate(rate_hz: Optional[float]) -> bool:
  return rate_hz is not None and math.isfinite(rate_hz) and rate_hz > 0


def frame_time_ms_for(refresh_rate_hz: float) -> int:
  """Nominal duration of one display interval in whole milliseconds.

  Never less than 1ms: stage delays are taken modulo the frame time.
  """
  if not is_usable_rate(refresh_rate_hz):
    return DEFAULT_FRAME_TIME_MS
  return max(1, round_half_up(1000.0 / refresh_rate_hz))


@dc.dataclass(frozen=True)
class DeviceProfile:
  refresh_rate_hz: float
  max_refresh_rate_hz: float
  min_refresh_rate_hz: float
  touch_polling_hz: float
  power_state: PowerState = PowerState.NORMAL
  performance_level: PerformanceLevel = PerformanceLevel.NORMAL
  battery_level_pct: int = UNKNOWN_BATTERY_LEVEL
  is_charging: bool = False
  device_model: str = ''
  os_version: int = 0
  touch_rate_source: str = touch_rate.FALLBACK_TOUCH_RATE.source

  def __post_init__(self):
    if not is_usable_rate(self.refresh_rate_hz):
      raise ValueError('refresh_rate_hz must be finite and positive')
    if not is_usable_rate(self.touch_polling_hz):
      raise ValueError('touch_polling_hz must be positive')
    if not (self.min_refresh_rate_hz <= self.refresh_rate_hz <=
            self.max_refresh_rate_hz):
      raise ValueError('refresh rate must lie within [min, max]')

  @property
  def performance_multiplier(self) -> float:
    return self.performance_level.multiplier

  @property
  def effective_refresh_rate_hz(self) -> float:
    if (self.power_state == PowerState.POWER_SAVE and
        self.refresh_rate_hz > POWER_SAVE_REFRESH_RATE_HZ):
      return POWER_SAVE_REFRESH_RATE_HZ
    return self.refresh_rate_hz

  @property
  def frame_time_ms(self) -> int:
    return frame_time_ms_for(self.effective_refresh_rate_hz)

  @property
  def touch_poll_time_ms(self) -> float:
    return 1000.0 / self.touch_polling_hz

  def summary(self) -> Dict[str, Any]:
    return {
        'device_model': self.device_model,
        'os_version': self.os_version,
        'refresh_rate_hz': self.refresh_rate_hz,
        'min_refresh_rate_hz': self.min_refresh_rate_hz,
        'max_refresh_rate_hz': self.max_refresh_rate_hz,
        'effective_refresh_rate_hz': self.effective_refresh_rate_hz,
        'frame_time_ms': self.frame_time_ms,
        'touch_polling_hz': self.touch_polling_hz,
        'touch_rate_source': touch_rate.SOURCE_DESCRIPTIONS.get(
            self.touch_rate_source, self.touch_rate_source),
        'power_state': self.power_state.value,
        'performance_mode': self.performance_level.description,
        'performance_multiplier': self.performance_multiplier,
        'battery_level_pct': self.battery_level_pct,
        'is_charging': self.is_charging,
    }


def sanitize_refresh_rates(current: float, min_rate: float,
                           max_rate: float) -> Sequence[float]:
  """Replaces unusable refresh rates so that 0 < min <= current <= max."""
  if not is_usable_rate(current):
    current = DEFAULT_REFRESH_RATE_HZ
  if not is_usable_rate(max_rate) or max_rate < current:
    max_rate = current
  if not is_usable_rate(min_rate) or min_rate > current:
    min_rate = current
  return current, min_rate, max_rate


def derive_device_profile(
    delegate: PlatformDelegate,
    rules: Optional[Sequence[touch_rate.TouchRateRule]] = None
) -> DeviceProfile:
  """Builds a DeviceProfile from the facts reported by |delegate|.

  This never fails because of the platform: every query which raises (or
  returns nothing) is replaced by a safe default, so a device which answers
  nothing at all still gets a plausible 60Hz profile.

  Args:
    delegate: source of the platform facts.
    rules: optional touch rate classification table overriding
      touch_rate.TOUCH_RATE_RULES.
  """
  rates = query_or_default(
      'display_refresh_rates', delegate.get_display_refresh_rates,
      (DEFAULT_REFRESH_RATE_HZ, DEFAULT_REFRESH_RATE_HZ,
       DEFAULT_REFRESH_RATE_HZ))
  current, min_rate, max_rate = sanitize_refresh_rates(*rates)

  model = query_or_default('device_model', delegate.get_device_model, '')
  os_version = query_or_default('os_version', delegate.get_os_version, 0)
  power_save = query_or_default('power_save', delegate.get_power_save_flag,
                                False)
  low_power = query_or_default('low_power_setting',
                               delegate.get_low_power_setting, 0)
  game_mode = query_or_default('vendor_game_mode',
                               delegate.get_vendor_game_mode_flags,
                               VendorGameModeFlags())
  battery_level, charging = query_or_default(
      'battery_status', delegate.get_battery_status,
      (UNKNOWN_BATTERY_LEVEL, False))

  battery_level = max(UNKNOWN_BATTERY_LEVEL, min(100, int(battery_level)))

  rate = touch_rate.estimate_touch_rate(
      model, os_version, max_rate,
      touch_rate.TOUCH_RATE_RULES if rules is None else rules)
  power = classify_power(game_mode, power_save, low_power, battery_level,
                         charging)

  profile = DeviceProfile(
      refresh_rate_hz=current,
      max_refresh_rate_hz=max_rate,
      min_refresh_rate_hz=min_rate,
      touch_polling_hz=rate.frequency_hz,
      touch_rate_source=rate.source,
      power_state=power.power_state,
      performance_level=power.performance_level,
      battery_level_pct=battery_level,
      is_charging=bool(charging),
      device_model=model,
      os_version=os_version,
  )
  LOG.debug('Derived device profile: %s', profile)
  return profile
