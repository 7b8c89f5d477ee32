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
"""Estimates the sampling rate of a touchscreen controller.

There is no public API reporting the rate at which the touch controller
samples contact state, so it is inferred from the device model, the API level
and the display capabilities. The inference is a table of rules evaluated in
order; the first matching rule picks a tier based on the maximum refresh rate
of the display.
"""

import dataclasses as dc
from typing import Callable, Sequence, Tuple

# Android API levels used by the classification rules.
API_P = 28
API_Q = 29
API_R = 30
API_S = 31

GAMING_MODEL_PATTERNS = (
    'rog',
    'legion',
    'redmagic',
    'blackshark',
    'poco f',
    'poco x',
    'gaming',
)

FLAGSHIP_MODEL_PATTERNS = (
    'pro',
    'ultra',
    'plus',
    'galaxy s',
    'note',
    'pixel',
    'mi ',
    'oneplus',
    'iphone',
)

# Displays above this refresh rate usually ship with faster touch sampling.
HIGH_REFRESH_THRESHOLD_HZ = 70.0

DEFAULT_TOUCH_RATE_HZ = 60.0


@dc.dataclass(frozen=True)
class TouchRateInfo:
  frequency_hz: float
  # Identifier of the rule tier which produced |frequency_hz|.
  source: str

  @property
  def poll_time_ms(self) -> float:
    return 1000.0 / self.frequency_hz


@dc.dataclass(frozen=True)
class DeviceTraits:
  """The facts the classification rules look at."""
  model: str
  os_version: int
  max_refresh_rate_hz: float

  @property
  def is_gaming(self) -> bool:
    return matches_any(self.model, GAMING_MODEL_PATTERNS)

  @property
  def is_flagship(self) -> bool:
    return matches_any(self.model, FLAGSHIP_MODEL_PATTERNS)

  @property
  def has_high_refresh_screen(self) -> bool:
    return self.max_refresh_rate_hz > HIGH_REFRESH_THRESHOLD_HZ


# (minimum max refresh rate, touch rate, source) ordered from the highest
# tier down; the last entry must have a minimum of 0 so it always matches.
Tier = Tuple[float, float, str]


@dc.dataclass(frozen=True)
class TouchRateRule:
  name: str
  min_os_version: int
  applies: Callable[[DeviceTraits], bool]
  tiers: Tuple[Tier, ...]

  def matches(self, traits: DeviceTraits) -> bool:
    return traits.os_version >= self.min_os_version and self.applies(traits)

  def pick(self, traits: DeviceTraits) -> TouchRateInfo:
    for min_refresh, rate, source in self.tiers:
      if traits.max_refresh_rate_hz >= min_refresh:
        return TouchRateInfo(rate, source)
    _, rate, source = self.tiers[-1]
    return TouchRateInfo(rate, source)


TOUCH_RATE_RULES = (
    TouchRateRule(
        name='gaming',
        min_os_version=API_S,
        applies=lambda t: t.is_gaming,
        tiers=(
            (144.0, 360.0, 'gaming_device_144'),
            (0.0, 240.0, 'gaming_device'),
        )),
    TouchRateRule(
        name='flagship',
        min_os_version=API_R,
        applies=lambda t: t.is_gaming or
        (t.is_flagship and t.has_high_refresh_screen),
        tiers=(
            (120.0, 240.0, 'flagship_device_120'),
            (90.0, 180.0, 'flagship_device_90'),
            (0.0, 120.0, 'flagship_device'),
        )),
    TouchRateRule(
        name='modern',
        min_os_version=API_Q,
        applies=lambda t: t.is_flagship or t.has_high_refresh_screen,
        tiers=(
            (90.0, 120.0, 'modern_device_90'),
            (0.0, 90.0, 'modern_device'),
        )),
    TouchRateRule(
        name='android9_high_refresh',
        min_os_version=API_P,
        applies=lambda t: t.has_high_refresh_screen,
        tiers=((0.0, 90.0, 'android9_90'),)),
    TouchRateRule(
        name='android9',
        min_os_version=API_P,
        applies=lambda t: True,
        tiers=((0.0, 90.0, 'android9'),)),
)

FALLBACK_TOUCH_RATE = TouchRateInfo(DEFAULT_TOUCH_RATE_HZ, 'standard_touch')

# Human readable explanation for each |TouchRateInfo.source|.
SOURCE_DESCRIPTIONS = {
    'gaming_device_144': 'Gaming device with a 144Hz+ display',
    'gaming_device': 'Gaming device',
    'flagship_device_120': 'Flagship device with a 120Hz+ display',
    'flagship_device_90': 'Flagship device with a 90Hz+ display',
    'flagship_device': 'Flagship device',
    'modern_device_90': 'Modern device with a 90Hz+ display',
    'modern_device': 'Modern device',
    'android9_90': 'Android 9+ device with a high refresh rate display',
    'android9': 'Android 9+ device',
    'standard_touch': 'Standard touch sampling',
}


def matches_any(model: str, patterns: Sequence[str]) -> bool:
  lowered = model.lower()
  return any(p in lowered for p in patterns)


def estimate_touch_rate(
    model: str,
    os_version: int,
    max_refresh_rate_hz: float,
    rules: Sequence[TouchRateRule] = TOUCH_RATE_RULES) -> TouchRateInfo:
  """Returns the estimated touch polling rate for a device.

  Args:
    model: manufacturer and model string, e.g. "Google Pixel 7 Pro".
    os_version: Android API level of the device.
    max_refresh_rate_hz: highest refresh rate supported by the display.
    rules: classification table; rules are evaluated in order and the first
      one matching wins.

  Returns:
    The estimated rate along with the tier which produced it.
  """
  traits = DeviceTraits(model or '', os_version, max_refresh_rate_hz)
  for rule in rules:
    if rule.matches(traits):
      return rule.pick(traits)
  return FALLBACK_TOUCH_RATE
