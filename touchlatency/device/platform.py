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
"""Abstracts the platform queries which feed the device profile."""

import json
import logging
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

from touchlatency.common.exceptions import TouchLatencyException
from touchlatency.device.power import UNKNOWN_BATTERY_LEVEL
from touchlatency.device.power import VendorGameModeFlags

_T = TypeVar('_T')

LOG = logging.getLogger(__name__)

SETTINGS_GLOBAL = 'global'
SETTINGS_SYSTEM = 'system'

# Vendor specific settings toggled by the respective game launchers.
SAMSUNG_GAME_MODE_KEY = (SETTINGS_GLOBAL, 'game_home_enable')
MIUI_GAME_TURBO_KEY = (SETTINGS_SYSTEM, 'game_effect_enable')
ONEPLUS_GAME_MODE_KEY = (SETTINGS_SYSTEM, 'game_mode_enable')
LOW_POWER_KEY = (SETTINGS_GLOBAL, 'low_power')

RefreshRates = Tuple[float, float, float]
BatteryStatus = Tuple[int, bool]


def query_or_default(name: str, fn: Callable[[], _T], default: _T) -> _T:
  """Runs a platform query, treating any failure as "feature absent"."""
  try:
    result = fn()
  except Exception as ex:  # pylint: disable=broad-except
    LOG.debug('Platform query %s failed, using %r: %s', name, default, ex)
    return default
  if result is None:
    return default
  return result


def _parse_int(value: Optional[str], default: int = 0) -> int:
  if value is None:
    return default
  try:
    return int(value.strip())
  except ValueError:
    return default


class PlatformDelegate:
  """Source of the coarse platform facts a device profile is derived from.

  Subclasses implement the queries they can answer; anything left
  unimplemented raises NotImplementedError, which callers treat in the same
  way as any other failed query: the feature is assumed to be absent.
  """

  def get_display_refresh_rates(self) -> RefreshRates:
    """Returns the (current, min, max) refresh rates of the display in Hz."""
    raise NotImplementedError

  def get_device_model(self) -> str:
    raise NotImplementedError

  def get_os_version(self) -> int:
    """Returns the Android API level."""
    raise NotImplementedError

  def get_power_save_flag(self) -> bool:
    raise NotImplementedError

  def get_battery_status(self) -> BatteryStatus:
    """Returns (level in percent, whether the device is charging)."""
    raise NotImplementedError

  def get_setting(self, namespace: str, key: str) -> Optional[str]:
    """Returns the raw value of a system setting or None if absent."""
    raise NotImplementedError

  def get_low_power_setting(self) -> int:
    return _parse_int(self.get_setting(*LOW_POWER_KEY))

  def get_vendor_game_mode_flags(self) -> VendorGameModeFlags:
    samsung = query_or_default(
        'samsung_game_mode',
        lambda: self.get_setting(*SAMSUNG_GAME_MODE_KEY) == '1', False)
    miui = query_or_default(
        'miui_game_turbo', lambda: self.get_setting(*MIUI_GAME_TURBO_KEY) ==
        '1', False)
    model = query_or_default('device_model', self.get_device_model, '')
    oneplus = 'oneplus' in model.lower() and query_or_default(
        'oneplus_game_mode',
        lambda: _parse_int(self.get_setting(*ONEPLUS_GAME_MODE_KEY)) != 0,
        False)
    return VendorGameModeFlags(samsung=samsung, miui=miui, oneplus=oneplus)


class StaticPlatformDelegate(PlatformDelegate):
  """Platform delegate answering from fixed values.

  Useful for simulating a device which is not attached, e.g. from a JSON
  device description:
    {
      "model": "Google Pixel 7 Pro",
      "os_version": 33,
      "refresh_rate": 120,
      "min_refresh_rate": 60,
      "max_refresh_rate": 120,
      "power_save": false,
      "battery_level": 80,
      "charging": false,
      "settings": {"global": {"low_power": "0"}}
    }
  Fields which are not given behave like a failed platform query.
  """

  def __init__(self,
               model: Optional[str] = None,
               os_version: Optional[int] = None,
               refresh_rate_hz: Optional[float] = None,
               min_refresh_rate_hz: Optional[float] = None,
               max_refresh_rate_hz: Optional[float] = None,
               power_save: Optional[bool] = None,
               battery_level_pct: Optional[int] = None,
               is_charging: bool = False,
               settings: Optional[Dict[str, Dict[str, str]]] = None):
    self.model = model
    self.os_version = os_version
    self.refresh_rate_hz = refresh_rate_hz
    self.min_refresh_rate_hz = min_refresh_rate_hz
    self.max_refresh_rate_hz = max_refresh_rate_hz
    self.power_save = power_save
    self.battery_level_pct = battery_level_pct
    self.is_charging = is_charging
    self.settings = settings or {}

  @classmethod
  def from_dict(cls, d: Dict[str, Any]) -> 'StaticPlatformDelegate':
    try:
      settings = {
          str(ns): {str(k): str(v) for k, v in values.items()
                   } for ns, values in d.get('settings', {}).items()
      }
      return cls(
          model=d.get('model'),
          os_version=_optional(int, d.get('os_version')),
          refresh_rate_hz=_optional(float, d.get('refresh_rate')),
          min_refresh_rate_hz=_optional(float, d.get('min_refresh_rate')),
          max_refresh_rate_hz=_optional(float, d.get('max_refresh_rate')),
          power_save=_optional(bool, d.get('power_save')),
          battery_level_pct=_optional(int, d.get('battery_level')),
          is_charging=bool(d.get('charging', False)),
          settings=settings)
    except (AttributeError, TypeError, ValueError) as ex:
      raise TouchLatencyException(f'Invalid device description: {ex}')

  @classmethod
  def from_json_file(cls, path: str) -> 'StaticPlatformDelegate':
    try:
      with open(path, 'r') as f:
        d = json.load(f)
    except (OSError, ValueError) as ex:
      raise TouchLatencyException(
          f'Unable to read device description {path}: {ex}')
    if not isinstance(d, dict):
      raise TouchLatencyException(
          f'Device description {path} must contain a JSON object')
    return cls.from_dict(d)

  def get_display_refresh_rates(self) -> RefreshRates:
    if self.refresh_rate_hz is None:
      raise NotImplementedError
    current = self.refresh_rate_hz
    min_rate = self.min_refresh_rate_hz
    max_rate = self.max_refresh_rate_hz
    return (current, current if min_rate is None else min_rate,
            current if max_rate is None else max_rate)

  def get_device_model(self) -> str:
    return self.model

  def get_os_version(self) -> int:
    return self.os_version

  def get_power_save_flag(self) -> bool:
    return self.power_save

  def get_battery_status(self) -> BatteryStatus:
    if self.battery_level_pct is None:
      return UNKNOWN_BATTERY_LEVEL, self.is_charging
    return self.battery_level_pct, self.is_charging

  def get_setting(self, namespace: str, key: str) -> Optional[str]:
    return self.settings.get(namespace, {}).get(key)


def _optional(conv: Callable[[Any], _T], value: Any) -> Optional[_T]:
  return None if value is None else conv(value)
