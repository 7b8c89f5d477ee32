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
"""Platform delegate which queries an attached device through adb."""

import re
import shutil
import subprocess
from typing import List, Optional

from touchlatency.common.exceptions import TouchLatencyException
from touchlatency.device.platform import BatteryStatus
from touchlatency.device.platform import PlatformDelegate
from touchlatency.device.platform import RefreshRates

ADB_TIMEOUT_SECONDS = 10

# Values of BatteryManager.BATTERY_STATUS_*.
BATTERY_STATUS_CHARGING = 2
BATTERY_STATUS_FULL = 5

_FPS_RE = re.compile(r'fps=(\d+(?:\.\d+)?)')
_ACTIVE_REFRESH_RE = re.compile(r'mRefreshRate=(\d+(?:\.\d+)?)')
_POWER_SAVE_RE = re.compile(
    r'(?:mBatterySaverEnabled|mLowPowerModeEnabled|mIsPowerSaveMode)=true')
_BATTERY_FIELD_RE = re.compile(r'^\s*(level|scale|status):\s*(\d+)\s*$',
                               re.MULTILINE)


def find_adb(adb_path: Optional[str] = None) -> str:
  """Locates the adb binary, preferring an explicitly passed path."""
  if adb_path:
    return adb_path
  path = shutil.which('adb')
  if path is None:
    raise TouchLatencyException(
        'Could not find a suitable adb binary in the PATH. You can download '
        'adb from https://developer.android.com/studio/releases/platform-tools'
    )
  return path


class AdbPlatformDelegate(PlatformDelegate):
  """Answers platform queries by running `adb shell` commands.

  Every query is a separate adb invocation; failures surface as exceptions
  which the profile derivation turns into safe defaults.
  """

  def __init__(self, serial: Optional[str] = None,
               adb_path: Optional[str] = None):
    self.serial = serial
    self.adb_path = find_adb(adb_path)

  def shell(self, *args: str) -> str:
    cmd: List[str] = [self.adb_path]
    if self.serial:
      cmd += ['-s', self.serial]
    cmd += ['shell', *args]
    proc = subprocess.run(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        timeout=ADB_TIMEOUT_SECONDS,
        check=True)
    return proc.stdout.decode('utf-8', 'ignore').strip()

  def getprop(self, name: str) -> str:
    return self.shell('getprop', name)

  def get_display_refresh_rates(self) -> RefreshRates:
    return parse_refresh_rates(self.shell('dumpsys', 'display'))

  def get_device_model(self) -> str:
    manufacturer = self.getprop('ro.product.manufacturer')
    model = self.getprop('ro.product.model')
    return f'{manufacturer} {model}'.strip()

  def get_os_version(self) -> int:
    return int(self.getprop('ro.build.version.sdk'))

  def get_power_save_flag(self) -> bool:
    return _POWER_SAVE_RE.search(self.shell('dumpsys', 'power')) is not None

  def get_battery_status(self) -> BatteryStatus:
    return parse_battery_status(self.shell('dumpsys', 'battery'))

  def get_setting(self, namespace: str, key: str) -> Optional[str]:
    value = self.shell('settings', 'get', namespace, key)
    return None if value in ('', 'null') else value


def parse_refresh_rates(dumpsys_display: str) -> RefreshRates:
  """Extracts (current, min, max) refresh rates from `dumpsys display`."""
  supported = [float(x) for x in _FPS_RE.findall(dumpsys_display)]
  active = _ACTIVE_REFRESH_RE.search(dumpsys_display)
  if not supported and not active:
    raise ValueError('No refresh rate found in dumpsys display output')
  current = float(active.group(1)) if active else max(supported)
  supported.append(current)
  return current, min(supported), max(supported)


def parse_battery_status(dumpsys_battery: str) -> BatteryStatus:
  """Extracts (level percent, charging) from `dumpsys battery`."""
  fields = {k: int(v) for k, v in _BATTERY_FIELD_RE.findall(dumpsys_battery)}
  if 'level' not in fields:
    raise ValueError('No battery level found in dumpsys battery output')
  scale = fields.get('scale') or 100
  status = fields.get('status')
  charging = status in (BATTERY_STATUS_CHARGING, BATTERY_STATUS_FULL)
  return fields['level'] * 100 // scale, charging
