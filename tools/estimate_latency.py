#!/usr/bin/env python3
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
""" Runs simulated touch latency trials for a device and reports the
breakdown of every trial along with aggregate statistics.

The device is described either by a JSON file, by command line flags or by
querying a device attached through adb.
"""

import argparse
import logging
import os
import sys

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(ROOT_DIR)

from touchlatency.common.exceptions import TouchLatencyException
from touchlatency.device.adb import AdbPlatformDelegate
from touchlatency.device.platform import StaticPlatformDelegate
from touchlatency.device.profile import derive_device_profile
from touchlatency.estimator import FakeClock
from touchlatency.estimator import LatencyEstimator
from touchlatency.estimator import LatencyEstimatorConfig
from touchlatency.estimator import RealtimeClock
from touchlatency.estimator.history import samples_to_dataframe

PERCENTILES = [50, 90, 99]


class SampleCollector(LatencyEstimator.Observer):

  def __init__(self):
    self.samples = []

  def trial_completed(self, sample, stats):
    self.samples.append(sample)
    logging.info(
        'Trial %d: %d ms (%s) touch=%d vsync=%d os=%d render=%d display=%d '
        'correction=%d', sample.trial_id, sample.total_ms, sample.rating,
        sample.touch_detection_ms, sample.vsync_wait_ms,
        sample.os_processing_ms, sample.rendering_ms, sample.display_ms,
        sample.correction_ms)


def create_delegate(args):
  if args.adb:
    return AdbPlatformDelegate(serial=args.serial, adb_path=args.adb_path)

  if args.device_file:
    delegate = StaticPlatformDelegate.from_json_file(args.device_file)
  else:
    delegate = StaticPlatformDelegate()

  # Flags override whatever the device file specified.
  if args.model is not None:
    delegate.model = args.model
  if args.os_version is not None:
    delegate.os_version = args.os_version
  if args.refresh_rate is not None:
    delegate.refresh_rate_hz = args.refresh_rate
  if args.min_refresh_rate is not None:
    delegate.min_refresh_rate_hz = args.min_refresh_rate
  if args.max_refresh_rate is not None:
    delegate.max_refresh_rate_hz = args.max_refresh_rate
  if args.power_save:
    delegate.power_save = True
  if args.battery is not None:
    delegate.battery_level_pct = args.battery
  if args.charging:
    delegate.is_charging = True
  return delegate


def run_trials(estimator, clock, trials):
  for _ in range(trials):
    if not estimator.run_trial():
      raise TouchLatencyException('Trial rejected while the clock was idle')
    clock.run_until_idle()


def main(argv=None):
  parser = argparse.ArgumentParser()
  parser.add_argument('--device-file', default=None)
  parser.add_argument('--model', default=None)
  parser.add_argument('--os-version', type=int, default=None)
  parser.add_argument('--refresh-rate', type=float, default=None)
  parser.add_argument('--min-refresh-rate', type=float, default=None)
  parser.add_argument('--max-refresh-rate', type=float, default=None)
  parser.add_argument('--power-save', action='store_true', default=False)
  parser.add_argument('--battery', type=int, default=None)
  parser.add_argument('--charging', action='store_true', default=False)
  parser.add_argument('--adb', action='store_true', default=False)
  parser.add_argument('--adb-path', default=None)
  parser.add_argument('--serial', default=None)
  parser.add_argument('--trials', type=int, default=10)
  parser.add_argument('--seed', type=int, default=None)
  parser.add_argument('--realtime', action='store_true', default=False)
  parser.add_argument('--out-csv', default=None)
  parser.add_argument('--verbose', action='store_true', default=False)
  args = parser.parse_args(argv)

  logging.basicConfig(
      level=logging.DEBUG if args.verbose else logging.INFO,
      format='%(levelname)s: %(message)s')

  if args.adb and args.device_file:
    print('Cannot specify both --adb and --device-file', file=sys.stderr)
    return 1

  if args.trials <= 0:
    print('--trials must be positive', file=sys.stderr)
    return 1

  try:
    profile = derive_device_profile(create_delegate(args))
  except TouchLatencyException as ex:
    logging.error('%s', ex)
    return 1

  for key, value in profile.summary().items():
    print(f'{key}: {value}')

  clock = RealtimeClock() if args.realtime else FakeClock()
  collector = SampleCollector()
  estimator = LatencyEstimator(
      profile,
      clock,
      config=LatencyEstimatorConfig(seed=args.seed),
      observer=collector)

  logging.info('Running %d trials...', args.trials)
  run_trials(estimator, clock, args.trials)

  stats = estimator.stats()
  print(f'trials: {stats.count}')
  print(f'min_ms: {stats.min_ms}')
  print(f'max_ms: {stats.max_ms}')
  print(f'average_ms: {stats.average_ms:.1f}')
  print(f'rating: {estimator.rating_of(stats.average_ms)}')
  values = estimator.history.percentiles(PERCENTILES)
  for p, value in zip(PERCENTILES, values):
    print(f'p{p}_ms: {value:.1f}')

  if args.out_csv:
    try:
      csv = samples_to_dataframe(collector.samples).to_csv(index=False)
    except TouchLatencyException as ex:
      logging.error('%s', ex)
      return 1
    if args.out_csv == '-':
      sys.stdout.write(csv)
    else:
      with open(args.out_csv, 'w') as out:
        out.write(csv)

  return 0


if __name__ == '__main__':
  sys.exit(main())
