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

from .api import LatencyEstimator
from .api import LatencyEstimatorConfig
from .clock import FakeClock
from .clock import RealtimeClock
from .clock import TrialClock
from .history import TrialHistory
from .history import TrialStats
from .pipeline import TrialState
from .rating import Rating
from .rating import classify_latency
from .stages import LatencySample
