# /*
# Copyright 2026 The Provisioner E2E Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Canary metric names embedded in test descriptions."""

from __future__ import annotations

import re
from typing import NamedTuple

from provisioner_e2e.constants import CANARY_METRIC_PATTERN

_METRIC_RE = re.compile(CANARY_METRIC_PATTERN)


class CanaryMetric(NamedTuple):
    """Metric name and result (1 failed, 0 passed) for one test."""

    name: str
    result: int


def canary_metric(description: str, failed: bool) -> CanaryMetric | None:
    """Extract the ``[metric_name]`` from a test description.

    The result is 1 for a failed test and 0 otherwise. Returns None when the
    description carries no bracketed name.
    """
    match = _METRIC_RE.search(description)
    if match is None:
        return None
    return CanaryMetric(match.group(1), 1 if failed else 0)
