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

"""Bounded polling on top of tenacity."""

from __future__ import annotations

import time
from collections.abc import Callable

from tenacity import Retrying, retry_if_result, stop_before_delay, wait_fixed


def poll_until(
    condition: Callable[[], bool],
    *,
    interval: float,
    timeout: float,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Call *condition* now and then every *interval* seconds until it returns True.

    No attempt is started once the next one would begin at or after
    *timeout* seconds, so a 30s bound polled every 5s makes six attempts.
    An exception raised by *condition* is not retried and propagates as is;
    conditions swallow their own transient errors and return False.

    Args:
        condition: Zero-argument callable reporting whether polling is done.
        interval: Seconds to wait between attempts.
        timeout: Upper bound, in seconds, on the whole poll.
        sleep: Sleep function, replaceable in tests.

    Raises:
        RetryError: If *condition* never returned True within *timeout*.
    """
    retryer = Retrying(
        stop=stop_before_delay(timeout),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda done: not done),
        sleep=sleep,
    )
    retryer(condition)
