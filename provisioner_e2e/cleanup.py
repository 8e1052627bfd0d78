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

"""Process-wide registry of pending cleanup actions.

Every scope registers its teardown before it allocates anything and removes
it once teardown has run. Whatever is still registered when the session ends
abnormally is run by ``run_all``, so each action runs at most once.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass

from provisioner_e2e import logger

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class CleanupHandle:
    """Opaque reference to one registered action."""

    id: int
    label: str = ""


class CleanupRegistry:
    """Thread-safe, handle-based collection of cleanup callbacks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._actions: dict[CleanupHandle, Callable[[], object]] = {}

    def add(self, action: Callable[[], object], label: str = "") -> CleanupHandle:
        """Register *action* and return the handle that removes it."""
        handle = CleanupHandle(next(_handle_ids), label)
        with self._lock:
            self._actions[handle] = action
        logger.debug("Registered cleanup action %d (%s)", handle.id, label)
        return handle

    def remove(self, handle: CleanupHandle | None) -> bool:
        """Drop the action behind *handle*.

        Returns:
            True if an action was removed, False for None or an unknown handle.
        """
        if handle is None:
            return False
        with self._lock:
            removed = self._actions.pop(handle, None) is not None
        if removed:
            logger.debug("Removed cleanup action %d (%s)", handle.id, handle.label)
        return removed

    def run_all(self) -> list[tuple[CleanupHandle, Exception]]:
        """Run every pending action, newest first, and empty the registry.

        Actions run outside the lock so they may call ``remove`` on their own
        handle. A failing action does not stop the others.

        Returns:
            (handle, exception) pairs for the actions that raised.
        """
        with self._lock:
            pending = list(self._actions.items())
            self._actions.clear()

        failures: list[tuple[CleanupHandle, Exception]] = []
        for handle, action in reversed(pending):
            try:
                action()
            except Exception as err:
                logger.warning("Cleanup action %d (%s) failed: %s", handle.id, handle.label, err)
                failures.append((handle, err))
        return failures

    def __len__(self) -> int:
        with self._lock:
            return len(self._actions)

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._actions


default_registry = CleanupRegistry()
