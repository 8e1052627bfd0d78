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

"""Tests for the cleanup registry."""

from __future__ import annotations

import logging

import pytest

from provisioner_e2e.cleanup import CleanupRegistry


def test_run_all_runs_newest_first_and_empties(registry):
    order = []
    registry.add(lambda: order.append("first"))
    registry.add(lambda: order.append("second"))
    registry.add(lambda: order.append("third"))

    assert registry.run_all() == []
    assert order == ["third", "second", "first"]
    assert len(registry) == 0


def test_removed_action_never_runs(registry):
    ran = []
    handle = registry.add(lambda: ran.append("x"), label="scope fss")

    assert handle in registry
    assert registry.remove(handle) is True
    assert handle not in registry
    registry.run_all()
    assert ran == []


def test_remove_none_and_unknown_handles(registry):
    other = CleanupRegistry()
    foreign = other.add(lambda: None)

    assert registry.remove(None) is False
    assert registry.remove(foreign) is False
    assert foreign in other


def test_remove_twice_is_a_no_op(registry):
    handle = registry.add(lambda: None)
    assert registry.remove(handle) is True
    assert registry.remove(handle) is False


def test_handles_are_unique(registry):
    a = registry.add(lambda: None, label="same")
    b = registry.add(lambda: None, label="same")
    assert a != b
    assert len(registry) == 2


def test_failing_action_does_not_stop_the_rest(registry, caplog):
    ran = []

    def boom():
        raise RuntimeError("cluster unreachable")

    registry.add(lambda: ran.append("old"))
    bad = registry.add(boom, label="scope broken")
    registry.add(lambda: ran.append("new"))

    with caplog.at_level(logging.WARNING, logger="provisioner_e2e"):
        failures = registry.run_all()

    assert ran == ["new", "old"]
    assert [(h, str(e)) for h, e in failures] == [(bad, "cluster unreachable")]
    assert "scope broken" in caplog.text


def test_each_action_runs_at_most_once(registry):
    calls = []
    registry.add(lambda: calls.append(1))

    registry.run_all()
    registry.run_all()

    assert calls == [1]


def test_action_may_remove_its_own_handle(registry):
    handles = []

    def action():
        handles.append(registry.remove(handles[0]))

    handles.append(registry.add(action))
    registry.run_all()

    assert handles[1] is False


def test_action_registered_during_run_all_is_kept(registry):
    later = []
    registry.add(lambda: registry.add(lambda: later.append("late")))

    registry.run_all()
    assert later == []
    assert len(registry) == 1

    registry.run_all()
    assert later == ["late"]


@pytest.mark.parametrize("count", [0, 1, 5])
def test_len_counts_pending_actions(registry, count):
    for _ in range(count):
        registry.add(lambda: None)
    assert len(registry) == count
