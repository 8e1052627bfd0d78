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

"""pytest integration for TestScope.

Scopes report failures as exceptions and reports; this module is the only
place that turns them into pytest failures. It also records each test's
outcome so teardown can apply the namespace preservation policy, and runs
every still-registered cleanup action when the session ends.
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterator

import pytest

from provisioner_e2e import logger
from provisioner_e2e.cleanup import default_registry
from provisioner_e2e.config import TestContext, resolve_context
from provisioner_e2e.errors import FrameworkError
from provisioner_e2e.metrics import canary_metric
from provisioner_e2e.scope import TestScope

REPORTS_KEY = pytest.StashKey[dict[str, pytest.TestReport]]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("provisioner-e2e", "volume provisioner e2e")
    group.addoption("--e2e-kubeconfig", default=None, help="Kubeconfig for the cluster under test")
    group.addoption("--e2e-namespace", default=None, help="Run every test in this existing namespace")
    group.addoption("--e2e-oci-config", default=None, help="Volume provisioner config file")
    group.addoption(
        "--no-delete-namespace", action="store_true", default=False,
        help="Keep every test namespace",
    )
    group.addoption(
        "--no-delete-namespace-on-failure", action="store_true", default=False,
        help="Keep the namespaces of failed tests",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "e2e_scope(name, backup=False): name the TestScope used by the e2e_scope fixture",
    )


@pytest.hookimpl(wrapper=True, tryfirst=True)
def pytest_runtest_makereport(
    item: pytest.Item,
    call: pytest.CallInfo,
) -> Generator[None, pytest.TestReport, pytest.TestReport]:
    report = yield
    item.stash.setdefault(REPORTS_KEY, {})[report.when] = report
    return report


@pytest.hookimpl(tryfirst=True)
def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    # Ahead of fixture finalizers, so an interrupted test is torn down as failed.
    pending = len(default_registry)
    if pending:
        logger.warning("Running %d pending cleanup action(s)", pending)
    default_registry.run_all()


def context_from_options(config: pytest.Config) -> TestContext:
    """Resolve the TestContext with command line options taking precedence."""
    return resolve_context(
        kubeconfig=config.getoption("e2e_kubeconfig"),
        namespace=config.getoption("e2e_namespace"),
        oci_config=config.getoption("e2e_oci_config"),
        delete_namespace=False if config.getoption("no_delete_namespace") else None,
        delete_namespace_on_failure=False if config.getoption("no_delete_namespace_on_failure") else None,
    )


def outcome_failed(item: pytest.Item) -> bool:
    """Whether the setup or call phase of *item* failed."""
    reports = item.stash.get(REPORTS_KEY, {})
    return any(reports[when].failed for when in ("setup", "call") if when in reports)


def run_scope(scope: TestScope, request: pytest.FixtureRequest) -> Iterator[TestScope]:
    """Drive one setup/teardown cycle of *scope* around the requesting test.

    Meant to be used as ``yield from run_scope(scope, request)`` in a fixture.
    A setup failure tears down what was already created and fails the test;
    namespaces that cannot be deleted fail the test's teardown.
    """
    try:
        scope.setup()
    except FrameworkError as err:
        report = scope.teardown(test_failed=True)
        message = f"setup of scope {scope.base_name!r} failed: {err}"
        if report.failed:
            message = f"{message}; {report.failure_message}"
        pytest.fail(message, pytrace=False)

    yield scope

    item = request.node
    failed = outcome_failed(item)
    metric = canary_metric(item.name, failed)
    if metric is not None:
        logger.info("Canary metric %s=%d", metric.name, metric.result)

    report = scope.teardown(test_failed=failed)
    if report.failed:
        pytest.fail(report.failure_message, pytrace=False)


@pytest.fixture(scope="session")
def test_context(pytestconfig: pytest.Config) -> TestContext:
    return context_from_options(pytestconfig)


@pytest.fixture(scope="session")
def e2e_scope_factory(test_context: TestContext) -> Callable[[str, bool], TestScope]:
    """Builds the TestScope for a (name, backup) pair; override it in a conftest to inject collaborators."""

    def build(name: str, backup: bool) -> TestScope:
        return TestScope(name, is_backup=backup, context=test_context)

    return build


@pytest.fixture(scope="session")
def e2e_scopes() -> dict[tuple[str, bool], TestScope]:
    """Scopes shared by every test that names them, keyed by (name, backup)."""
    return {}


@pytest.fixture
def e2e_scope(
    request: pytest.FixtureRequest,
    e2e_scope_factory: Callable[[str, bool], TestScope],
    e2e_scopes: dict[tuple[str, bool], TestScope],
) -> Iterator[TestScope]:
    """A set-up TestScope for the current test.

    The scope is named by the closest ``e2e_scope`` marker, or after the test
    module, and is reused by every test with the same name.
    """
    marker = request.node.get_closest_marker("e2e_scope")
    if marker is not None and marker.args:
        name = marker.args[0]
    else:
        name = request.node.module.__name__.rsplit(".", 1)[-1]
    backup = bool(marker.kwargs.get("backup", False)) if marker is not None else False

    scope = e2e_scopes.get((name, backup))
    if scope is None:
        scope = e2e_scopes[(name, backup)] = e2e_scope_factory(name, backup)
    yield from run_scope(scope, request)
