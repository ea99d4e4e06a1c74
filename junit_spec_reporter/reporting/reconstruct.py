"""
Rebuild the suite tree from the flat list of completed tests.

Suites that ran in an isolated worker reach the reporter without their
containers and without being linked under the run's root suite. The walk
below starts from each test's declaring suite and climbs to the root,
materializing containers and linking every suite into its parent exactly
once. Aggregates are accumulated on the same walk: each ancestor receives
each descendant test's duration and failure exactly once, and the run-level
suite is never aggregated (its figures come from the run counters).
"""

from typing import Iterable, List

from junit_spec_reporter.core.logging import get_logger
from junit_spec_reporter.reporting.models import SuiteNode, TestRecord

logger = get_logger(__name__)


def reset_suite(suite: SuiteNode) -> None:
    """Clear containment and aggregates all the way down from `suite`."""
    for child in suite.suites or []:
        reset_suite(child)
    suite.suites = []
    suite.tests = []
    suite.duration = 0.0
    suite.failures = 0


def _link(parent: SuiteNode, child: SuiteNode) -> None:
    if parent.suites is None:
        parent.suites = []
    if not any(existing is child for existing in parent.suites):
        parent.suites.append(child)


def reconstruct_hierarchy(root: SuiteNode, tests: Iterable[TestRecord]) -> SuiteNode:
    """
    Rebuild `root`'s tree so it only contains suites with completed tests.

    The root keeps every test as a flat baseline in addition to the nested
    copies under each test's own suites.
    """
    tests = list(tests)
    reset_suite(root)
    root.tests = list(tests)

    for test in tests:
        parent = test.parent
        if parent is None:
            logger.debug(f"Test '{test.title}' has no parent; kept at the root only")
            continue

        while parent is not None and not parent.root:
            if parent.tests is None:
                parent.tests = []
            parent.tests.append(test)
            parent.duration += test.duration or 0
            if test.failed:
                parent.failures += 1

            grandparent = parent.parent
            if grandparent is not None and grandparent.root:
                # Any run-level suite (including a worker's) maps onto ours
                _link(root, parent)
                break
            if grandparent is not None:
                _link(grandparent, parent)
            else:
                logger.debug(f"Suite '{parent.title}' is detached from the root; not linked")
            parent = grandparent

    return root


def iter_suites(suite: SuiteNode) -> Iterable[SuiteNode]:
    """Pre-order traversal of the reconstructed tree below `suite`."""
    for child in suite.suites or []:
        yield child
        yield from iter_suites(child)


def suite_tree(suite: SuiteNode) -> dict:
    """Plain nested mapping of the tree, for inspection output."""
    return {
        "title": suite.title,
        "tests": len(suite.tests or []),
        "failures": suite.failures,
        "duration": suite.duration,
        "suites": [suite_tree(child) for child in suite.suites or []],
    }


def unreported_suites(suites: List[SuiteNode], root: SuiteNode) -> List[SuiteNode]:
    """Suites seen during the run that the reconstructed tree does not contain."""
    reached = {id(s) for s in iter_suites(root)}
    return [s for s in suites if not s.root and id(s) not in reached]
