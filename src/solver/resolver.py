"""PubGrub version solving.

Unit propagation derives what the current decisions force, conflict
resolution learns a new incompatibility from every contradiction and
backjumps, and decision making asks the provider for the next package.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled, Timer
from errors import ProviderError, ResolutionFailure, ResolutionTimeout
from providers.base import UNKNOWN, DependencyProvider
from versioning.version import Version

from .incompatibility import Incompatibility
from .partial_solution import IncompatibilityRelation, PartialSolution
from .term import Term

logger = logging.getLogger(__name__)


class Resolver:
    """PubGrub solver over a DependencyProvider.

    Every solve() call starts from a clean state; the incompatibilities and
    counters of the last call stay readable until the next one.

    Args:
        provider: Source of versions and dependencies; for a root project it
            is usually a RootDependencyProvider.
        timeout: Optional wall-clock budget in seconds, checked once per
            decision.
    """

    def __init__(self, provider: DependencyProvider, timeout: Optional[float] = None):
        self.provider = provider
        self.timeout = timeout
        self._reset()

    def _reset(self) -> None:
        self._solution = PartialSolution()
        self._incompatibilities: List[Incompatibility] = []
        self._by_package: Dict[str, List[Incompatibility]] = {}
        self._dependency_incompatibilities: Dict[Tuple[str, Version], List[Incompatibility]] = {}
        self._root: Optional[str] = None
        self._root_version: Optional[Version] = None
        self._deadline: Optional[float] = None
        self.decisions = 0
        self.iterations = 0

    @property
    def incompatibilities(self) -> Tuple[Incompatibility, ...]:
        return tuple(self._incompatibilities)

    def solve(self, root: str, root_version: Version) -> Dict[str, Version]:
        """Find one version per required package, root included.

        Raises:
            ResolutionFailure: no assignment satisfies the root's requirements.
            ResolutionTimeout: the timeout elapsed first.
            ProviderError: the provider failed or chose a version outside the
                allowed range.
        """
        self._reset()
        self._root, self._root_version = root, root_version
        if self.timeout is not None:
            self._deadline = time.monotonic() + self.timeout

        with Timer() as timer:
            self._add_incompatibility(Incompatibility.not_root(root, root_version))
            next_package = root
            while True:
                self.iterations += 1
                self._check_deadline()
                self._propagate(next_package)

                candidates = self._solution.unsatisfied()
                if not candidates:
                    break
                next_package = self._choose_and_decide(candidates)

        solution = self._solution.solution()
        logger.info(
            "Resolved %d packages in %d iterations (%d decisions)",
            len(solution), self.iterations, self.decisions,
            extra=extra_context(
                event="resolution",
                component="resolver",
                outcome="success",
                duration_ms=timer.duration_ms()
            )
        )
        return solution

    def _check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() > self._deadline:
            logger.warning("Resolution timed out after %s seconds", self.timeout)
            raise ResolutionTimeout(self.timeout, self.decisions)

    # -- incompatibility store ---------------------------------------------

    def _add_incompatibility(self, incompatibility: Incompatibility) -> None:
        self._incompatibilities.append(incompatibility)
        for package in incompatibility.packages():
            self._by_package.setdefault(package, []).append(incompatibility)
        if is_debug_enabled(logger):
            logger.debug(
                "Added incompatibility %s",
                incompatibility,
                extra=extra_context(event="incompatibility", component="resolver", cause=incompatibility.cause.value)
            )

    # -- unit propagation ----------------------------------------------------

    def _propagate(self, package: str) -> None:
        changed = [package]
        while changed:
            current = changed.pop()
            # Newest first: learned incompatibilities are the most useful.
            for incompatibility in reversed(list(self._by_package.get(current, ()))):
                relation, term_package = self._solution.relation(incompatibility)
                if relation is IncompatibilityRelation.SATISFIED:
                    term_package, root_cause = self._resolve_conflict(incompatibility)
                    self._derive(term_package, root_cause)
                    changed = [term_package]
                    break
                if relation is IncompatibilityRelation.ALMOST_SATISFIED:
                    self._derive(term_package, incompatibility)
                    if term_package not in changed:
                        changed.append(term_package)

    def _derive(self, package: str, cause: Incompatibility) -> None:
        term = cause.get(package).negate()
        self._solution.derive(package, term, cause)
        if is_debug_enabled(logger):
            logger.debug(
                "Derived %s %s",
                package, term,
                extra=extra_context(
                    event="derivation",
                    component="resolver",
                    package=package,
                    decision_level=self._solution.decision_level
                )
            )

    # -- conflict resolution -------------------------------------------------

    def _resolve_conflict(self, incompatibility: Incompatibility) -> Tuple[str, Incompatibility]:
        """Learn from a satisfied incompatibility and backjump.

        Returns the package the learned incompatibility is now almost
        satisfied on, and that incompatibility.

        Raises:
            ResolutionFailure: the incompatibility is terminal.
        """
        logger.debug("Conflict: %s", incompatibility, extra=extra_context(event="conflict", component="resolver"))
        changed = False
        while True:
            if incompatibility.is_terminal(self._root, self._root_version):
                logger.info("No solution: %s", incompatibility)
                raise ResolutionFailure(incompatibility)

            satisfier, package, previous_level = self._satisfier_search(incompatibility)
            if previous_level < satisfier.decision_level or satisfier.is_decision:
                self._backtrack(previous_level)
                if changed:
                    self._add_incompatibility(incompatibility)
                return package, incompatibility

            incompatibility = Incompatibility.prior_cause(incompatibility, satisfier.cause, package)
            changed = True
            if is_debug_enabled(logger):
                logger.debug(
                    "Derived prior cause %s",
                    incompatibility,
                    extra=extra_context(event="prior_cause", component="resolver", package=package)
                )

    def _satisfier_search(self, incompatibility: Incompatibility):
        """Find the most recent satisfier and the level to backjump to."""
        satisfiers = {
            package: self._solution.satisfier(package, term)
            for package, term in incompatibility.items()
        }
        package, satisfier = max(satisfiers.items(), key=lambda item: item[1].index)

        previous_level = 1
        for other, assignment in satisfiers.items():
            if other != package:
                previous_level = max(previous_level, assignment.decision_level)

        # The satisfier may only imply its term together with earlier
        # assignments on the same package.
        earlier = self._solution.satisfier(package, incompatibility.get(package), start=satisfier.term)
        if earlier is not None:
            previous_level = max(previous_level, earlier.decision_level)
        return satisfier, package, previous_level

    def _backtrack(self, decision_level: int) -> None:
        logger.debug(
            "Backtracking to decision level %d",
            decision_level,
            extra=extra_context(event="backtrack", component="resolver", decision_level=decision_level)
        )
        self._solution.backtrack(decision_level)

    # -- decision making -------------------------------------------------------

    def _choose_and_decide(self, candidates) -> str:
        """Ask the provider for the next package and record the outcome.

        Returns the package to propagate from next.
        """
        package, version = self.provider.choose_version(candidates)
        term = self._solution.term_for(package)

        if version is None:
            self._add_incompatibility(Incompatibility.no_versions(package, Term(True, term.constraint)))
            return package
        if not term.contains(version):
            raise ProviderError(package, f"chosen version is outside the allowed range {term}", str(version))

        dependency_incompatibilities = self._dependency_incompatibilities_for(package, version)
        if dependency_incompatibilities is None:
            # Dependencies cannot be determined; assume the release is usable.
            self._decide(package, version)
            return package

        # Deciding would immediately conflict with an added dependency; let
        # propagation rule the version out instead.
        if all(not self._satisfied_except(i, package) for i in dependency_incompatibilities):
            self._decide(package, version)
        return package

    def _dependency_incompatibilities_for(self, package: str, version: Version) -> Optional[List[Incompatibility]]:
        key = (package, version)
        if key in self._dependency_incompatibilities:
            return self._dependency_incompatibilities[key]

        dependencies = self.provider.dependencies_of(package, version)
        if dependencies is UNKNOWN:
            logger.debug("Dependencies of %s %s are unknown", package, version)
            return None

        incompatibilities: List[Incompatibility] = []
        self_range = dependencies.get(package)
        unavailable = any(r.is_empty() for r in dependencies.values()) or (
            self_range is not None and not self_range.contains(version)
        )
        if unavailable:
            incompatibilities.append(Incompatibility.unavailable(package, version))
        else:
            for dependency, constraint in dependencies.items():
                if dependency == package:
                    continue
                incompatibilities.append(Incompatibility.from_dependency(package, version, dependency, constraint))

        for incompatibility in incompatibilities:
            self._add_incompatibility(incompatibility)
        self._dependency_incompatibilities[key] = incompatibilities
        return incompatibilities

    def _satisfied_except(self, incompatibility: Incompatibility, package: str) -> bool:
        return all(
            self._solution.satisfies(other, term)
            for other, term in incompatibility.items()
            if other != package
        )

    def _decide(self, package: str, version: Version) -> None:
        self._solution.decide(package, version)
        self.decisions += 1
        if is_debug_enabled(logger):
            logger.debug(
                "Decided %s %s",
                package, version,
                extra=extra_context(
                    event="decision",
                    component="resolver",
                    package=package,
                    version=str(version),
                    decision_level=self._solution.decision_level
                )
            )
