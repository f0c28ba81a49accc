# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-07
# Updated: 2026-01-28
# Description: TestRunner
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from utility.logging_utils import get_class_logger

Check = Callable[[], bool]


class TestRunner:
    """
    Orchestrates all smoke tests and reports a consolidated result.

    Typical checks (wired by AppContainer):
      - store_health     (embedding document loads, directory writable)
      - embedding_health (embedding API returns a vector of the store's dimension)
      - openai_health    (chat completion round-trip)
    Heavy checks only run when asked for.
    """

    __test__ = False  # not a pytest test class

    def __init__(
            self,
            checks: Dict[str, Check],
            heavy_checks: Optional[Dict[str, Check]] = None,
            logger: Optional[logging.Logger] = None,
    ):
        self.checks = dict(checks)
        self.heavy_checks = dict(heavy_checks or {})
        self.logger = logger or get_class_logger(self.__class__)
        self.logger.info("Initialising SmokeTestRunner (%s)", ", ".join(self.checks))

    # -------------------------------------------------------------------------
    def run_all(self, run_heavy: bool = False) -> Dict[str, bool]:
        """
        Run all configured smoke tests.

        :param run_heavy: If True, runs the heavy checks as well.
        :return: Dict mapping test names to True/False.
        """
        self.logger.info("Starting smoke test suite (run_heavy=%s)", run_heavy)

        suite = dict(self.checks)
        if run_heavy:
            suite.update(self.heavy_checks)

        results: Dict[str, bool] = {}
        for name, check in suite.items():
            # a check that blows up is a failed check, the rest still run
            try:
                self.logger.info("Running %s", name)
                ok = bool(check())
            except Exception as e:
                self.logger.exception("%s raised an exception: %s", name, e)
                ok = False
            results[name] = ok
            self._log_result(name, ok)

        self._log_summary(results)
        return results

    # -------------------------------------------------------------------------
    def _log_result(self, name: str, ok: bool) -> None:
        if ok:
            self.logger.info("%s: PASS", name)
        else:
            self.logger.error("%s: FAIL", name)

    def _log_summary(self, results: Dict[str, bool]) -> None:
        total = len(results)
        passed = sum(1 for v in results.values() if v)
        failed = total - passed

        self.logger.info("Smoke test summary: %d total, %d passed, %d failed", total, passed, failed)

        for name, ok in results.items():
            status = "PASS" if ok else "FAIL"
            self.logger.info("  %s: %s", name, status)
