# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-28
# Description: HealthService.py
# -----------------------------------------------------------------------------
from dataclasses import dataclass

from health.TestRunner import TestRunner
from api.schemas.health import DeepHealthResponse, SmokeTestSummary


@dataclass
class HealthService:
    """
    Wraps TestRunner, which runs smoke tests on the store and the
    OpenAI endpoints. Returns DeepHealthResponse for the API layer.
    """

    test_runner: TestRunner

    def deep_health(self, run_heavy: bool = False) -> DeepHealthResponse:
        results = self.test_runner.run_all(run_heavy=run_heavy)

        total = len(results)
        passed = sum(1 for ok in results.values() if ok)
        failed = total - passed

        overall_status = "ok" if failed == 0 else "error"

        return DeepHealthResponse(
            status=overall_status,
            results=results,
            summary=SmokeTestSummary(total=total, passed=passed, failed=failed),
        )
