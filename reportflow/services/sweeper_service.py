# reportflow/services/sweeper_service.py
"""
Background sweeper for validation state.

The store never cleans up after itself. This service is the opt-in
collaborator that does: when an interval is configured it runs an asyncio
task that periodically evicts validation states older than max_age_ms and
drops expired validation cache entries. Without an interval the service
initializes as "disabled" and sweeps only when sweep_once() is called.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from reportflow.core.config import DEFAULT_STATE_MAX_AGE_MS
from reportflow.core.exceptions import config_error
from reportflow.core.service_base import BaseService, ServiceConfig
from reportflow.core.state import SessionValidationStore, ValidationCache

logger = logging.getLogger(__name__)


@dataclass
class SweeperConfig(ServiceConfig):
    """Configuration for the validation sweeper"""
    interval_seconds: Optional[float] = None
    max_age_ms: int = DEFAULT_STATE_MAX_AGE_MS


class ValidationSweeperService(BaseService[SweeperConfig]):
    """Periodically sweeps a SessionValidationStore (and optionally a ValidationCache)"""

    def __init__(
        self,
        store: SessionValidationStore,
        cache: Optional[ValidationCache] = None,
        config: Optional[SweeperConfig] = None
    ):
        super().__init__(config or SweeperConfig(), logger)
        self.store = store
        self.cache = cache
        self._runs = 0
        self._failures = 0
        self._states_evicted = 0
        self._cache_entries_evicted = 0

    @property
    def enabled(self) -> bool:
        return self.config.interval_seconds is not None

    def _validate_config(self) -> None:
        super()._validate_config()

        if self.config.interval_seconds is not None and self.config.interval_seconds <= 0:
            raise config_error(
                f"Sweep interval must be positive, got {self.config.interval_seconds}",
                self.service_name
            )

        if self.config.max_age_ms <= 0:
            raise config_error(
                f"Maximum state age must be positive, got {self.config.max_age_ms}",
                self.service_name
            )

    async def _initialize_client(self) -> Optional[asyncio.Task]:
        """Start the sweep loop, or stay idle when no interval is configured"""
        if not self.enabled:
            self.logger.info("Validation sweeper disabled - no interval configured")
            return None

        self.logger.info(
            f"🧹 Sweeping validation state every {self.config.interval_seconds}s "
            f"(max age {self.config.max_age_ms} ms)"
        )
        return asyncio.create_task(self._run(), name="validation-sweeper")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.config.interval_seconds)
            try:
                self.sweep_once()
            except Exception:
                self._failures += 1
                self.logger.error("Validation sweep failed", exc_info=True)

    def sweep_once(self, now_ms: Optional[int] = None) -> Dict[str, int]:
        """Run a single sweep pass and return what it evicted"""
        states_evicted = self.store.sweep_older_than(self.config.max_age_ms, now=now_ms)
        cache_entries_evicted = self.cache.clear_expired() if self.cache is not None else 0

        self._runs += 1
        self._states_evicted += states_evicted
        self._cache_entries_evicted += cache_entries_evicted

        return {
            "states_evicted": states_evicted,
            "cache_entries_evicted": cache_entries_evicted,
        }

    async def _cleanup(self) -> None:
        task = self._client
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def health_check(self) -> Dict[str, Any]:
        if not self.enabled:
            return {
                "healthy": True,
                "status": "disabled",
                "details": {"message": "No sweep interval configured"}
            }

        task = self._client
        if task is None:
            return {
                "healthy": False,
                "status": "not_started",
                "details": {"interval_seconds": self.config.interval_seconds}
            }

        if task.done():
            return {
                "healthy": False,
                "status": "stopped",
                "details": {"interval_seconds": self.config.interval_seconds}
            }

        return {
            "healthy": True,
            "status": "running",
            "details": {
                "interval_seconds": self.config.interval_seconds,
                "max_age_ms": self.config.max_age_ms,
                "runs": self._runs,
            }
        }

    def get_metrics(self) -> Dict[str, Any]:
        metrics = super().get_metrics()
        metrics.update({
            "enabled": self.enabled,
            "runs": self._runs,
            "failures": self._failures,
            "states_evicted": self._states_evicted,
            "cache_entries_evicted": self._cache_entries_evicted,
        })
        return metrics
