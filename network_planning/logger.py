"""
Structured logging for planning runs.

Every event is written as a single JSON object per line with the run id,
environment name and a timestamp, so a synth or plan run can be traced end
to end. Log lines go to stderr; stdout is left for plan output.

Usage:
    logger = create_plan_logger('prod')
    logger.log_plan_start(project='core')
    # ... plan ...
    logger.log_plan_complete(subnets=6, routes=6)
"""

import json
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, TextIO

from .errors import NamingWarning, PlanningError


class PlanLogger:
    """
    Structured logger for one planning run.

    Attributes:
        run_id: Unique identifier for the run
        env_name: Environment being planned
    """

    def __init__(self, run_id: str, env_name: str, stream: TextIO = None):
        self.run_id = run_id
        self.env_name = env_name
        self.start_time = time.time()
        self._stream = stream

    def _latency_ms(self) -> int:
        return int((time.time() - self.start_time) * 1000)

    def _log(self, event: str, **kwargs: Any) -> None:
        log_entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'runId': self.run_id,
            'environment': self.env_name,
            'event': event,
            **kwargs
        }
        stream = self._stream if self._stream is not None else sys.stderr
        print(json.dumps(log_entry, default=str), file=stream)

    def log_plan_start(self, **additional_fields: Any) -> None:
        """Log the start of a planning run."""
        self._log('plan_start', **additional_fields)

    def log_plan_complete(self, **additional_fields: Any) -> None:
        """
        Log successful completion with latency.

        Example:
            logger.log_plan_complete(subnets=6, defaultRoutes=6, additionalRoutes=0)
        """
        self._log('plan_complete', latencyMs=self._latency_ms(), **additional_fields)

    def log_planning_error(self, error: PlanningError, **additional_fields: Any) -> None:
        """
        Log a fatal planning error.

        ConfigError is logged as 'config_error', TopologyError as
        'topology_error'.
        """
        event = error.code.lower()
        self._log(
            event,
            errorCode=error.code,
            errorMessage=error.message,
            details=error.details,
            latencyMs=self._latency_ms(),
            **additional_fields
        )

    def log_warning(self, warning: NamingWarning) -> None:
        """Log a non-fatal naming warning."""
        self._log('warning', subnet=warning.subnet_name, message=warning.message)

    def log_info(self, message: str, **additional_fields: Any) -> None:
        self._log('info', message=message, **additional_fields)


def create_plan_logger(env_name: str, stream: TextIO = None) -> PlanLogger:
    """Create a logger with a fresh run id."""
    return PlanLogger(uuid.uuid4().hex, env_name, stream)
