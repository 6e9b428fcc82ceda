"""
Logging Configuration and Audit Trail Infrastructure.

This module provides structured logging for the accuracy studies. Each
study run can be wrapped in an audit context that records the
configuration hash and every accuracy check performed, so that a
run can be compared against earlier ones after the fact.

Audit Contents
--------------
Every audited run records:
- Configuration hash
- Sample counts
- Accuracy check results (value, tolerance, pass/fail)
"""

import hashlib
import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
from contextlib import contextmanager
import threading


# Configure root logger for the package
def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the foot-point validation system.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


@dataclass
class AccuracyResidual:
    """Record of one accuracy check.

    Attributes
    ----------
    timestamp : datetime
        When the check was made.
    check_name : str
        Which quantity was checked (e.g., 'footpoint_max_error').
    residual_value : float
        The measured value.
    tolerance : float
        The acceptable bound.
    passed : bool
        Whether the value is within tolerance.
    context : dict
        Additional context (sample count, approximation order, etc.).
    """
    timestamp: datetime
    check_name: str
    residual_value: float
    tolerance: float
    passed: bool
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RunMetadata:
    """Metadata for a study run."""
    run_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    config_hash: str = ""
    input_metadata: Dict[str, Any] = field(default_factory=dict)
    output_metadata: Dict[str, Any] = field(default_factory=dict)
    accuracy_residuals: List[AccuracyResidual] = field(default_factory=list)

    def compute_config_hash(self, config: Dict[str, Any]) -> str:
        """Compute a deterministic hash of the configuration.

        Parameters
        ----------
        config : dict
            The configuration dictionary.

        Returns
        -------
        str
            Truncated SHA-256 hash of the configuration.
        """
        config_str = json.dumps(config, sort_keys=True, default=str)
        self.config_hash = hashlib.sha256(config_str.encode()).hexdigest()[:16]
        return self.config_hash


class AuditLogger:
    """Central logging facility for audit trail generation.

    Thread Safety
    -------------
    Instance creation is guarded by a lock; a single instance is shared
    process-wide.

    Examples
    --------
    >>> audit = AuditLogger()
    >>> with audit.run_context("meridian_001") as run:
    ...     audit.log_accuracy_check(
    ...         check_name="footpoint_max_error",
    ...         residual_value=2.0e-9,
    ...         tolerance=1.0e-3,
    ...     )
    >>> summary = audit.get_run_summary("meridian_001")
    """

    _instance: Optional['AuditLogger'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'AuditLogger':
        """Singleton pattern for global audit logger."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._runs: Dict[str, RunMetadata] = {}
        self._current_run_id: Optional[str] = None
        self._logger = get_logger("audit")
        self._file_logger: Optional[logging.Logger] = None
        self._initialized = True

    def set_output_dir(self, output_dir: Path) -> None:
        """Set the directory for audit log files.

        Parameters
        ----------
        output_dir : Path
            Directory to write audit logs.
        """
        output_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            output_dir / f"audit_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        )
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s | %(levelname)s | %(message)s')
        )
        self._file_logger = logging.getLogger("audit.file")
        self._file_logger.addHandler(file_handler)
        self._file_logger.setLevel(logging.DEBUG)

    @contextmanager
    def run_context(self, run_id: str, config: Optional[Dict[str, Any]] = None):
        """Context manager for a study run.

        Parameters
        ----------
        run_id : str
            Unique identifier for this run.
        config : dict, optional
            Configuration to compute hash from.

        Yields
        ------
        RunMetadata
            The metadata object for this run.
        """
        metadata = RunMetadata(
            run_id=run_id,
            start_time=datetime.now()
        )

        if config:
            metadata.compute_config_hash(config)

        self._runs[run_id] = metadata
        self._current_run_id = run_id

        self._logger.info(f"Starting run {run_id} with config hash {metadata.config_hash}")

        try:
            yield metadata
        finally:
            metadata.end_time = datetime.now()
            self._current_run_id = None
            failed = sum(1 for r in metadata.accuracy_residuals if not r.passed)
            self._logger.info(
                f"Completed run {run_id}. "
                f"Accuracy checks: {len(metadata.accuracy_residuals)}, "
                f"failed: {failed}"
            )

    def log_accuracy_check(
        self,
        check_name: str,
        residual_value: float,
        tolerance: float,
        context: Optional[Dict[str, Any]] = None,
        passed: Optional[bool] = None
    ) -> bool:
        """Log the outcome of an accuracy check.

        Parameters
        ----------
        check_name : str
            Which quantity was checked.
        residual_value : float
            The measured value.
        tolerance : float
            The acceptable bound.
        context : dict, optional
            Additional context.
        passed : bool, optional
            Outcome decided by the caller, for checks that are not a plain
            ``|value| <= tolerance`` comparison.

        Returns
        -------
        bool
            Whether the check passed. A nan value never passes unless the
            caller decides otherwise.
        """
        if passed is None:
            passed = bool(abs(residual_value) <= tolerance)
        passed = bool(passed)

        residual = AccuracyResidual(
            timestamp=datetime.now(),
            check_name=check_name,
            residual_value=residual_value,
            tolerance=tolerance,
            passed=passed,
            context=context or {}
        )

        if self._current_run_id and self._current_run_id in self._runs:
            self._runs[self._current_run_id].accuracy_residuals.append(residual)

        status = "PASS" if passed else "FAIL"
        log_msg = (
            f"ACCURACY CHECK | {check_name} | {status} | "
            f"value={residual_value:.6e} (tolerance={tolerance:.6e})"
        )

        if passed:
            self._logger.debug(log_msg)
        else:
            self._logger.warning(log_msg)
        if self._file_logger is not None:
            self._file_logger.info(log_msg)
        return passed

    def get_run_summary(self, run_id: str) -> Dict[str, Any]:
        """Get a summary of a study run.

        Raises
        ------
        KeyError
            If no run with this id was recorded.
        """
        if run_id not in self._runs:
            raise KeyError(f"No run found with ID {run_id}")

        metadata = self._runs[run_id]

        checks = {}
        for r in metadata.accuracy_residuals:
            checks[r.check_name] = {
                "passed": r.passed,
                "value": r.residual_value,
                "tolerance": r.tolerance
            }

        return {
            "run_id": run_id,
            "config_hash": metadata.config_hash,
            "start_time": metadata.start_time.isoformat(),
            "end_time": metadata.end_time.isoformat() if metadata.end_time else None,
            "total_checks": len(metadata.accuracy_residuals),
            "failed_checks": sum(1 for r in metadata.accuracy_residuals if not r.passed),
            "accuracy_checks": checks,
            "input_metadata": metadata.input_metadata,
            "output_metadata": metadata.output_metadata,
        }

    def export_run_artifacts(self, run_id: str, output_path: Path) -> None:
        """Export all audit artifacts for a run to JSON.

        Parameters
        ----------
        run_id : str
            The run identifier.
        output_path : Path
            Path to write the JSON file.
        """
        if run_id not in self._runs:
            raise KeyError(f"No run found with ID {run_id}")

        metadata = self._runs[run_id]

        artifacts = {
            "run_id": metadata.run_id,
            "config_hash": metadata.config_hash,
            "start_time": metadata.start_time.isoformat(),
            "end_time": metadata.end_time.isoformat() if metadata.end_time else None,
            "input_metadata": metadata.input_metadata,
            "output_metadata": metadata.output_metadata,
            "accuracy_residuals": [
                {
                    "timestamp": r.timestamp.isoformat(),
                    "check_name": r.check_name,
                    "residual_value": r.residual_value,
                    "tolerance": r.tolerance,
                    "passed": r.passed,
                    "context": r.context
                }
                for r in metadata.accuracy_residuals
            ]
        }

        with open(output_path, 'w') as f:
            json.dump(artifacts, f, indent=2, default=str)

        self._logger.info(f"Exported audit artifacts to {output_path}")
