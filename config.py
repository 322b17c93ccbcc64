"""
Configuration file for the Care Home Rota Scheduling System.

This file contains scheduling limits, background scan settings, export
settings and the health checks used by the CLI.

Every setting can be overridden from the environment with a ROTA_* variable.
"""

import os
import time
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List

# =============================================================================
# ENVIRONMENT HELPERS
# =============================================================================


def _env_value(name: str, default: Any, cast: Callable[[str], Any]) -> Any:
    """
    Read a typed value from an environment variable.

    Invalid values fall back to the default with a warning rather than
    preventing start-up.

    Args:
        name: Environment variable name
        default: Value to use when unset or invalid
        cast: Conversion applied to the raw string

    Returns:
        Converted value, or default
    """
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError):
        logging.warning(
            f"⚠️  Invalid value for {name}: {raw!r}. Using default {default!r}."
        )
        return default


def _env_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(raw)


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise ValueError(raw)
    return value


# =============================================================================
# HEALTH CHECK SYSTEM
# =============================================================================

@dataclass
class HealthStatus:
    """Health status of a system component."""
    name: str
    healthy: bool
    message: str
    last_check: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "healthy": self.healthy,
            "message": self.message,
            "last_check_seconds_ago": time.time() - self.last_check
        }


class HealthChecker:
    """
    System health checker for monitoring component status.

    Provides health checks for:
    - Data directory (CSV inputs)
    - Output directory (workbook export)
    """

    REQUIRED_FILES = ("homes.csv", "staff.csv")

    def check_data_directory(self, data_dir: str = "data") -> HealthStatus:
        """Check if data directory exists and holds the required CSV files."""
        if not os.path.isdir(data_dir):
            return HealthStatus(
                name="data_directory",
                healthy=False,
                message=f"Data directory not found: {data_dir}"
            )
        files = os.listdir(data_dir)
        missing = [f for f in self.REQUIRED_FILES if f not in files]
        if missing:
            return HealthStatus(
                name="data_directory",
                healthy=False,
                message=f"Missing required files: {', '.join(missing)}"
            )
        csv_files = [f for f in files if f.endswith('.csv')]
        return HealthStatus(
            name="data_directory",
            healthy=True,
            message=f"Data directory OK ({len(csv_files)} CSV files)"
        )

    def check_output_directory(self, output_dir: str = "output") -> HealthStatus:
        """Check if output directory is writable."""
        try:
            os.makedirs(output_dir, exist_ok=True)
            test_file = os.path.join(output_dir, ".health_check")
            with open(test_file, 'w') as f:
                f.write("health check")
            os.remove(test_file)
            return HealthStatus(
                name="output_directory",
                healthy=True,
                message="Output directory writable"
            )
        except OSError as e:
            return HealthStatus(
                name="output_directory",
                healthy=False,
                message=f"Output directory error: {e}"
            )

    def run_all_checks(self, data_dir: str = "data", output_dir: str = "output") -> dict:
        """
        Run all health checks and return summary.

        Returns:
            Dictionary with overall status and individual check results
        """
        checks: List[HealthStatus] = [
            self.check_data_directory(data_dir),
            self.check_output_directory(output_dir),
        ]

        return {
            "status": "healthy" if all(c.healthy for c in checks) else "unhealthy",
            "timestamp": time.time(),
            "checks": [c.to_dict() for c in checks]
        }


# Global health checker instance
health_checker = HealthChecker()


# =============================================================================
# SCHEDULING CONFIGURATION
# =============================================================================

@dataclass
class SchedulingConfig:
    """Configuration for scheduling parameters."""

    # Conflict evaluation
    daily_hour_limit: float = 12.0

    # Background consistency scan
    scan_interval_seconds: float = 30.0
    scan_days_back: int = 7
    scan_days_ahead: int = 28

    # Break deduction (display only): (minimum shift hours, break hours),
    # checked longest first
    break_thresholds: tuple = ((12.0, 1.0), (8.0, 0.5))

    @classmethod
    def from_env(cls) -> "SchedulingConfig":
        defaults = cls()
        return cls(
            daily_hour_limit=_env_value(
                "ROTA_DAILY_HOUR_LIMIT", defaults.daily_hour_limit, _positive_float),
            scan_interval_seconds=_env_value(
                "ROTA_SCAN_INTERVAL_SECONDS", defaults.scan_interval_seconds, _positive_float),
            scan_days_back=_env_value("ROTA_SCAN_DAYS_BACK", defaults.scan_days_back, int),
            scan_days_ahead=_env_value("ROTA_SCAN_DAYS_AHEAD", defaults.scan_days_ahead, int),
        )


# =============================================================================
# EXPORT CONFIGURATION
# =============================================================================

@dataclass
class ExportConfig:
    """Configuration for the Excel rota export."""

    header_color: str = "1F4E78"
    conflict_color: str = "F8CBAD"
    unfilled_color: str = "FFF2CC"
    filename_pattern: str = "rota_{home_id}_{week_start}.xlsx"

    @classmethod
    def from_env(cls) -> "ExportConfig":
        defaults = cls()
        return cls(
            filename_pattern=_env_value(
                "ROTA_EXPORT_FILENAME", defaults.filename_pattern, str),
        )


# =============================================================================
# MAIN APPLICATION CONFIGURATION
# =============================================================================

@dataclass
class AppConfig:
    """Main application configuration."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Paths
    data_dir: str = "data"
    output_dir: str = "output"
    log_dir: str = "logs"

    verbose: bool = True

    @classmethod
    def load(cls) -> "AppConfig":
        """Load configuration from environment and defaults."""
        defaults = cls()
        return cls(
            scheduling=SchedulingConfig.from_env(),
            export=ExportConfig.from_env(),
            data_dir=_env_value("ROTA_DATA_DIR", defaults.data_dir, str),
            output_dir=_env_value("ROTA_OUTPUT_DIR", defaults.output_dir, str),
            log_dir=_env_value("ROTA_LOG_DIR", defaults.log_dir, str),
            verbose=_env_value("ROTA_VERBOSE", defaults.verbose, _env_bool),
        )


# Global configuration instance
config = AppConfig.load()


# =============================================================================
# USAGE INSTRUCTIONS
# =============================================================================
#
# Override any setting through the environment, e.g.:
#
#    export ROTA_DAILY_HOUR_LIMIT=10
#    export ROTA_SCAN_INTERVAL_SECONDS=60
#    export ROTA_DATA_DIR=/srv/rota/data
#
# =============================================================================
