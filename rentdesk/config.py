"""Configuration management for rentdesk."""

from dataclasses import dataclass, field
from pathlib import Path

from rentdesk.exceptions import ConfigurationError


@dataclass(frozen=True)
class DueWindows:
    """Day thresholds shared by the aggregator and the notification synthesizer."""

    rent_due_urgent_days: int = 7
    lease_expiry_window_days: int = 30
    lease_expiry_urgent_days: int = 14
    lease_notice_days: int = 60
    lease_renewal_days: int = 30
    recent_payments_limit: int = 5
    upcoming_items_limit: int = 8


@dataclass
class StorageConfig:
    """Key-value storage configuration."""

    backend: str = "memory"  # memory | json
    data_dir: Path = field(default_factory=lambda: Path("data"))
    key_prefix: str = "rental_"

    def __post_init__(self) -> None:
        if self.backend not in ("memory", "json"):
            raise ConfigurationError(f"Unknown storage backend: {self.backend}")


@dataclass
class ReportConfig:
    """Income report configuration."""

    default_months: int = 12
    allowed_months: tuple[int, ...] = (6, 12, 24)

    def __post_init__(self) -> None:
        if self.default_months not in self.allowed_months:
            raise ConfigurationError(
                f"Report window {self.default_months} not in {self.allowed_months}"
            )


@dataclass
class RentDeskConfig:
    """Main configuration for rentdesk."""

    windows: DueWindows = field(default_factory=DueWindows)
    storage: StorageConfig = field(default_factory=StorageConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    seed: int | None = 42
    seed_on_first_use: bool = True
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "RentDeskConfig":
        """Create config from environment variables."""
        import os

        storage = StorageConfig(
            backend=os.getenv("RENTDESK_BACKEND", "json"),
            data_dir=Path(os.getenv("RENTDESK_DATA_DIR", "data")),
            key_prefix=os.getenv("RENTDESK_KEY_PREFIX", "rental_"),
        )

        months = os.getenv("RENTDESK_REPORT_MONTHS", "12")
        try:
            report = ReportConfig(default_months=int(months))
        except ValueError as exc:
            raise ConfigurationError(f"RENTDESK_REPORT_MONTHS must be an integer, got {months!r}") from exc

        seed_str = os.getenv("SEED")
        try:
            seed = int(seed_str) if seed_str else 42
        except ValueError as exc:
            raise ConfigurationError(f"SEED must be an integer, got {seed_str!r}") from exc

        return cls(
            storage=storage,
            report=report,
            seed=seed,
            seed_on_first_use=os.getenv("RENTDESK_SEED_DATA", "true").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
