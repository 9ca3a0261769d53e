"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

from safe_amr.core.recurrence import SimulatorConfig


class Settings(BaseSettings):
    app_name: str = "safe-amr"
    debug: bool = False
    log_level: str = "INFO"

    # Driver
    tick_period_seconds: float = 0.5
    autostart_driver: bool = True

    # Simulator constants
    min_interval: float = 0.5
    max_interval: float = 2.5
    decay_rate: float = -0.0953
    growth_rate: float = 0.0953
    initial_interval: float = 1.5
    critical_floor: float = 1.0
    history_window: int = 30

    model_config = {"env_prefix": "SAFE_AMR_"}

    def simulator_config(self) -> SimulatorConfig:
        return SimulatorConfig(
            min_interval=self.min_interval,
            max_interval=self.max_interval,
            decay_rate=self.decay_rate,
            growth_rate=self.growth_rate,
            initial_interval=self.initial_interval,
            critical_floor=self.critical_floor,
            history_window=self.history_window,
        )


settings = Settings()
