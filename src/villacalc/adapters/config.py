# src/villacalc/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # -----------------------------
    # XIRR solver
    # -----------------------------
    XIRR_INITIAL_GUESS: float = Field(default=0.1)
    XIRR_MAX_ITERATIONS: int = Field(default=100)
    # relative to the largest absolute cash flow
    XIRR_NPV_TOLERANCE: float = Field(default=1e-10)
    XIRR_RATE_TOLERANCE: float = Field(default=1e-12)
    XIRR_BRACKET_LOW: float = Field(default=-0.999)
    XIRR_BRACKET_HIGH: float = Field(default=10.0)

    # -----------------------------
    # Currency (presentation only)
    # -----------------------------
    BASE_CURRENCY: str = Field(default="IDR")
    DISPLAY_CURRENCY: str = Field(default="IDR")
    RATES_API_URL: str = Field(default="https://api.frankfurter.app")
    RATES_TIMEOUT_S: float = Field(default=10.0)
    # If true, the HTTP host refreshes rates from RATES_API_URL at startup
    USE_LIVE_RATES: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="VILLACALC_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("XIRR_NPV_TOLERANCE", "XIRR_RATE_TOLERANCE", mode="before")
    @classmethod
    def _positive_tolerance(cls, v: Any) -> Any:
        try:
            f = float(v)
        except (TypeError, ValueError) as err:
            raise ValueError("tolerance must be numeric") from err
        if f <= 0:
            raise ValueError("tolerance must be > 0")
        return f

    @field_validator("XIRR_INITIAL_GUESS", "XIRR_BRACKET_LOW", "XIRR_BRACKET_HIGH", mode="before")
    @classmethod
    def _percent_like_rate(cls, v: Any) -> Any:
        # "10%" -> 0.10, plain numbers are already decimal rates
        if isinstance(v, str):
            s = v.strip()
            if s.endswith("%"):
                return float(s[:-1]) / 100.0
            return float(s)
        return v

    @field_validator("XIRR_MAX_ITERATIONS", mode="before")
    @classmethod
    def _iterations_positive(cls, v: Any) -> Any:
        n = int(v)
        if n <= 0:
            raise ValueError("XIRR_MAX_ITERATIONS must be > 0")
        return n

    @field_validator("BASE_CURRENCY", "DISPLAY_CURRENCY", mode="before")
    @classmethod
    def _upper_code(cls, v: Any) -> Any:
        return str(v).strip().upper()


config = AppConfig()
