from pydantic_settings import BaseSettings, SettingsConfigDict

from src.pm_common.enums import FundingEstimateMethod


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # App
    APP_NAME: str = "Perp Simulation Engine"

    # L2 depth
    L2_DEPTH: int = 10
    VAMM_L2_NUM_ORDERS: int = 10
    # Quote amounts (QUOTE_PRECISION) for the fine-grained vAMM levels near the top of book
    VAMM_TOP_OF_BOOK_QUOTE_AMOUNTS: list[int] = [
        10_000_000,
        100_000_000,
        1_000_000_000,
        10_000_000_000,
    ]

    # Trade preview
    ALLOW_PARTIAL_FILLS: bool = False  # True returns partial fills instead of raising
    TAKER_FEE_BPS: int = 10

    # Funding
    FUNDING_ESTIMATE_METHOD: FundingEstimateMethod = FundingEstimateMethod.INTERPOLATED


settings = Settings()
