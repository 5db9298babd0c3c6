from config.settings import Settings
from src.pm_common.enums import FundingEstimateMethod


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings()
        assert s.L2_DEPTH == 10
        assert s.VAMM_L2_NUM_ORDERS == 10
        assert len(s.VAMM_TOP_OF_BOOK_QUOTE_AMOUNTS) < s.VAMM_L2_NUM_ORDERS
        assert s.ALLOW_PARTIAL_FILLS is False
        assert s.FUNDING_ESTIMATE_METHOD == FundingEstimateMethod.INTERPOLATED

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("TAKER_FEE_BPS", "5")
        monkeypatch.setenv("FUNDING_ESTIMATE_METHOD", "CAPPED")
        monkeypatch.setenv("VAMM_TOP_OF_BOOK_QUOTE_AMOUNTS", "[1000000, 2000000]")
        s = Settings()
        assert s.TAKER_FEE_BPS == 5
        assert s.FUNDING_ESTIMATE_METHOD == FundingEstimateMethod.CAPPED
        assert s.VAMM_TOP_OF_BOOK_QUOTE_AMOUNTS == [1_000_000, 2_000_000]
