"""Tests for environment-driven settings."""

from exrates.config import Settings


class TestRequiredSymbols:

    def test_default(self, monkeypatch):
        monkeypatch.delenv("TICKER_REQUIRED_SYMBOLS", raising=False)
        conf = Settings(_env_file=None)

        assert conf.required_symbols == ["BTC", "USD", "EUR", "ETH", "LTC", "BCH"]

    def test_comma_separated_env(self, monkeypatch):
        monkeypatch.setenv("TICKER_REQUIRED_SYMBOLS", "BTC, USD,,EUR")

        assert Settings(_env_file=None).required_symbols == ["BTC", "USD", "EUR"]

    def test_json_list_env(self, monkeypatch):
        monkeypatch.setenv("TICKER_REQUIRED_SYMBOLS", '["BTC", "USD"]')

        assert Settings(_env_file=None).required_symbols == ["BTC", "USD"]

    def test_empty_env_requires_nothing(self, monkeypatch):
        monkeypatch.setenv("TICKER_REQUIRED_SYMBOLS", "")

        assert Settings(_env_file=None).required_symbols == []

    def test_keyword_list(self):
        conf = Settings(required_symbols=["ETH"])

        assert conf.required_symbols == ["ETH"]


class TestDerivedSettings:

    def test_cmc_endpoint(self):
        conf = Settings(cmc_env="sandbox")

        assert conf.cmc_endpoint == (
            "https://sandbox-api.coinmarketcap.com/v1/cryptocurrency/listings/latest"
        )

    def test_s3_requires_region_and_bucket(self):
        assert not Settings(aws_s3_region="us-east-1", aws_s3_bucket="").s3_configured
        assert Settings(aws_s3_region="us-east-1", aws_s3_bucket="b").s3_configured
