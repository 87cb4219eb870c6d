class CoinGeckoError(Exception):
    pass


class CoinGeckoHttpError(CoinGeckoError):
    """Non-200 response (429 rate limit included)."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code
