class LedgerError(Exception):
    pass


class WalletNotFoundError(LedgerError):
    """Wallet missing or owned by someone else (callers cannot tell which)."""


class UnauthorizedError(LedgerError):
    pass


class VerifiedSenderNotFoundError(LedgerError):
    pass


class ReportNotFoundError(LedgerError):
    pass


class InvalidReportError(LedgerError):
    pass
