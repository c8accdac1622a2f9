"""Exceptions raised by the address predictors."""


class PredictorError(Exception):
    pass


class MalformedInput(PredictorError, ValueError):
    """Raised when a deployer, hash or salt is not a byte string of the right width."""

    def __init__(self, field: str, expected: int, got):
        self.field = field
        self.expected = expected
        self.got = got
        super().__init__(f"{field} must be {expected} bytes, got {got}")


class CounterOverflow(PredictorError):
    pass


class StaleNonce(PredictorError):
    """Raised when a commit does not match the counter it was predicted from."""
    pass


class RecoveryFailure(PredictorError):
    pass
