"""Errors raised or reported by the promotion engine."""


class PromotionError(Exception):
    """Base class for promotion engine errors."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class LoadFailure(PromotionError):
    """The promotion source was unreachable or returned malformed data.

    Never raised out of PromotionEngine.load_promotions(); it travels inside
    a LoadFailed result while the previous snapshot stays in place.
    """

    def __init__(self, detail: str, source: str = "unknown"):
        self.source = source
        super().__init__(detail)


class MalformedInputError(PromotionError, ValueError):
    """Caller passed data that breaks the engine's input contract."""
    pass
