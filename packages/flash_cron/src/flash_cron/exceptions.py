class ExpressionError(ValueError):
    """Base class for schedule expressions that cannot be turned into a rule."""

    def __init__(self, message: str, expression: str | None = None):
        super().__init__(message)
        self.expression = expression


class UntranslatableExpressionError(ExpressionError):
    """Raised when an English phrase matches no translation rule."""


class InvalidCronSyntaxError(ExpressionError):
    """Raised when a canonical cron string does not parse."""
