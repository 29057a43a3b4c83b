"""Schedule expression normalization."""

from .english import str_cron_syntax


def is_english(expression: str) -> bool:
    """True if the expression contains any ASCII letter.

    Classification is purely lexical: a cron string carrying a stray letter
    (a month or day name, a comment) is treated as English.
    """
    return any(c.isascii() and c.isalpha() for c in expression)


def parse_expression(expression: str) -> str:
    """
    Parses a schedule expression, handling both cron syntax and English.

    Args:
        expression: The expression to parse (cron syntax or English).

    Returns:
        Canonical cron syntax. Cron input is returned unchanged apart from
        surrounding whitespace.

    Raises:
        UntranslatableExpressionError: If English input matches no rule.

    Examples:
        >>> parse_expression("0/5 * * * * ? *")
        '0/5 * * * * ? *'
        >>> parse_expression("every 5 seconds")
        '0/5 * * * * ? *'
    """
    if is_english(expression):
        return str_cron_syntax(expression)
    return expression.strip()
