"""
Risk Priority Number scoring for FMEA entries.

RPN = severity x occurrence x detection, each rated on a 1-10 scale.
"""

RATING_MIN = 1
RATING_MAX = 10

# Entries at or above this score are reported as high risk
HIGH_RISK_RPN = 200


class RPNMismatchError(ValueError):
    """A client-supplied RPN disagrees with the ratings."""

    def __init__(self, supplied: int, expected: int):
        super().__init__(
            f"RPN {supplied} does not match severity x occurrence x detection ({expected})"
        )
        self.supplied = supplied
        self.expected = expected


def _check_rating(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer")
    if not RATING_MIN <= value <= RATING_MAX:
        raise ValueError(f"{name} must be between {RATING_MIN} and {RATING_MAX}")


def compute_rpn(severity: int, occurrence: int, detection: int) -> int:
    """
    Compute the Risk Priority Number.

    Raises:
        ValueError: If any rating is not an integer in [1, 10]
    """
    _check_rating("severity", severity)
    _check_rating("occurrence", occurrence)
    _check_rating("detection", detection)
    return severity * occurrence * detection


def verify_rpn(
    severity: int,
    occurrence: int,
    detection: int,
    supplied: int | None = None,
) -> int:
    """
    Compute the RPN and check it against a supplied value.

    Returns:
        The computed RPN

    Raises:
        RPNMismatchError: If ``supplied`` is given and differs
    """
    expected = compute_rpn(severity, occurrence, detection)
    if supplied is not None and supplied != expected:
        raise RPNMismatchError(supplied, expected)
    return expected


def is_high_risk(rpn: int) -> bool:
    return rpn >= HIGH_RISK_RPN
