"""Parsing of delimited numeric literals from catalog documents."""

import re
from typing import NamedTuple, Tuple

from .exceptions import ValidationError


VALUE_DELIMITER = ", "
MAX_ARITY = 4

_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class NumericValue(NamedTuple):
    """Fixed-length parse result.

    Attributes:
        values: Parsed values padded with zeros up to the requested arity.
        count: Number of accepted values, 0 when any token in range failed.
    """

    values: Tuple[float, ...]
    count: int

    @property
    def vector(self) -> Tuple[float, ...]:
        """Return only the accepted values."""
        return self.values[: self.count]


def _parse_token(token: str):
    stripped = token.strip()
    if not _FLOAT_PATTERN.match(stripped):
        return None
    return float(stripped)


def parse_numeric_value(text: str, max_arity: int = MAX_ARITY) -> NumericValue:
    """Parse a comma-space delimited literal into a float vector.

    All-or-nothing: a single unparsable token within the first
    ``max_arity`` tokens yields a count of 0. Tokens past ``max_arity`` are
    ignored.

    Args:
        text: Raw literal, e.g. ``"0.5, 0.25, 1"``.
        max_arity: Length of the output vector.

    Returns:
        NumericValue: Padded values and the accepted count.

    Raises:
        ValidationError: If max_arity is negative.

    Examples:
        >>> parse_numeric_value("1, 2, 3").count
        3
        >>> parse_numeric_value("1, x, 3").count
        0
    """
    if max_arity < 0:
        raise ValidationError(
            "Numeric arity cannot be negative", details={"max_arity": max_arity}
        )

    output = [0.0] * max_arity
    if not text:
        return NumericValue(tuple(output), 0)

    tokens = [token for token in text.split(VALUE_DELIMITER) if token]
    element_count = min(len(tokens), max_arity)
    success = False
    for index in range(element_count):
        parsed = _parse_token(tokens[index])
        success = parsed is not None
        if not success:
            break
        output[index] = parsed

    return NumericValue(tuple(output), element_count if success else 0)
