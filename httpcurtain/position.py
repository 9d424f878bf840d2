from __future__ import annotations

import logging
import re
from dataclasses import dataclass

_LOGGER = logging.getLogger(__name__)

# Leading integer, trailing text ignored ("37%" -> 37)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class ParseFailure:
    body: str
    reason: str


def parse_int(body: str) -> int | ParseFailure:
    match = _LEADING_INT.match(body)
    if match is None:
        return ParseFailure(body, "no leading integer")
    return int(match.group(1))


def decode(body: str, rule: re.Pattern[str] | None = None) -> int | ParseFailure:
    """Extract an integer from a response body.

    With a rule, capture group 1 of the first match is parsed. A rule that
    does not match, or captures no integer, is not an error: a warning is
    logged and the whole body is parsed instead. Never raises.
    """
    if rule is not None:
        match = rule.search(body)
        if match is not None and match.re.groups >= 1 and match.group(1) is not None:
            _LOGGER.debug("Value retrieved via regular expression, full match: %s", match.group(0))
            value = parse_int(match.group(1))
            if not isinstance(value, ParseFailure):
                return value
            _LOGGER.warning(
                'Regular expression "%s" captured no integer ("%s"), parsing the whole body',
                rule.pattern,
                match.group(1),
            )
        else:
            _LOGGER.warning(
                'Regular expression "%s" did not match any part of the returned body: "%s"',
                rule.pattern,
                body,
            )
    return parse_int(body)


class PositionTransform:
    """Mirrors positions around 50 when inverted; identity otherwise.

    The same mapping is used on the way in and on the way out, so applying it
    twice always yields the original value. Values are not clamped.
    """

    def __init__(self, inverted: bool = False) -> None:
        self.inverted = inverted

    def _apply(self, value: int) -> int:
        return 100 - value if self.inverted else value

    def to_external(self, value: int) -> int:
        return self._apply(value)

    def to_internal(self, value: int) -> int:
        return self._apply(value)
