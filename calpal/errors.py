from __future__ import annotations


class ParseError(Exception):
    """A raw date string could not be turned into a fixture timestamp.

    Terminal for the fixture it belongs to: callers drop the fixture and
    report it, they never substitute a guessed date.
    """

    kind = "parse_error"

    def __init__(self, raw_text: str, reason: str = "") -> None:
        self.raw_text = raw_text
        self.reason = reason
        msg = f"{raw_text!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class UnrecognizedFormat(ParseError):
    kind = "unrecognized_format"


class OutOfRangeComponent(ParseError):
    kind = "out_of_range_component"


class UnknownTimezoneError(ValueError):
    kind = "unknown_timezone"

    def __init__(self, convention: str) -> None:
        self.convention = convention
        super().__init__(f"unknown timezone convention: {convention!r}")
