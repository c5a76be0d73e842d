"""markupui exceptions

Every error raised while compiling a template derives from MarkupUIError.
"""

from __future__ import annotations

from pathlib import Path


class MarkupUIError(Exception):
    """Base exception for all markupui errors."""

    pass


class MarkupSyntaxError(MarkupUIError):
    """Raised when the markup itself is malformed."""

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)


class ScriptSyntaxError(MarkupUIError):
    """Raised when a script block line matches no declaration grammar."""

    def __init__(
        self, line: str | None, line_number: int | None = None, reason: str = ""
    ):
        self.line = line
        self.line_number = line_number
        self.reason = reason or "Invalid script declaration"
        location = f" on line {line_number}" if line_number is not None else ""
        detail = f": {line.strip()!r}" if line is not None else ""
        super().__init__(f"{self.reason}{location}{detail}")


class UnterminatedLiteralError(ScriptSyntaxError):
    """Raised when a quoted literal in the script block is never closed."""

    def __init__(self, line: str, line_number: int | None = None):
        super().__init__(line, line_number, "Unterminated quoted literal")


class InvalidVariableNameError(ScriptSyntaxError):
    """Raised when a variable name is not a plain identifier."""

    def __init__(
        self, name: str, line: str | None = None, line_number: int | None = None
    ):
        self.name = name
        super().__init__(line, line_number, f"Invalid variable name {name!r}")


class UnsupportedTagError(MarkupUIError):
    """Raised when a tag has no valid component mapping."""

    def __init__(self, tag: str, reason: str = ""):
        self.tag = tag
        suffix = f" ({reason})" if reason else ""
        super().__init__(f"Unsupported tag: <{tag}>{suffix}")


class UnsupportedStylePropertyError(MarkupUIError):
    """Raised when a style declaration uses a property outside the supported set."""

    def __init__(self, property_name: str):
        self.property_name = property_name
        super().__init__(f"Unsupported style property: {property_name}")


class InvalidStyleValueError(MarkupUIError, ValueError):
    """Raised when a supported style property carries an unparseable value."""

    def __init__(self, property_name: str, value: str, reason: str = ""):
        self.property_name = property_name
        self.value = value
        suffix = f": {reason}" if reason else ""
        super().__init__(f"Invalid value for {property_name}: {value!r}{suffix}")


class InvalidStyleSizeError(InvalidStyleValueError):
    """Raised by the size converter for a length it cannot express.

    The style parser drops such declarations instead of failing the document.
    """

    def __init__(self, property_name: str, value: str):
        super().__init__(property_name, value, "expected a size")


class ReservedIdError(MarkupUIError, ValueError):
    """Raised when an element uses the id reserved for the root container."""

    def __init__(self, component_id: str):
        self.component_id = component_id
        super().__init__(
            f"Id {component_id!r} is reserved for the root container"
        )


class NotFoundError(MarkupUIError, FileNotFoundError):
    """Raised when a template or watch target does not exist."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        super().__init__(f"File does not exist: {path}")

    def __str__(self) -> str:
        return f"File does not exist: {self.path}"


# Names used by callers that think in terms of quotes and CSS.
UnclosedQuoteError = UnterminatedLiteralError
UnsupportedCSSPropertyError = UnsupportedStylePropertyError
