"""Drill exception definitions.

Generation failures are reported as results, not raised; these cover
caller mistakes (bad options, illegal lifecycle transitions).
"""


class DrillError(Exception):
    """Base exception for drill operations."""

    pass


class DrillConfigError(DrillError, ValueError):
    """Drill options failed validation.

    Attributes:
        errors: Every validation message, in form order.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) if errors else "Invalid drill options")
        self.errors = errors


class DrillStateError(DrillError, RuntimeError):
    """Operation not allowed in the current drill state."""

    pass
