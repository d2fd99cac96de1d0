"""
Error types for plan generation.

Input and catalog errors are raised before any write and carry a message
fit to show the user verbatim. PrescriptionTableError signals a defect in
the static tables, not a user mistake.
"""


class PlannerError(Exception):
    """Base exception for sbd-planner errors."""

    pass


class PlanInputError(PlannerError, ValueError):
    """Raised when generation inputs are invalid (bad days, 1RMs, tags)."""

    pass


class CatalogIntegrityError(PlannerError):
    """
    Raised when required exercises are missing from the catalog.

    Attributes:
        missing: Every (name, base_lift) pair that has no catalog identity
    """

    def __init__(self, missing: list[tuple[str, str]]) -> None:
        self.missing = sorted(set(missing))
        listed = ", ".join(f"{name} ({lift})" for name, lift in self.missing)
        super().__init__(
            f"Exercise catalog is missing {len(self.missing)} required "
            f"exercise(s): {listed}. Seed them before generating a plan."
        )


class PrescriptionTableError(PlannerError, LookupError):
    """Raised when a static prescription row is absent for (block, week, lift)."""

    pass


class PlanGenerationError(PlannerError):
    """
    Raised when the write phase of a generation run fails.

    Attributes:
        cause: Original exception that aborted the run
    """

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Plan generation failed: {cause}")


class StoreError(PlannerError):
    """Raised when the record store is corrupt or a record is malformed."""

    pass
