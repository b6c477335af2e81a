"""Exceptions raised while resolving and synthesizing design units."""


class DesignError(Exception):
    """Base class for errors that make a unit's generation fail."""


class UnitNotFoundError(DesignError):
    """A unit references another unit that is not in the registry."""

    def __init__(self, kind: str, name: str, referenced_by: str = None):
        self.kind = kind
        self.name = name
        self.referenced_by = referenced_by
        where = f" (referenced by '{referenced_by}')" if referenced_by else ""
        super().__init__(f"{kind} '{name}' not found{where}.")


class MissingDeclarationError(DesignError):
    """The primary declaration of a unit cannot be located in its source tree."""

    def __init__(self, unit_name: str, declaration: str):
        self.unit_name = unit_name
        self.declaration = declaration
        super().__init__(f"Could not find {declaration} in {unit_name}.")


class DuplicateUnitError(DesignError):
    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} with name '{name}' is declared more than once.")


class GenerationSkipped(Exception):
    """Raised by a generator when a soft precondition is not met."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
