from typing import Any


class InvalidInputError(ValueError):
    """
    Raised when a questionnaire record cannot be calculated.
    `field` is the dotted path of the offending value (e.g. "waste.recycling_percentage").
    """
    def __init__(self, field: str, value: Any, message: str):
        super().__init__(f"{field}: {message} (got {value!r})")
        self.field = field
        self.value = value


class InvalidEnumValue(InvalidInputError):
    """Value outside a closed set (vehicle type, fuel type, diet type...)."""


class InvalidRange(InvalidInputError):
    """Numeric value that is non-finite or outside its allowed interval."""


class ConfigurationError(ValueError):
    """Parameter workbook holds an unknown key or an unusable value."""
