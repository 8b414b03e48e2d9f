"""Custom exceptions for FleetProTax.

This module provides a hierarchy of exception classes for consistent error
handling around the tax engine. All exceptions inherit from
FleetProTaxError, making it easy to catch all application-specific errors.

The calculation core itself never raises for well-typed input. These
exceptions belong to the boundary: record validation, import of exported
data and backups, configuration, and the entry store.

Example:
    try:
        data = import_from_json(payload)
    except ImportDataError as e:
        for problem in e.errors:
            print(problem)
    except FleetProTaxError as e:
        logger.error("import_failed", error=str(e))
"""

from typing import Any, Optional


class FleetProTaxError(Exception):
    """Base exception for all FleetProTax errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise FleetProTaxError("Something went wrong", details={"code": 500})
        FleetProTaxError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize FleetProTaxError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                user correction or an alternative input. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(FleetProTaxError):
    """Error raised when an entry record fails validation.

    Negative distances or amounts, malformed dates and out-of-range months
    are rejected at the boundary, before anything reaches the calculator.

    Attributes:
        field: The field that failed validation.
        value: The invalid value.
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Distance must not be negative",
        ...     field="distance_km",
        ...     value="-5",
        ...     constraint=">= 0",
        ... )
        ValidationError: Distance must not be negative
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class ImportDataError(FleetProTaxError):
    """Error raised when an export or backup payload cannot be imported.

    Malformed payloads are reported as a whole; partially parsed data never
    reaches the calculation core.

    Attributes:
        source: Name of the file or payload being imported (if known).
        errors: Every problem found in the payload.

    Example:
        >>> raise ImportDataError(
        ...     "Backup is not valid",
        ...     source="FleetProTax-Backup-2025-03-01-10-00.json",
        ...     errors=["Missing required field: trips"],
        ... )
        ImportDataError: Backup is not valid
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        errors: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ImportDataError.

        Args:
            message: Human-readable error description.
            source: The file name or identifier of the payload.
            errors: List of individual problems found.
            details: Optional dictionary with additional context.
            recoverable: Whether another payload could be imported instead.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.source = source
        self.errors = list(errors or [])

        if source:
            self.details["source"] = source
        if self.errors:
            self.details["errors"] = self.errors


class ConfigurationError(FleetProTaxError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found.
            details: Optional dictionary with additional context.
            recoverable: Defaults to False since configuration errors
                require a restart with corrected settings.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


class EntryNotFoundError(FleetProTaxError):
    """Error raised when the entry store is asked for an unknown entry.

    Attributes:
        collection: Storage key of the collection that was searched.
        entry_id: The id that was not found.
    """

    def __init__(
        self,
        message: str,
        *,
        collection: Optional[str] = None,
        entry_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.collection = collection
        self.entry_id = entry_id

        if collection:
            self.details["collection"] = collection
        if entry_id:
            self.details["entry_id"] = entry_id


__all__ = [
    "FleetProTaxError",
    "ValidationError",
    "ImportDataError",
    "ConfigurationError",
    "EntryNotFoundError",
]
