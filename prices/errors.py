"""
Exception hierarchy for the price import/export pipeline.

Errors fall into three groups, which the HTTP layer maps to status codes:

* InputError - the uploaded data is bad (client fault, 400)
* PersistenceError - the database failed (server fault, 500)
* ResourceError - temporary storage could not be used (server fault, 500)
"""


class PricesError(Exception):
    """Base exception for all price pipeline errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(PricesError):
    """The uploaded archive or one of its rows is invalid."""


class NoTextEntry(InputError):
    """The archive contains no CSV file."""


class CorruptArchive(InputError):
    """The archive or its CSV entry can't be read."""


class MissingHeader(InputError):
    """The CSV file is empty, not even a header row."""


class MalformedRow(InputError):
    """A row has the wrong number of fields."""

    def __init__(self, expected: int, actual: int, line: int):
        super().__init__(
            f"Invalid record length on line {line}: {actual}, expected {expected}"
        )
        self.expected = expected
        self.actual = actual
        self.line = line


class InvalidId(InputError):
    pass


class InvalidPrice(InputError):
    pass


class InvalidDate(InputError):
    pass


class EmptyField(InputError):
    pass


class FieldTooLong(InputError):
    pass


class PersistenceError(PricesError):
    """Database operation failed; the transaction was rolled back."""


class ResourceError(PricesError):
    """Temporary storage could not be allocated or written."""
