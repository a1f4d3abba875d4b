"""Error taxonomy shared by the ranking and analysis operations.

Only two conditions are reportable: bad input (rejected at the boundary)
and a failed Record Store round trip. "No matches" is never an error.
"""


class InputError(ValueError):
    """Malformed or missing required input. Never retried."""


class StoreUnavailable(RuntimeError):
    """The Record Store could not be read (connectivity, schema, bad data)."""
