"""Layout generation errors."""

from typing import Optional


class LayoutEntryError(ValueError):
    """Raised when one spec entry cannot be applied to the instance.

    In lenient mode the generator turns this into a warning and skips the
    entry; in strict mode it ends the call with an error result.
    """

    def __init__(self, message: str, entry_id: Optional[str] = None, kind: Optional[str] = None):
        self.entry_id = entry_id
        self.kind = kind
        super().__init__(message)
