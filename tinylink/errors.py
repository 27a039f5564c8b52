"""Exception taxonomy for link allocation and resolution."""


class LinkError(Exception):
    """Base class for all link service errors."""


class ValidationError(LinkError, ValueError):
    """Malformed URL, email or short code supplied by the caller."""


class ConflictError(LinkError):
    """An explicitly requested short code is already taken."""

    def __init__(self, code: str):
        super().__init__(f"Short code '{code}' already exists")
        self.code = code


class NotFoundError(LinkError):
    """No link exists for the given short code."""

    def __init__(self, code: str):
        super().__init__(f"Short code '{code}' not found")
        self.code = code


class AllocationExhaustedError(LinkError):
    """Generated codes kept colliding until the retry budget ran out.

    Transient from the caller's point of view: retrying the whole request
    is safe.
    """

    def __init__(self, attempts: int):
        super().__init__(f"Unable to allocate a unique short code after {attempts} attempts")
        self.attempts = attempts


class StorageUnavailableError(LinkError):
    """The persistence layer could not be reached."""


class DuplicateCodeError(LinkError):
    """Raised by a link store when an insert hits an existing code."""

    def __init__(self, code: str):
        super().__init__(f"Duplicate short code: {code}")
        self.code = code
