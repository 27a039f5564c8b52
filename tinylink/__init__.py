"""TinyLink core: short-code allocation and resolution."""

from .codes import CodeGenerator, validate_code
from .service import AllocationService, ResolutionService, LinkService
from .errors import (
    LinkError,
    ValidationError,
    ConflictError,
    NotFoundError,
    AllocationExhaustedError,
    StorageUnavailableError,
    DuplicateCodeError,
)

__all__ = [
    "CodeGenerator",
    "validate_code",
    "AllocationService",
    "ResolutionService",
    "LinkService",
    "LinkError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "AllocationExhaustedError",
    "StorageUnavailableError",
    "DuplicateCodeError",
]
