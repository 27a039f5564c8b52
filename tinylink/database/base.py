"""Abstract base class for link store implementations."""

from abc import ABC, abstractmethod
from typing import Optional, List

from ..codes import validate_code
from ..errors import ValidationError
from .models import Link


class LinkStoreBase(ABC):
    """Abstract base class for link persistence.
    
    The store is the single source of truth for code uniqueness: callers
    must never assume a code is free without attempting the insert.
    Implementations make ``insert`` and ``record_visit`` each a single
    atomic unit at the storage layer.
    """
    
    name = "base"
    
    async def initialize(self) -> None:
        """Prepare connections and schema. No-op by default."""
    
    @abstractmethod
    async def insert(self, code: str, destination_url: str, owner_email: str) -> Link:
        """Create a new link.
        
        Args:
            code: The short code to use
            destination_url: The destination URL
            owner_email: Owner email address
            
        Returns:
            The created link (zero clicks, never clicked)
            
        Raises:
            DuplicateCodeError: If the code already exists (nothing is written)
            ValidationError: If the code breaks the lexical contract
            StorageUnavailableError: If the backend cannot be reached
        """
    
    @abstractmethod
    async def find_by_code(self, code: str) -> Optional[Link]:
        """Get a link by its code, or None."""
    
    @abstractmethod
    async def list_by_owner(self, email: str) -> List[Link]:
        """List links owned by an email, newest first."""
    
    @abstractmethod
    async def record_visit(self, code: str) -> Optional[str]:
        """Count a visit and return the destination in one atomic step.
        
        Increments ``total_clicks`` by one and sets ``last_clicked_at`` to
        the current time.
        
        Args:
            code: The short code visited
            
        Returns:
            The destination URL, or None if the code does not exist
        """
    
    @abstractmethod
    async def delete_by_code(self, code: str) -> bool:
        """Delete a link.
        
        Returns:
            True if a record was removed, False if none existed
        """
    
    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
    
    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
    
    @staticmethod
    def _check_code(code: str) -> None:
        """Reject malformed codes before they reach the backend."""
        if not validate_code(code):
            raise ValidationError(f"Invalid short code: {code!r}")
