"""Business logic services for TinyLink."""

import logging
from typing import Optional, Dict, List

from .codes import CodeGenerator
from .common.validators import is_valid_url, is_valid_email, is_valid_short_code
from .database.base import LinkStoreBase
from .database.models import Link
from .errors import (
    AllocationExhaustedError,
    ConflictError,
    DuplicateCodeError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)


DEFAULT_MAX_ATTEMPTS = 5


class AllocationService:
    """Create links, resolving code collisions.

    Explicit codes are inserted once and a taken code is a conflict.
    Generated codes are retried with fresh candidates up to ``max_attempts``
    inserts, after which allocation fails with AllocationExhaustedError.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        generator: Optional[CodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.generator = generator or CodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_attempts = max_attempts

    async def allocate(
        self,
        destination_url: str,
        owner_email: str,
        requested_code: Optional[str] = None,
    ) -> Link:
        """Create a new link.

        Args:
            destination_url: Absolute http(s) URL to redirect to
            owner_email: Owner email address
            requested_code: Optional caller-chosen short code

        Returns:
            The created link

        Raises:
            ValidationError: If the URL, email or requested code is malformed
            ConflictError: If the requested code is already taken
            AllocationExhaustedError: If every generated candidate collided
        """
        is_valid, error = is_valid_url(destination_url)
        if not is_valid:
            raise ValidationError(f"Invalid URL: {error}")

        is_valid, error = is_valid_email(owner_email)
        if not is_valid:
            raise ValidationError(f"Invalid email: {error}")

        if requested_code not in (None, ""):
            return await self._allocate_requested(requested_code, destination_url, owner_email)
        return await self._allocate_generated(destination_url, owner_email)

    async def _allocate_requested(self, code: str, destination_url: str, owner_email: str) -> Link:
        is_valid, error = is_valid_short_code(code)
        if not is_valid:
            raise ValidationError(f"Invalid short code: {error}")

        try:
            link = await self.store.insert(code, destination_url, owner_email)
        except DuplicateCodeError:
            self.logger.info(f"Requested short code already taken: {code}")
            raise ConflictError(code) from None

        self.logger.info(f"Created link: {code} -> {destination_url}")
        return link

    async def _allocate_generated(self, destination_url: str, owner_email: str) -> Link:
        for attempt in range(1, self.max_attempts + 1):
            code = self.generator.generate()
            try:
                link = await self.store.insert(code, destination_url, owner_email)
            except DuplicateCodeError:
                self.logger.debug(f"Generated code collided (attempt {attempt}): {code}")
                continue

            self.logger.info(f"Created link: {code} -> {destination_url}")
            return link

        self.logger.warning(
            f"Short code allocation exhausted after {self.max_attempts} attempts"
        )
        raise AllocationExhaustedError(self.max_attempts)


class ResolutionService:
    """Resolve codes to destinations, counting each visit."""

    def __init__(self, store: LinkStoreBase, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    async def resolve(self, code: str) -> str:
        """Get the destination for a code and record the visit.

        The lookup and the counter update are one store operation.

        Raises:
            NotFoundError: If the code does not exist
        """
        destination = await self.store.record_visit(code)
        if destination is None:
            self.logger.debug(f"Short code not found: {code}")
            raise NotFoundError(code)

        self.logger.debug(f"Resolved {code} -> {destination}")
        return destination


class LinkService:
    """Service layer used by the HTTP API and the CLI."""

    def __init__(
        self,
        store: LinkStoreBase,
        generator: Optional[CodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_allocation_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """Initialize link service.

        Args:
            store: Link store instance
            generator: Optional short code generator
            logger: Optional logger
            max_allocation_attempts: Insert attempts for generated codes
        """
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.allocation = AllocationService(
            store,
            generator=generator,
            logger=self.logger,
            max_attempts=max_allocation_attempts,
        )
        self.resolution = ResolutionService(store, logger=self.logger)

    async def create_link(
        self,
        destination_url: str,
        owner_email: str,
        code: Optional[str] = None,
    ) -> Link:
        """Create a link, generating a code when none is given."""
        return await self.allocation.allocate(destination_url, owner_email, requested_code=code)

    async def resolve(self, code: str) -> str:
        """Resolve a code for redirect, counting the visit."""
        return await self.resolution.resolve(code)

    async def get_link(self, code: str) -> Link:
        """Get a link without counting a visit.

        Raises:
            NotFoundError: If the code does not exist
        """
        link = await self.store.find_by_code(code)
        if link is None:
            raise NotFoundError(code)
        return link

    async def list_links(self, owner_email: str) -> List[Link]:
        """List an owner's links, newest first.

        Raises:
            ValidationError: If the email is malformed
        """
        is_valid, error = is_valid_email(owner_email)
        if not is_valid:
            raise ValidationError(f"Invalid email: {error}")
        return await self.store.list_by_owner(owner_email)

    async def delete_link(self, code: str) -> None:
        """Delete a link.

        Raises:
            NotFoundError: If nothing was removed
        """
        if not await self.store.delete_by_code(code):
            raise NotFoundError(code)
        self.logger.info(f"Deleted link: {code}")

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        try:
            db_healthy = await self.store.health_check()
        except StorageUnavailableError:
            db_healthy = False

        return {
            "database": db_healthy,
            "overall": db_healthy,
        }

    async def close(self) -> None:
        """Close store connections."""
        await self.store.close()
