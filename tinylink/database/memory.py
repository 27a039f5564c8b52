"""In-memory link store.

Each operation completes without awaiting inside its critical section, so
under a single asyncio event loop every operation is atomic with respect to
the others. Not shared between processes.
"""

import itertools
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ..errors import DuplicateCodeError
from .base import LinkStoreBase
from .models import Link


class MemoryLinkStore(LinkStoreBase):
    """Dictionary-backed link store."""
    
    name = "memory"
    
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._links: Dict[str, Link] = {}
        # insertion sequence breaks created_at ties in listings
        self._sequence: Dict[str, int] = {}
        self._counter = itertools.count()
    
    async def insert(self, code: str, destination_url: str, owner_email: str) -> Link:
        self._check_code(code)
        if code in self._links:
            raise DuplicateCodeError(code)
        
        link = Link(
            code=code,
            destination_url=destination_url,
            owner_email=owner_email,
            created_at=datetime.now(timezone.utc),
        )
        self._links[code] = link
        self._sequence[code] = next(self._counter)
        self.logger.debug(f"Inserted link {code} -> {destination_url}")
        return link
    
    async def find_by_code(self, code: str) -> Optional[Link]:
        return self._links.get(code)
    
    async def list_by_owner(self, email: str) -> List[Link]:
        owned = [link for link in self._links.values() if link.owner_email == email]
        owned.sort(key=self._sort_key, reverse=True)
        return owned
    
    async def record_visit(self, code: str) -> Optional[str]:
        link = self._links.get(code)
        if link is None:
            return None
        
        self._links[code] = replace(
            link,
            total_clicks=link.total_clicks + 1,
            last_clicked_at=datetime.now(timezone.utc),
        )
        return link.destination_url
    
    async def delete_by_code(self, code: str) -> bool:
        self._sequence.pop(code, None)
        return self._links.pop(code, None) is not None
    
    async def health_check(self) -> bool:
        return True
    
    async def close(self) -> None:
        self.logger.debug(f"Closing memory store with {len(self._links)} links")
    
    def _sort_key(self, link: Link) -> Tuple[datetime, int]:
        return link.created_at, self._sequence.get(link.code, 0)
