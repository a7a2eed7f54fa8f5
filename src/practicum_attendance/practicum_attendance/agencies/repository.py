from __future__ import annotations

from typing import Optional, Protocol

from .model import Agency


class AgencyRepository(Protocol):
    def get_by_id(self, agency_id: int) -> Optional[Agency]:
        raise NotImplementedError

    def get_for_practicum(self, practicum_id: int) -> Optional[Agency]:
        raise NotImplementedError
