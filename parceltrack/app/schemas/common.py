"""
Shared response pieces.
"""

import math
from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Pagination block returned with every list."""
    total: int
    page: int
    limit: int
    pages: int
    
    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit) if limit else 0)
