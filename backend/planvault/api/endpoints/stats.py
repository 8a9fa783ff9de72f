from typing import List

from fastapi import APIRouter, Depends

from planvault.api.deps import get_current_user_id, get_storage
from planvault.schemas.event import CategoryCount
from planvault.storage import Storage

router = APIRouter()


@router.get("/categories", response_model=List[CategoryCount])
def category_stats(user_id: str = Depends(get_current_user_id), storage: Storage = Depends(get_storage)):
    """Event count per category; categories without events are left out."""
    counts = storage.count_by_category(user_id)
    return [CategoryCount(category=category, count=count) for category, count in sorted(counts.items())]
