from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from prompt_library import serializers
from prompt_library.api.deps import get_catalog
from prompt_library.schemas import DataResponse, PromptResponse, TagResponse
from prompt_library.services import PromptCatalog

router = APIRouter(tags=["search"])


@router.get("/search", response_model=DataResponse[List[PromptResponse]])
def search_prompts(
    q: Optional[str] = None,
    category: Optional[str] = None,
    min_rating: Optional[str] = Query(None, alias="minRating"),
    catalog: PromptCatalog = Depends(get_catalog),
):
    """
    Search prompts by text, best rated first.

    Args:
        q: Case-insensitive text over title, body and category name
        category: Exact category name
        min_rating: Lowest cached rating to include
    """
    prompts = catalog.search_prompts(q=q, category=category, min_rating=min_rating)
    return DataResponse(data=[serializers.prompt_response(p) for p in prompts])


@router.get("/tags", response_model=DataResponse[List[TagResponse]])
def list_tags(catalog: PromptCatalog = Depends(get_catalog)):
    return DataResponse(data=[TagResponse(name=name, usage_count=count) for name, count in catalog.list_tags()])
