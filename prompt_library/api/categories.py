from typing import List

from fastapi import APIRouter, Depends, Response

from prompt_library import serializers
from prompt_library.api.deps import get_category_registry, get_current_user
from prompt_library.models import User
from prompt_library.schemas import CategoryCreate, CategoryResponse, CategoryUpdate, DataResponse
from prompt_library.services import CategoryRegistry

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=DataResponse[List[CategoryResponse]])
def list_categories(registry: CategoryRegistry = Depends(get_category_registry)):
    """All categories by name, each with its prompt count."""
    return DataResponse(data=[
        serializers.category_response(category, count)
        for category, count in registry.list_categories()
    ])


@router.post("", response_model=DataResponse[CategoryResponse], status_code=201)
def create_category(
    category_data: CategoryCreate,
    registry: CategoryRegistry = Depends(get_category_registry),
    user: User = Depends(get_current_user),
):
    category = registry.create_category(
        category_data.name,
        description=category_data.description,
        color=category_data.color,
        icon=category_data.icon,
    )
    return DataResponse(data=serializers.category_response(category, registry.prompt_count(category.id)))


@router.put("/{category_id}", response_model=DataResponse[CategoryResponse])
def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    registry: CategoryRegistry = Depends(get_category_registry),
    user: User = Depends(get_current_user),
):
    category = registry.update_category(category_id, category_data.model_dump(exclude_unset=True))
    return DataResponse(data=serializers.category_response(category, registry.prompt_count(category.id)))


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    registry: CategoryRegistry = Depends(get_category_registry),
    user: User = Depends(get_current_user),
):
    """Delete an empty category. Categories still holding prompts are refused."""
    registry.delete_category(category_id)
    return Response(status_code=204)
