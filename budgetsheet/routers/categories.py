from typing import List

from fastapi import APIRouter, Depends, Path, Response

from budgetsheet.models.category import Category, CategoryIn, CategoryUpdateIn
from budgetsheet.routers.deps import get_registry
from budgetsheet.services.categories import CategoryRegistry

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[Category], summary="Built-in and custom categories")
def list_categories(registry: CategoryRegistry = Depends(get_registry)):
    return registry.list_all()


@router.get(
    "/{category_id}",
    response_model=Category,
    summary="Get a category (unknown ids resolve to 'other')",
)
def get_category(
    category_id: str = Path(..., min_length=1),
    registry: CategoryRegistry = Depends(get_registry),
):
    return registry.get_by_id(category_id)


@router.post(
    "", response_model=Category, status_code=201, summary="Create a custom category"
)
def create_category(
    payload: CategoryIn, registry: CategoryRegistry = Depends(get_registry)
):
    return registry.create(payload)


@router.put("/{category_id}", response_model=Category, summary="Edit a custom category")
def update_category(
    payload: CategoryUpdateIn,
    category_id: str = Path(..., min_length=1),
    registry: CategoryRegistry = Depends(get_registry),
):
    return registry.update(category_id, payload)


@router.delete("/{category_id}", status_code=204, summary="Delete a custom category")
def delete_category(
    category_id: str = Path(..., min_length=1),
    registry: CategoryRegistry = Depends(get_registry),
):
    registry.delete(category_id)
    return Response(status_code=204)
