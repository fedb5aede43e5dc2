from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.dependencies import get_components, get_current_user_id
from src.models import CategoryRequest, CategoryView
from src.orchestrator import LedgerComponents


categories_router = APIRouter(prefix="/categories", tags=["categories"])


@categories_router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryRequest,
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    category = await components.categories.create(
        user_id, body.name, body.type, body.icon, body.description
    )
    return {"id": category.id}


@categories_router.get("", response_model=list[CategoryView])
async def list_categories(
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    categories = await components.categories.list_categories(user_id)
    return [CategoryView.from_entity(category) for category in categories]


@categories_router.put("/{category_id}", response_model=CategoryView)
async def update_category(
    category_id: UUID,
    body: CategoryRequest,
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    category = await components.categories.update(
        str(category_id), user_id, body.name, body.type, body.icon, body.description
    )
    return CategoryView.from_entity(category)


@categories_router.delete("/{category_id}")
async def delete_category(
    category_id: UUID,
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    unlinked = await components.categories.delete(str(category_id), user_id)
    return {"message": "Category deleted", "unlinkedTransactions": unlinked}
