"""
Transaction routes.

Singular /transaction/{id} addresses one transaction; plural
/transactions lists and summarizes.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.dependencies import get_components, get_current_user_id
from src.models import SummaryGroup, TransactionRequest, TransactionType, TransactionView
from src.orchestrator import LedgerComponents


transactions_router = APIRouter(tags=["transactions"])


@transactions_router.post(
    "/new-transaction/{transaction_type}",
    status_code=status.HTTP_201_CREATED,
    response_model=TransactionView,
)
async def create_transaction(
    transaction_type: TransactionType,
    body: TransactionRequest,
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    transaction = await components.transactions.create(
        user_id,
        transaction_type,
        body.description,
        body.amount,
        body.category_id,
    )
    return TransactionView.from_entity(transaction)


@transactions_router.get(
    "/transactions",
    response_model=list[TransactionView],
    response_model_exclude_none=True,
)
async def list_transactions(
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    return await components.transactions.list_transactions(user_id)


@transactions_router.get("/transactions/summary", response_model=list[SummaryGroup])
async def transactions_summary(
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    return await components.transactions.summary(user_id)


@transactions_router.get("/transaction/{transaction_id}", response_model=TransactionView)
async def get_transaction(
    transaction_id: UUID,
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    transaction = await components.transactions.get(str(transaction_id), user_id)
    return TransactionView.from_entity(transaction)


@transactions_router.put("/transaction/{transaction_id}", response_model=TransactionView)
async def update_transaction(
    transaction_id: UUID,
    body: TransactionRequest,
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    transaction = await components.transactions.update(
        str(transaction_id),
        user_id,
        body.description,
        body.amount,
        body.category_id,
    )
    return TransactionView.from_entity(transaction)


@transactions_router.delete("/transaction/{transaction_id}")
async def delete_transaction(
    transaction_id: UUID,
    user_id: str = Depends(get_current_user_id),
    components: LedgerComponents = Depends(get_components),
):
    await components.transactions.delete(str(transaction_id), user_id)
    return {"message": "Transaction deleted"}
