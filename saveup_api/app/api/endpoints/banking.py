"""
Banking endpoints: linked bank accounts, bill splitting and scheduled
payments.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status

from ...core.auth_deps import get_current_principal, require_path_user
from ...schemas.actions import BillSplitJoin
from ...schemas.auth import Principal
from ...schemas.resources import (
    BankAccountCreate,
    BankAccountRead,
    BillSplitCreate,
    BillSplitMemberRead,
    BillSplitRead,
    ScheduledPaymentCreate,
    ScheduledPaymentRead,
)
from ...services import FinanceService, ResourceService
from ..deps import body_fields, get_finance_service, get_resource_service

router = APIRouter()


@router.get("/users/{user_id}/bank-accounts", response_model=List[BankAccountRead])
async def list_bank_accounts(
    owner_id: int = Depends(require_path_user),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_owner("bank_accounts", owner_id)


@router.post("/bank-accounts", status_code=status.HTTP_201_CREATED, response_model=BankAccountRead)
async def create_bank_account(
    body: Optional[BankAccountCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.create_owned("bank_accounts", body_fields(body), principal.user_id)


@router.post("/bill-splits", status_code=status.HTTP_201_CREATED, response_model=BillSplitRead)
async def create_bill_split(
    body: Optional[BillSplitCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: FinanceService = Depends(get_finance_service),
) -> Dict[str, Any]:
    return await service.create_bill_split(body_fields(body), principal.user_id)


@router.get("/users/{user_id}/bill-splits", response_model=List[BillSplitRead])
async def list_bill_splits(
    owner_id: int = Depends(require_path_user),
    service: FinanceService = Depends(get_finance_service),
) -> List[Dict[str, Any]]:
    """Bill splits the user created or joined."""
    return await service.list_user_bill_splits(owner_id)


@router.post("/bill-splits/{bill_id}/join", status_code=status.HTTP_201_CREATED, response_model=BillSplitMemberRead)
async def join_bill_split(
    bill_id: int,
    body: Optional[BillSplitJoin] = None,
    principal: Principal = Depends(get_current_principal),
    service: FinanceService = Depends(get_finance_service),
) -> Dict[str, Any]:
    body = body or BillSplitJoin()
    return await service.join_bill_split(bill_id, principal.user_id, body.shareAmount)


@router.get("/users/{user_id}/scheduled-payments", response_model=List[ScheduledPaymentRead])
async def list_scheduled_payments(
    owner_id: int = Depends(require_path_user),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_owner("scheduled_payments", owner_id)


@router.post("/scheduled-payments", status_code=status.HTTP_201_CREATED, response_model=ScheduledPaymentRead)
async def create_scheduled_payment(
    body: Optional[ScheduledPaymentCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.create_owned("scheduled_payments", body_fields(body), principal.user_id)
