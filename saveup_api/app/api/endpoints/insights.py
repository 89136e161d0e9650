"""
Financial insight and education endpoints: budgets, the financial
health snapshot, education modules, learning progress and quizzes.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...core.auth_deps import get_current_principal, require_path_user
from ...schemas.actions import EducationProgressUpdate, QuizAttemptCreate
from ...schemas.auth import Principal
from ...schemas.resources import (
    BudgetCreate,
    BudgetRead,
    BudgetUpdate,
    EducationModuleRead,
    EducationProgressRead,
    FinancialHealthRead,
    FinancialHealthUpdate,
    QuizAttemptRead,
    QuizQuestionRead,
)
from ...services import FinanceService, ResourceService
from ..deps import body_fields, get_finance_service, get_resource_service

router = APIRouter()


# --- Budgets ------------------------------------------------------------


@router.get("/users/{user_id}/budgets", response_model=List[BudgetRead])
async def list_budgets(
    owner_id: int = Depends(require_path_user),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_owner("budgets", owner_id)


@router.post("/budgets", status_code=status.HTTP_201_CREATED, response_model=BudgetRead)
async def create_budget(
    body: Optional[BudgetCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.create_owned("budgets", body_fields(body), principal.user_id)


@router.put("/budgets/{budget_id}", response_model=BudgetRead)
async def update_budget(
    budget_id: int,
    body: Optional[BudgetUpdate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.update_owned("budgets", budget_id, body_fields(body), principal, "Budget")


# --- Financial health ---------------------------------------------------


@router.get("/users/{user_id}/financial-health", response_model=FinancialHealthRead)
async def get_financial_health(
    owner_id: int = Depends(require_path_user),
    service: FinanceService = Depends(get_finance_service),
) -> Dict[str, Any]:
    return await service.get_financial_health(owner_id)


@router.put("/users/{user_id}/financial-health", response_model=FinancialHealthRead)
async def update_financial_health(
    owner_id: int = Depends(require_path_user),
    body: Optional[FinancialHealthUpdate] = None,
    service: FinanceService = Depends(get_finance_service),
) -> Dict[str, Any]:
    """Replace the user's health snapshot with the posted scores."""
    return await service.upsert_financial_health(owner_id, body_fields(body))


# --- Education ----------------------------------------------------------


@router.get("/education/modules", response_model=List[EducationModuleRead])
async def list_education_modules(
    category: Optional[str] = Query(None),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_catalog("education_modules", {"category": category})


@router.get("/users/{user_id}/education/progress", response_model=List[EducationProgressRead])
async def list_education_progress(
    owner_id: int = Depends(require_path_user),
    service: FinanceService = Depends(get_finance_service),
) -> List[Dict[str, Any]]:
    return await service.list_education_progress(owner_id)


@router.put("/users/{user_id}/education/progress", response_model=EducationProgressRead)
async def update_education_progress(
    owner_id: int = Depends(require_path_user),
    body: Optional[EducationProgressUpdate] = None,
    service: FinanceService = Depends(get_finance_service),
) -> Dict[str, Any]:
    body = body or EducationProgressUpdate()
    return await service.update_education_progress(owner_id, body.moduleId, body.progress)


@router.get("/education/modules/{module_id}/quiz", response_model=List[QuizQuestionRead])
async def get_quiz(
    module_id: int,
    principal: Principal = Depends(get_current_principal),
    service: FinanceService = Depends(get_finance_service),
) -> List[Dict[str, Any]]:
    """Quiz questions of a module, without the correct answers."""
    return await service.get_quiz(module_id)


@router.post(
    "/education/modules/{module_id}/quiz-attempts",
    status_code=status.HTTP_201_CREATED,
    response_model=QuizAttemptRead,
)
async def submit_quiz_attempt(
    module_id: int,
    body: Optional[QuizAttemptCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: FinanceService = Depends(get_finance_service),
) -> Dict[str, Any]:
    return await service.submit_quiz_attempt(module_id, principal.user_id, body_fields(body))
