"""
Investment endpoints: portfolios, SIP plans, investment transactions
and investment goals.

SIP plans and investments point at a portfolio; creating one requires
the caller to own that portfolio.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status

from ...core.auth_deps import get_current_principal, require_path_user
from ...core.errors import ValidationError
from ...schemas.auth import Principal
from ...schemas.resources import (
    InvestmentCreate,
    InvestmentGoalCreate,
    InvestmentGoalRead,
    InvestmentGoalUpdate,
    InvestmentRead,
    PortfolioCreate,
    PortfolioRead,
    PortfolioUpdate,
    SipPlanCreate,
    SipPlanRead,
    SipPlanUpdate,
)
from ...services import ResourceService
from ..deps import body_fields, get_resource_service, limit_param

router = APIRouter()


async def _check_portfolio(values: Dict[str, Any], principal: Principal, service: ResourceService) -> None:
    portfolio_id = values.get("portfolioId")
    if portfolio_id is None:
        raise ValidationError("Field 'portfolioId' is required")
    await service.get_owned("portfolios", portfolio_id, principal, "Portfolio")


# --- Portfolios ---------------------------------------------------------


@router.post("/portfolios", status_code=status.HTTP_201_CREATED, response_model=PortfolioRead)
async def create_portfolio(
    body: Optional[PortfolioCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.create_owned("portfolios", body_fields(body), principal.user_id)


@router.get("/users/{user_id}/portfolios", response_model=List[PortfolioRead])
async def list_portfolios(
    owner_id: int = Depends(require_path_user),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    """Active portfolios of the user."""
    return await service.list_for_owner("portfolios", owner_id)


@router.get("/portfolios/{portfolio_id}", response_model=PortfolioRead)
async def get_portfolio(
    portfolio_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.get_owned("portfolios", portfolio_id, principal, "Portfolio")


@router.put("/portfolios/{portfolio_id}", response_model=PortfolioRead)
async def update_portfolio(
    portfolio_id: int,
    body: Optional[PortfolioUpdate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.update_owned("portfolios", portfolio_id, body_fields(body), principal, "Portfolio")


@router.get("/portfolios/{portfolio_id}/investments", response_model=List[InvestmentRead])
async def list_portfolio_investments(
    portfolio_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    await service.get_owned("portfolios", portfolio_id, principal, "Portfolio")
    return await service.list_where("investments", {"portfolioId": portfolio_id})


# --- SIP plans ----------------------------------------------------------


@router.post("/sip-plans", status_code=status.HTTP_201_CREATED, response_model=SipPlanRead)
async def create_sip_plan(
    body: Optional[SipPlanCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    values = body_fields(body)
    await _check_portfolio(values, principal, service)
    return await service.create_owned("sip_plans", values, principal.user_id)


@router.get("/users/{user_id}/sip-plans", response_model=List[SipPlanRead])
async def list_sip_plans(
    owner_id: int = Depends(require_path_user),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_owner("sip_plans", owner_id)


@router.put("/sip-plans/{plan_id}", response_model=SipPlanRead)
async def update_sip_plan(
    plan_id: int,
    body: Optional[SipPlanUpdate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    values = body_fields(body)
    if "portfolioId" in values:
        await _check_portfolio(values, principal, service)
    return await service.update_owned("sip_plans", plan_id, values, principal, "SIP plan")


# --- Investments --------------------------------------------------------


@router.post("/investments", status_code=status.HTTP_201_CREATED, response_model=InvestmentRead)
async def create_investment(
    body: Optional[InvestmentCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    values = body_fields(body)
    await _check_portfolio(values, principal, service)
    return await service.create_owned("investments", values, principal.user_id)


@router.get("/users/{user_id}/investments", response_model=List[InvestmentRead])
async def list_investments(
    owner_id: int = Depends(require_path_user),
    limit: int = Depends(limit_param(20)),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_owner("investments", owner_id, limit=limit)


# --- Investment goals ---------------------------------------------------


@router.post("/investment-goals", status_code=status.HTTP_201_CREATED, response_model=InvestmentGoalRead)
async def create_investment_goal(
    body: Optional[InvestmentGoalCreate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.create_owned("investment_goals", body_fields(body), principal.user_id)


@router.get("/users/{user_id}/investment-goals", response_model=List[InvestmentGoalRead])
async def list_investment_goals(
    owner_id: int = Depends(require_path_user),
    service: ResourceService = Depends(get_resource_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_owner("investment_goals", owner_id)


@router.put("/investment-goals/{goal_id}", response_model=InvestmentGoalRead)
async def update_investment_goal(
    goal_id: int,
    body: Optional[InvestmentGoalUpdate] = None,
    principal: Principal = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> Dict[str, Any]:
    return await service.update_owned("investment_goals", goal_id, body_fields(body), principal, "Investment goal")
