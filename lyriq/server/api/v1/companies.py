"""
API endpoints for managing companies.

Companies are the tenants of the contact center; every agent, call, chat,
knowledge entry, workflow and integration belongs to one.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import IntegrityError

from lyriq.core.database.entities.companies import Company
from lyriq.core.database.repositories import CompanyRepository
from lyriq.core.logging_config import get_logger
from lyriq.core.models.io.companies import CompanyCreate, CompanyRead, CompanyUpdate
from lyriq.server.services.deps import SessionDep

logger = get_logger(__name__)

router = APIRouter()


async def _get_company(repo: CompanyRepository, company_id: int) -> Company:
    company = await repo.get_by_id(company_id)
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Company {company_id} not found")
    return company


@router.post(
    "",
    response_model=CompanyRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Company",
    description="Register a new tenant. The slug must be unique.",
    response_description="The created company.",
    responses={409: {"description": "Slug already in use"}},
)
async def create_company(data: CompanyCreate, session: SessionDep) -> CompanyRead:
    """
    Create a company.

    - **name**: Display name.
    - **slug**: Lowercase URL-safe identifier, unique across companies.
    - **description**: Company profile used as background by the chatbot.
    """
    repo = CompanyRepository(session)
    if await repo.get_by_slug(data.slug):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Slug '{data.slug}' is already in use")
    company = await repo.create(Company(**data.model_dump()))
    logger.info(f"Created company {company.id} ({company.slug})")
    return CompanyRead.model_validate(company)


@router.get(
    "",
    response_model=List[CompanyRead],
    summary="List Companies",
    response_description="Companies ordered by name.",
)
async def list_companies(session: SessionDep, limit: int = 100, offset: int = 0) -> List[CompanyRead]:
    companies = await CompanyRepository(session).list(limit=limit, offset=offset)
    return [CompanyRead.model_validate(c) for c in companies]


@router.get(
    "/{company_id}",
    response_model=CompanyRead,
    summary="Get Company",
    responses={404: {"description": "Company not found"}},
)
async def get_company(company_id: int, session: SessionDep) -> CompanyRead:
    return CompanyRead.model_validate(await _get_company(CompanyRepository(session), company_id))


@router.patch(
    "/{company_id}",
    response_model=CompanyRead,
    summary="Update Company",
    description="Update the provided fields of a company. The slug cannot be changed.",
    responses={404: {"description": "Company not found"}},
)
async def update_company(company_id: int, data: CompanyUpdate, session: SessionDep) -> CompanyRead:
    repo = CompanyRepository(session)
    company = await _get_company(repo, company_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(company, key, value)
    company = await repo.update(company)
    return CompanyRead.model_validate(company)


@router.delete(
    "/{company_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Company",
    description="Delete a company that no longer owns any records.",
    responses={404: {"description": "Company not found"}, 409: {"description": "Company still owns records"}},
)
async def delete_company(company_id: int, session: SessionDep) -> None:
    repo = CompanyRepository(session)
    await _get_company(repo, company_id)
    try:
        await repo.delete(company_id)
    except IntegrityError:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Company {company_id} still owns records and cannot be deleted",
        )
    logger.info(f"Deleted company {company_id}")
