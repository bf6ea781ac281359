"""
HubSpot Routes
==============
Contacts, companies and deals endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from connectors import CRMConnector, CrmObject

from ..middleware.auth import require_authenticated
from ..models import (
    ApiResponse,
    Company,
    Contact,
    ContactInput,
    CreateCompanyRequest,
    CreateDealRequest,
    Deal,
    UpdateCompanyRequest,
    UpdateDealRequest,
)
from .base import RelayRoute
from .dependencies import get_crm_connector


router = APIRouter(
    prefix="/hubspot",
    tags=["HubSpot"],
    dependencies=[Depends(require_authenticated)],
    route_class=RelayRoute,
)

# HubSpot caps page size at 100
LIMIT_QUERY = Query(100, ge=1, le=100, description="Maximum number of records")


# =============================================================================
# Contacts
# =============================================================================

@router.post(
    "/contacts",
    response_model=ApiResponse[Contact],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create contact",
)
async def create_contact(
    body: ContactInput,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Contact]:
    record = await crm.create_record(CrmObject.CONTACTS, body.model_dump(exclude_none=True))
    return ApiResponse.ok(Contact.model_validate(record), "Contact created successfully")


@router.get(
    "/contacts",
    response_model=ApiResponse[list[Contact]],
    response_model_exclude_none=True,
    summary="List contacts",
)
async def list_contacts(
    limit: int = LIMIT_QUERY,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[list[Contact]]:
    records = await crm.list_records(CrmObject.CONTACTS, limit)
    return ApiResponse.ok([Contact.model_validate(r) for r in records])


@router.get(
    "/contacts/{contact_id}",
    response_model=ApiResponse[Contact],
    response_model_exclude_none=True,
    summary="Get contact",
)
async def get_contact(
    contact_id: str,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Contact]:
    record = await crm.get_record(CrmObject.CONTACTS, contact_id)
    return ApiResponse.ok(Contact.model_validate(record))


@router.patch(
    "/contacts/{contact_id}",
    response_model=ApiResponse[Contact],
    response_model_exclude_none=True,
    summary="Update contact",
)
async def update_contact(
    contact_id: str,
    body: ContactInput,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Contact]:
    record = await crm.update_record(
        CrmObject.CONTACTS, contact_id, body.model_dump(exclude_unset=True)
    )
    return ApiResponse.ok(Contact.model_validate(record), "Contact updated successfully")


@router.delete(
    "/contacts/{contact_id}",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Archive contact",
)
async def delete_contact(
    contact_id: str,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse:
    await crm.archive_record(CrmObject.CONTACTS, contact_id)
    return ApiResponse.ok(message="Contact deleted successfully")


# =============================================================================
# Companies
# =============================================================================

@router.post(
    "/companies",
    response_model=ApiResponse[Company],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create company",
)
async def create_company(
    body: CreateCompanyRequest,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Company]:
    record = await crm.create_record(CrmObject.COMPANIES, body.model_dump(exclude_none=True))
    return ApiResponse.ok(Company.model_validate(record), "Company created successfully")


@router.get(
    "/companies",
    response_model=ApiResponse[list[Company]],
    response_model_exclude_none=True,
    summary="List companies",
)
async def list_companies(
    limit: int = LIMIT_QUERY,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[list[Company]]:
    records = await crm.list_records(CrmObject.COMPANIES, limit)
    return ApiResponse.ok([Company.model_validate(r) for r in records])


@router.get(
    "/companies/{company_id}",
    response_model=ApiResponse[Company],
    response_model_exclude_none=True,
    summary="Get company",
)
async def get_company(
    company_id: str,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Company]:
    record = await crm.get_record(CrmObject.COMPANIES, company_id)
    return ApiResponse.ok(Company.model_validate(record))


@router.patch(
    "/companies/{company_id}",
    response_model=ApiResponse[Company],
    response_model_exclude_none=True,
    summary="Update company",
)
async def update_company(
    company_id: str,
    body: UpdateCompanyRequest,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Company]:
    record = await crm.update_record(
        CrmObject.COMPANIES, company_id, body.model_dump(exclude_unset=True)
    )
    return ApiResponse.ok(Company.model_validate(record), "Company updated successfully")


@router.delete(
    "/companies/{company_id}",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Archive company",
)
async def delete_company(
    company_id: str,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse:
    await crm.archive_record(CrmObject.COMPANIES, company_id)
    return ApiResponse.ok(message="Company deleted successfully")


# =============================================================================
# Deals
# =============================================================================

@router.post(
    "/deals",
    response_model=ApiResponse[Deal],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create deal",
)
async def create_deal(
    body: CreateDealRequest,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Deal]:
    record = await crm.create_record(CrmObject.DEALS, body.model_dump(exclude_none=True))
    return ApiResponse.ok(Deal.model_validate(record), "Deal created successfully")


@router.get(
    "/deals",
    response_model=ApiResponse[list[Deal]],
    response_model_exclude_none=True,
    summary="List deals",
)
async def list_deals(
    limit: int = LIMIT_QUERY,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[list[Deal]]:
    records = await crm.list_records(CrmObject.DEALS, limit)
    return ApiResponse.ok([Deal.model_validate(r) for r in records])


@router.get(
    "/deals/{deal_id}",
    response_model=ApiResponse[Deal],
    response_model_exclude_none=True,
    summary="Get deal",
)
async def get_deal(
    deal_id: str,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Deal]:
    record = await crm.get_record(CrmObject.DEALS, deal_id)
    return ApiResponse.ok(Deal.model_validate(record))


@router.patch(
    "/deals/{deal_id}",
    response_model=ApiResponse[Deal],
    response_model_exclude_none=True,
    summary="Update deal",
)
async def update_deal(
    deal_id: str,
    body: UpdateDealRequest,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse[Deal]:
    record = await crm.update_record(
        CrmObject.DEALS, deal_id, body.model_dump(exclude_unset=True)
    )
    return ApiResponse.ok(Deal.model_validate(record), "Deal updated successfully")


@router.delete(
    "/deals/{deal_id}",
    response_model=ApiResponse,
    response_model_exclude_none=True,
    summary="Archive deal",
)
async def delete_deal(
    deal_id: str,
    crm: CRMConnector = Depends(get_crm_connector),
) -> ApiResponse:
    await crm.archive_record(CrmObject.DEALS, deal_id)
    return ApiResponse.ok(message="Deal deleted successfully")
