"""Chart of Accounts API endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.dependencies import get_db, get_tenant_id
from app.domain.accounting.enums import AccountType, CsvStrictness, HierarchyLevel
from app.domain.accounting.exceptions import AccountingError
from app.domain.accounting import csv_import, hierarchy_service
from app.schemas.chart_of_accounts import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    CsvImportSummary,
    CsvUploadRequest,
    DetailedGroupCreate,
    DetailedGroupUpdate,
    ElementGroupCreate,
    ElementGroupUpdate,
    GroupResponse,
    MainGroupCreate,
    MainGroupUpdate,
    SubElementGroupCreate,
    SubElementGroupUpdate,
)
from app.api.v1.errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize(level: HierarchyLevel, node) -> BaseModel:
    if level == HierarchyLevel.ACCOUNT:
        return AccountResponse.model_validate(node)
    return GroupResponse.model_validate(node)


def _update_group(db: Session, tenant_id: int, level: HierarchyLevel, node_id: int, data: BaseModel):
    try:
        node = hierarchy_service.update_group(
            db, tenant_id, level, node_id, data.model_dump(exclude_unset=True)
        )
    except AccountingError as e:
        raise http_error(e)
    return GroupResponse.model_validate(node)


# Tree and bulk import

@router.get("/tree")
def get_tree(
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Full nested hierarchy for the tenant."""
    return hierarchy_service.get_tree(db, tenant_id)


@router.post("/csv-upload", response_model=CsvImportSummary)
def upload_accounts(
    request: CsvUploadRequest,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    Import accounts from rows parsed by the client.

    Each row is committed on its own; failures are listed per row.
    """
    result = csv_import.import_account_records(
        db, tenant_id, [row.model_dump() for row in request.accounts]
    )
    return CsvImportSummary(**result.to_dict())


@router.post("/csv-import", response_model=CsvImportSummary)
async def import_accounts_file(
    file: UploadFile = File(...),
    strictness: Optional[CsvStrictness] = Query(None),
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    Import accounts from an uploaded CSV file.

    Required columns: Account Name, Element Group, Sub Element Group,
    Detailed Group. Optional: Description, Opening Balance.
    """
    settings = get_settings()

    filename = file.filename or "accounts.csv"
    if not filename.lower().endswith(".csv") and file.content_type not in ("text/csv", "application/vnd.ms-excel"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Expected a CSV file. Got: {file.content_type}",
        )

    content = await file.read()
    if len(content) > settings.csv_upload_max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {settings.csv_upload_max_bytes} bytes. Got: {len(content)} bytes",
        )

    try:
        result = csv_import.import_accounts_csv(
            db,
            tenant_id,
            csv_import.decode_csv_bytes(content),
            strictness or settings.csv_import_strictness,
        )
    except AccountingError as e:
        raise http_error(e)

    logger.info(f"Imported '{filename}' for tenant {tenant_id}: {result.successful} ok, {result.failed} failed")
    return CsvImportSummary(**result.to_dict())


# Create

@router.post("/main-groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_main_group(
    data: MainGroupCreate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    try:
        node = hierarchy_service.create_main_group(db, tenant_id, **data.model_dump())
    except AccountingError as e:
        raise http_error(e)
    return GroupResponse.model_validate(node)


@router.post("/element-groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_element_group(
    data: ElementGroupCreate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    try:
        node = hierarchy_service.create_element_group(db, tenant_id, **data.model_dump())
    except AccountingError as e:
        raise http_error(e)
    return GroupResponse.model_validate(node)


@router.post("/sub-element-groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_sub_element_group(
    data: SubElementGroupCreate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    try:
        node = hierarchy_service.create_sub_element_group(db, tenant_id, **data.model_dump())
    except AccountingError as e:
        raise http_error(e)
    return GroupResponse.model_validate(node)


@router.post("/detailed-groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_detailed_group(
    data: DetailedGroupCreate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    try:
        node = hierarchy_service.create_detailed_group(db, tenant_id, **data.model_dump())
    except AccountingError as e:
        raise http_error(e)
    return GroupResponse.model_validate(node)


@router.post("/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    data: AccountCreate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Create an account; its code and type are derived from the group path."""
    try:
        account = hierarchy_service.create_account(db, tenant_id, **data.model_dump())
    except AccountingError as e:
        raise http_error(e)
    return AccountResponse.model_validate(account)


# Read

@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(
    account_type: Optional[AccountType] = None,
    detailed_group_id: Optional[int] = None,
    include_system_accounts: bool = False,
    include_inactive: bool = False,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    accounts = hierarchy_service.list_accounts(
        db,
        tenant_id,
        account_type=account_type,
        detailed_group_id=detailed_group_id,
        include_system_accounts=include_system_accounts,
        include_inactive=include_inactive,
    )
    return [AccountResponse.model_validate(account) for account in accounts]


@router.get("/{level}", response_model=List[GroupResponse])
def list_groups(
    level: HierarchyLevel,
    parent_id: Optional[int] = None,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """List one grouping level, optionally restricted to a parent."""
    listers = {
        HierarchyLevel.MAIN_GROUP: lambda: hierarchy_service.list_main_groups(db, tenant_id),
        HierarchyLevel.ELEMENT_GROUP: lambda: hierarchy_service.list_element_groups(db, tenant_id, parent_id),
        HierarchyLevel.SUB_ELEMENT_GROUP: lambda: hierarchy_service.list_sub_element_groups(db, tenant_id, parent_id),
        HierarchyLevel.DETAILED_GROUP: lambda: hierarchy_service.list_detailed_groups(db, tenant_id, parent_id),
    }
    return [GroupResponse.model_validate(node) for node in listers[level]()]


@router.get("/{level}/{node_id}")
def get_node(
    level: HierarchyLevel,
    node_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    try:
        node = hierarchy_service.get_node(db, tenant_id, level, node_id)
    except AccountingError as e:
        raise http_error(e)
    return _serialize(level, node)


# Update

@router.patch("/main-groups/{node_id}", response_model=GroupResponse)
def update_main_group(
    node_id: int,
    data: MainGroupUpdate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    return _update_group(db, tenant_id, HierarchyLevel.MAIN_GROUP, node_id, data)


@router.patch("/element-groups/{node_id}", response_model=GroupResponse)
def update_element_group(
    node_id: int,
    data: ElementGroupUpdate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    return _update_group(db, tenant_id, HierarchyLevel.ELEMENT_GROUP, node_id, data)


@router.patch("/sub-element-groups/{node_id}", response_model=GroupResponse)
def update_sub_element_group(
    node_id: int,
    data: SubElementGroupUpdate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    return _update_group(db, tenant_id, HierarchyLevel.SUB_ELEMENT_GROUP, node_id, data)


@router.patch("/detailed-groups/{node_id}", response_model=GroupResponse)
def update_detailed_group(
    node_id: int,
    data: DetailedGroupUpdate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    return _update_group(db, tenant_id, HierarchyLevel.DETAILED_GROUP, node_id, data)


@router.patch("/accounts/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: int,
    data: AccountUpdate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    try:
        account = hierarchy_service.update_account(
            db, tenant_id, account_id, data.model_dump(exclude_unset=True)
        )
    except AccountingError as e:
        raise http_error(e)
    return AccountResponse.model_validate(account)


# Delete

@router.delete("/{level}/{node_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_node(
    level: HierarchyLevel,
    node_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    Delete a node. Refused while it still has children, and always for
    system accounts.
    """
    try:
        hierarchy_service.delete_node(db, tenant_id, level, node_id)
    except AccountingError as e:
        raise http_error(e)
