"""Chart of Accounts schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.domain.accounting.enums import AccountType


class MainGroupCreate(BaseModel):
    name: str = Field(..., max_length=200)
    code: str = Field(..., max_length=50)
    is_active: bool = True


class MainGroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    code: Optional[str] = Field(default=None, max_length=50)
    is_active: Optional[bool] = None


class ElementGroupCreate(BaseModel):
    name: str = Field(..., max_length=200)
    code: str = Field(..., max_length=50)
    main_group_id: int


class ElementGroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    code: Optional[str] = Field(default=None, max_length=50)
    main_group_id: Optional[int] = None


class SubElementGroupCreate(BaseModel):
    name: str = Field(..., max_length=200)
    code: str = Field(..., max_length=50)
    element_group_id: int


class SubElementGroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    code: Optional[str] = Field(default=None, max_length=50)
    element_group_id: Optional[int] = None


class DetailedGroupCreate(BaseModel):
    name: str = Field(..., max_length=200)
    code: str = Field(..., max_length=50)
    sub_element_group_id: int


class DetailedGroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    code: Optional[str] = Field(default=None, max_length=50)
    sub_element_group_id: Optional[int] = None


class GroupResponse(BaseModel):
    """Shared response for the four grouping levels."""
    id: int
    tenant_id: int
    name: str
    code: str
    is_active: Optional[bool] = None
    main_group_id: Optional[int] = None
    element_group_id: Optional[int] = None
    sub_element_group_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccountCreate(BaseModel):
    """Schema for creating an account; the code and type are derived."""
    detailed_group_id: int
    account_name: str = Field(..., max_length=200)
    description: Optional[str] = None
    opening_balance: Decimal = Decimal("0")
    is_system_account: bool = False
    is_active: bool = True


class AccountUpdate(BaseModel):
    detailed_group_id: Optional[int] = None
    account_name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    opening_balance: Optional[Decimal] = None
    is_active: Optional[bool] = None


class AccountResponse(BaseModel):
    id: int
    tenant_id: int
    detailed_group_id: int
    account_code: str
    account_name: str
    account_type: AccountType
    description: Optional[str] = None
    is_active: bool
    is_system_account: bool
    opening_balance: Decimal
    current_balance: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CsvAccountRow(BaseModel):
    """One pre-parsed CSV row, groups referenced by name."""
    account_name: str
    element_group: str
    sub_element_group: str
    detailed_group: str
    description: Optional[str] = None
    opening_balance: Optional[str] = "0.00"


class CsvUploadRequest(BaseModel):
    accounts: List[CsvAccountRow]


class CsvImportSummary(BaseModel):
    """Outcome of a bulk import."""
    successful: int
    failed: int
    errors: List[str]
