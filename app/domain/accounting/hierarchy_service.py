"""Chart of Accounts hierarchy store.

CRUD over the four grouping levels and their leaf accounts. Every function
takes the caller's tenant id explicitly and every query is built through
``tenant_query``, so a node of another tenant behaves exactly like a node
that does not exist.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.db.tenancy import tenant_query, only_tenant_rows
from app.models.accounting import (
    MainGroup,
    ElementGroup,
    SubElementGroup,
    DetailedGroup,
    ChartOfAccount,
)
from app.domain.accounting.enums import AccountType, HierarchyLevel
from app.domain.accounting.exceptions import (
    DuplicateCode,
    HasChildren,
    NotFound,
    ParentNotFound,
    SystemAccountProtected,
    ValidationFailed,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelSpec:
    """How one level of the tree is stored and linked to its neighbours."""
    model: type
    parent_level: HierarchyLevel | None
    parent_field: str | None
    child_level: HierarchyLevel | None


LEVELS: Dict[HierarchyLevel, LevelSpec] = {
    HierarchyLevel.MAIN_GROUP: LevelSpec(
        MainGroup, None, None, HierarchyLevel.ELEMENT_GROUP
    ),
    HierarchyLevel.ELEMENT_GROUP: LevelSpec(
        ElementGroup, HierarchyLevel.MAIN_GROUP, "main_group_id", HierarchyLevel.SUB_ELEMENT_GROUP
    ),
    HierarchyLevel.SUB_ELEMENT_GROUP: LevelSpec(
        SubElementGroup, HierarchyLevel.ELEMENT_GROUP, "element_group_id", HierarchyLevel.DETAILED_GROUP
    ),
    HierarchyLevel.DETAILED_GROUP: LevelSpec(
        DetailedGroup, HierarchyLevel.SUB_ELEMENT_GROUP, "sub_element_group_id", HierarchyLevel.ACCOUNT
    ),
    HierarchyLevel.ACCOUNT: LevelSpec(
        ChartOfAccount, HierarchyLevel.DETAILED_GROUP, "detailed_group_id", None
    ),
}

GROUP_LEVELS = (
    HierarchyLevel.MAIN_GROUP,
    HierarchyLevel.ELEMENT_GROUP,
    HierarchyLevel.SUB_ELEMENT_GROUP,
    HierarchyLevel.DETAILED_GROUP,
)

# Element group name (lower-cased) -> account type of accounts beneath it
ELEMENT_ACCOUNT_TYPES = {
    "asset": AccountType.ASSET,
    "assets": AccountType.ASSET,
    "liability": AccountType.LIABILITY,
    "liabilities": AccountType.LIABILITY,
    "equity": AccountType.EQUITY,
    "income": AccountType.REVENUE,
    "incomes": AccountType.REVENUE,
    "revenue": AccountType.REVENUE,
    "revenues": AccountType.REVENUE,
    "expense": AccountType.EXPENSE,
    "expenses": AccountType.EXPENSE,
}

CENT = Decimal("0.01")
# Numeric(18, 2) holds at most 16 integer digits
MAX_AMOUNT = Decimal("1e16")


def _required_text(value: Any, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationFailed(f"{field} must not be empty", [field])
    return str(value).strip()


def _balance(value: Any, field: str = "opening_balance") -> Decimal:
    try:
        amount = Decimal(str(value if value is not None else "0"))
        if not amount.is_finite():
            raise InvalidOperation
        if abs(amount) >= MAX_AMOUNT:
            raise ValidationFailed(f"{field} is too large", [field])
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationFailed(f"{field} must be a decimal amount", [field])


def _reject_nulls(changes: Dict[str, Any], nullable: frozenset | set = frozenset()) -> None:
    null = sorted(name for name, value in changes.items() if value is None and name not in nullable)
    if null:
        raise ValidationFailed(f"Fields cannot be null: {', '.join(null)}", null)


def account_type_for_element(element_group_name: str) -> AccountType:
    """Derive an account's type from its element group name; defaults to asset."""
    return ELEMENT_ACCOUNT_TYPES.get(element_group_name.strip().lower(), AccountType.ASSET)


# --------------------------------------------------------------------------
# Lookups
# --------------------------------------------------------------------------

def get_node(db: Session, tenant_id: int, level: HierarchyLevel, node_id: int):
    """Fetch one node of ``level`` owned by ``tenant_id`` or raise NotFound."""
    model = LEVELS[level].model
    node = tenant_query(db, model, tenant_id).filter(model.id == node_id).first()
    if not node:
        raise NotFound(level.label, node_id)
    return node


def _require_parent(db: Session, tenant_id: int, level: HierarchyLevel, parent_id: Any):
    parent_level = LEVELS[level].parent_level
    parent_model = LEVELS[parent_level].model
    if parent_id is None:
        raise ValidationFailed(
            f"{LEVELS[level].parent_field} is required", [LEVELS[level].parent_field]
        )
    parent = tenant_query(db, parent_model, tenant_id).filter(parent_model.id == parent_id).first()
    if not parent:
        raise ParentNotFound(parent_level.label, parent_id)
    return parent


def _ensure_unique_code(
    db: Session,
    tenant_id: int,
    level: HierarchyLevel,
    code: str,
    parent_id: int | None,
    exclude_id: int | None = None,
) -> None:
    """Main group codes are unique per tenant; lower levels per parent."""
    level_spec = LEVELS[level]
    query = tenant_query(db, level_spec.model, tenant_id).filter(level_spec.model.code == code)
    if level_spec.parent_field:
        query = query.filter(getattr(level_spec.model, level_spec.parent_field) == parent_id)
    if exclude_id is not None:
        query = query.filter(level_spec.model.id != exclude_id)
    if query.first():
        raise DuplicateCode(level.label, code)


def _count_children(db: Session, tenant_id: int, level: HierarchyLevel, node_id: int) -> int:
    child_level = LEVELS[level].child_level
    if child_level is None:
        return 0
    child = LEVELS[child_level]
    return (
        tenant_query(db, child.model, tenant_id)
        .filter(getattr(child.model, child.parent_field) == node_id)
        .count()
    )


# --------------------------------------------------------------------------
# Create
# --------------------------------------------------------------------------

def _create_group(
    db: Session,
    tenant_id: int,
    level: HierarchyLevel,
    name: str,
    code: str,
    parent_id: int | None = None,
    **extra: Any,
):
    level_spec = LEVELS[level]
    name = _required_text(name, "name")
    code = _required_text(code, "code")

    values = {"tenant_id": tenant_id, "name": name, "code": code, **extra}
    if level_spec.parent_field:
        _require_parent(db, tenant_id, level, parent_id)
        values[level_spec.parent_field] = parent_id

    _ensure_unique_code(db, tenant_id, level, code, parent_id)

    node = level_spec.model(**values)
    db.add(node)
    db.commit()
    db.refresh(node)

    logger.info(f"Created {level.label} {node.id} ({code}) for tenant {tenant_id}")
    return node


def create_main_group(
    db: Session, tenant_id: int, name: str, code: str, is_active: bool = True
) -> MainGroup:
    return _create_group(db, tenant_id, HierarchyLevel.MAIN_GROUP, name, code, is_active=is_active)


def create_element_group(
    db: Session, tenant_id: int, name: str, code: str, main_group_id: int
) -> ElementGroup:
    return _create_group(db, tenant_id, HierarchyLevel.ELEMENT_GROUP, name, code, main_group_id)


def create_sub_element_group(
    db: Session, tenant_id: int, name: str, code: str, element_group_id: int
) -> SubElementGroup:
    return _create_group(db, tenant_id, HierarchyLevel.SUB_ELEMENT_GROUP, name, code, element_group_id)


def create_detailed_group(
    db: Session, tenant_id: int, name: str, code: str, sub_element_group_id: int
) -> DetailedGroup:
    return _create_group(db, tenant_id, HierarchyLevel.DETAILED_GROUP, name, code, sub_element_group_id)


def _group_path(db: Session, tenant_id: int, detailed_group_id: int):
    """Resolve detailed -> sub-element -> element group within the tenant."""
    detailed = _require_parent(db, tenant_id, HierarchyLevel.ACCOUNT, detailed_group_id)
    sub_element = _require_parent(
        db, tenant_id, HierarchyLevel.DETAILED_GROUP, detailed.sub_element_group_id
    )
    element = _require_parent(
        db, tenant_id, HierarchyLevel.SUB_ELEMENT_GROUP, sub_element.element_group_id
    )
    return element, sub_element, detailed


def next_account_code(
    db: Session,
    tenant_id: int,
    element: ElementGroup,
    sub_element: SubElementGroup,
    detailed: DetailedGroup,
) -> str:
    """Next ``<element>.<sub>.<detailed>.<NNN>`` code for accounts of ``detailed``."""
    base = f"{element.code}.{sub_element.code}.{detailed.code}"
    codes = (
        tenant_query(db, ChartOfAccount, tenant_id)
        .with_entities(ChartOfAccount.account_code)
        .filter(ChartOfAccount.detailed_group_id == detailed.id)
        .all()
    )
    highest = 0
    for (code,) in codes:
        prefix, _, suffix = code.rpartition(".")
        if prefix == base and suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{base}.{highest + 1:03d}"


def create_account(
    db: Session,
    tenant_id: int,
    detailed_group_id: int,
    account_name: str,
    description: str | None = None,
    opening_balance: Decimal | str = Decimal("0"),
    is_system_account: bool = False,
    is_active: bool = True,
) -> ChartOfAccount:
    """
    Create a leaf account under a detailed group.

    The account code is generated from the group path and the account type
    is derived from the element group name. ``current_balance`` starts equal
    to ``opening_balance``.

    Raises:
        ValidationFailed: On blank name or non-decimal balance
        ParentNotFound: If the detailed group (or its path) is not in the tenant
    """
    account_name = _required_text(account_name, "account_name")
    opening = _balance(opening_balance)
    element, sub_element, detailed = _group_path(db, tenant_id, detailed_group_id)

    account = ChartOfAccount(
        tenant_id=tenant_id,
        detailed_group_id=detailed.id,
        account_code=next_account_code(db, tenant_id, element, sub_element, detailed),
        account_name=account_name,
        account_type=account_type_for_element(element.name),
        description=description or None,
        is_active=is_active,
        is_system_account=is_system_account,
        opening_balance=opening,
        current_balance=opening,
    )
    db.add(account)
    db.commit()
    db.refresh(account)

    logger.info(
        f"Created account {account.id} ({account.account_code}) "
        f"in detailed group {detailed.id} for tenant {tenant_id}"
    )
    return account


# --------------------------------------------------------------------------
# Update
# --------------------------------------------------------------------------

def update_group(
    db: Session,
    tenant_id: int,
    level: HierarchyLevel,
    node_id: int,
    changes: Dict[str, Any],
):
    """
    Apply a partial update to a group node.

    Only ``name``, ``code``, the parent reference and (for main groups)
    ``is_active`` may change. A new parent is re-validated in the tenant and
    the code is re-checked against its (new) siblings.
    Codes of accounts already beneath the node are left as assigned.
    """
    if level not in GROUP_LEVELS:
        raise ValidationFailed(f"{level.label} is not a group level", ["level"])

    level_spec = LEVELS[level]
    allowed = {"name", "code"}
    if level_spec.parent_field:
        allowed.add(level_spec.parent_field)
    if level == HierarchyLevel.MAIN_GROUP:
        allowed.add("is_active")

    changes = dict(changes)
    _reject_nulls(changes)
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationFailed(f"Cannot update fields: {', '.join(unknown)}", unknown)

    node = get_node(db, tenant_id, level, node_id)

    if "name" in changes:
        changes["name"] = _required_text(changes["name"], "name")
    if "code" in changes:
        changes["code"] = _required_text(changes["code"], "code")

    parent_id = getattr(node, level_spec.parent_field) if level_spec.parent_field else None
    if level_spec.parent_field and level_spec.parent_field in changes:
        parent_id = changes[level_spec.parent_field]
        _require_parent(db, tenant_id, level, parent_id)

    if "code" in changes or (level_spec.parent_field and level_spec.parent_field in changes):
        _ensure_unique_code(
            db, tenant_id, level, changes.get("code", node.code), parent_id, exclude_id=node.id
        )

    for field, value in changes.items():
        setattr(node, field, value)

    db.commit()
    db.refresh(node)

    logger.info(f"Updated {level.label} {node_id} for tenant {tenant_id}: {sorted(changes)}")
    return node


def update_account(
    db: Session,
    tenant_id: int,
    account_id: int,
    changes: Dict[str, Any],
) -> ChartOfAccount:
    """
    Apply a partial update to an account.

    Moving to another detailed group re-derives the account type and gives
    the account the next code in its new group. Changing the opening balance
    shifts the current balance by the same delta. Only ``description`` may
    be cleared with null.
    """
    allowed = {"account_name", "description", "is_active", "detailed_group_id", "opening_balance"}
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationFailed(f"Cannot update fields: {', '.join(unknown)}", unknown)

    _reject_nulls(changes, nullable={"description"})

    account = get_node(db, tenant_id, HierarchyLevel.ACCOUNT, account_id)

    if "account_name" in changes:
        account.account_name = _required_text(changes["account_name"], "account_name")
    if "description" in changes:
        account.description = changes["description"] or None
    if "is_active" in changes:
        account.is_active = bool(changes["is_active"])

    if "detailed_group_id" in changes and changes["detailed_group_id"] != account.detailed_group_id:
        element, sub_element, detailed = _group_path(db, tenant_id, changes["detailed_group_id"])
        account.account_code = next_account_code(db, tenant_id, element, sub_element, detailed)
        account.detailed_group_id = detailed.id
        account.account_type = account_type_for_element(element.name)

    if "opening_balance" in changes:
        opening = _balance(changes["opening_balance"])
        account.current_balance = account.current_balance + (opening - account.opening_balance)
        account.opening_balance = opening

    db.commit()
    db.refresh(account)

    logger.info(f"Updated account {account_id} for tenant {tenant_id}: {sorted(changes)}")
    return account


# --------------------------------------------------------------------------
# Delete
# --------------------------------------------------------------------------

def delete_node(db: Session, tenant_id: int, level: HierarchyLevel, node_id: int) -> None:
    """
    Delete a node of any level.

    Raises:
        NotFound: If the node is not in the tenant
        SystemAccountProtected: For accounts flagged as system accounts
        HasChildren: If any dependent child exists
    """
    node = get_node(db, tenant_id, level, node_id)

    if level == HierarchyLevel.ACCOUNT and node.is_system_account:
        logger.warning(f"Refused to delete system account {node_id} for tenant {tenant_id}")
        raise SystemAccountProtected(node_id)

    child_count = _count_children(db, tenant_id, level, node_id)
    if child_count:
        logger.warning(f"Refused to delete {level.label} {node_id}: {child_count} children")
        raise HasChildren(level.label, node_id, LEVELS[level].child_level.label, child_count)

    db.delete(node)
    db.commit()

    logger.info(f"Deleted {level.label} {node_id} for tenant {tenant_id}")


def delete_account(db: Session, tenant_id: int, account_id: int) -> None:
    delete_node(db, tenant_id, HierarchyLevel.ACCOUNT, account_id)


# --------------------------------------------------------------------------
# Listing
# --------------------------------------------------------------------------

def _list_level(
    db: Session,
    tenant_id: int,
    level: HierarchyLevel,
    parent_id: int | None = None,
) -> list:
    level_spec = LEVELS[level]
    query = tenant_query(db, level_spec.model, tenant_id)
    if parent_id is not None and level_spec.parent_field:
        query = query.filter(getattr(level_spec.model, level_spec.parent_field) == parent_id)
    return only_tenant_rows(query.order_by(level_spec.model.code, level_spec.model.id).all(), tenant_id)


def list_main_groups(db: Session, tenant_id: int) -> List[MainGroup]:
    return _list_level(db, tenant_id, HierarchyLevel.MAIN_GROUP)


def list_element_groups(
    db: Session, tenant_id: int, main_group_id: int | None = None
) -> List[ElementGroup]:
    return _list_level(db, tenant_id, HierarchyLevel.ELEMENT_GROUP, main_group_id)


def list_sub_element_groups(
    db: Session, tenant_id: int, element_group_id: int | None = None
) -> List[SubElementGroup]:
    return _list_level(db, tenant_id, HierarchyLevel.SUB_ELEMENT_GROUP, element_group_id)


def list_detailed_groups(
    db: Session, tenant_id: int, sub_element_group_id: int | None = None
) -> List[DetailedGroup]:
    return _list_level(db, tenant_id, HierarchyLevel.DETAILED_GROUP, sub_element_group_id)


def list_accounts(
    db: Session,
    tenant_id: int,
    account_type: AccountType | None = None,
    detailed_group_id: int | None = None,
    include_system_accounts: bool = False,
    include_inactive: bool = False,
) -> List[ChartOfAccount]:
    """List a tenant's accounts ordered by code; system and inactive accounts are opt-in."""
    query = tenant_query(db, ChartOfAccount, tenant_id)

    if not include_inactive:
        query = query.filter(ChartOfAccount.is_active.is_(True))
    if account_type is not None:
        query = query.filter(ChartOfAccount.account_type == account_type)
    if detailed_group_id is not None:
        query = query.filter(ChartOfAccount.detailed_group_id == detailed_group_id)
    if not include_system_accounts:
        query = query.filter(ChartOfAccount.is_system_account.is_(False))

    accounts = query.order_by(ChartOfAccount.account_code, ChartOfAccount.id).all()
    return only_tenant_rows(accounts, tenant_id)


def get_tree(db: Session, tenant_id: int) -> List[Dict[str, Any]]:
    """Nested main → element → sub-element → detailed → accounts view of the tenant."""

    def by_parent(rows, field):
        grouped: Dict[int, list] = {}
        for row in rows:
            grouped.setdefault(getattr(row, field), []).append(row)
        return grouped

    elements = by_parent(list_element_groups(db, tenant_id), "main_group_id")
    subs = by_parent(list_sub_element_groups(db, tenant_id), "element_group_id")
    detailed = by_parent(list_detailed_groups(db, tenant_id), "sub_element_group_id")
    accounts = by_parent(
        list_accounts(db, tenant_id, include_system_accounts=True, include_inactive=True),
        "detailed_group_id",
    )

    def node(row, children_key=None, children=None):
        data = {"id": row.id, "name": row.name, "code": row.code}
        if children_key:
            data[children_key] = children
        return data

    return [
        {
            **node(main),
            "is_active": main.is_active,
            "element_groups": [
                node(element, "sub_element_groups", [
                    node(sub, "detailed_groups", [
                        node(group, "accounts", [
                            {
                                "id": account.id,
                                "account_code": account.account_code,
                                "account_name": account.account_name,
                                "account_type": account.account_type.value,
                                "is_system_account": account.is_system_account,
                                "is_active": account.is_active,
                            }
                            for account in accounts.get(group.id, [])
                        ])
                        for group in detailed.get(sub.id, [])
                    ])
                    for sub in subs.get(element.id, [])
                ])
                for element in elements.get(main.id, [])
            ],
        }
        for main in list_main_groups(db, tenant_id)
    ]
