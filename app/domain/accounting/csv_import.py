"""Bulk Chart of Accounts import from CSV text or pre-parsed rows."""

import csv
import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.db.tenancy import tenant_query
from app.models.accounting import ElementGroup, SubElementGroup, DetailedGroup
from app.domain.accounting.enums import CsvStrictness, NotificationSeverity
from app.domain.accounting.exceptions import (
    AccountingError,
    AmbiguousGroupPath,
    MissingRequiredColumns,
    UnresolvedGroup,
)
from app.domain.accounting import hierarchy_service
from app.services.notifications import NotificationService

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["account name", "element group", "sub element group", "detailed group"]
OPTIONAL_COLUMNS = ["description", "opening balance"]
DEFAULT_OPENING_BALANCE = "0.00"
CURRENCY_NOISE = r"[\s$€£¥₹]"
# Plain digits, or digits grouped in thousands with commas, with optional decimals
AMOUNT_PATTERN = re.compile(r"(\d+|\d{1,3}(,\d{3})+)(\.\d+)?|\.\d+")


@dataclass
class ParsedAccountRow:
    """One candidate account, group references still by name."""
    row_number: int
    account_name: str
    element_group: str
    sub_element_group: str
    detailed_group: str
    description: Optional[str] = None
    opening_balance: Decimal = Decimal(DEFAULT_OPENING_BALANCE)


@dataclass
class CsvParseResult:
    rows: List[ParsedAccountRow]
    total_rows: int
    skipped_rows: int
    errors: List[str] = field(default_factory=list)


@dataclass
class CsvImportResult:
    """Outcome of an import; ``errors`` holds one ``Row N: ...`` line per failure."""
    successful: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"successful": self.successful, "failed": self.failed, "errors": self.errors}


def decode_csv_bytes(content: bytes) -> str:
    """Decode an uploaded file with multiple encoding attempts."""
    for encoding in ("utf-8-sig", "utf-8", "cp1252", "latin-1"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    return content.decode("utf-8", errors="replace")


def parse_opening_balance(value: Optional[str]) -> Optional[Decimal]:
    """Parse a balance cell; blank means 0.00, anything not a plain amount means None."""
    if value is None or not str(value).strip():
        return Decimal(DEFAULT_OPENING_BALANCE)

    # Currency symbols and whitespace are ignored
    cleaned = re.sub(CURRENCY_NOISE, "", str(value))

    # Parentheses mean negative
    negative = cleaned.startswith("(") and cleaned.endswith(")")
    if negative:
        cleaned = cleaned[1:-1]
    elif cleaned.startswith("-"):
        negative = True
        cleaned = cleaned[1:]

    if not AMOUNT_PATTERN.fullmatch(cleaned):
        logger.warning(f"Could not parse opening balance: {value}")
        return None

    amount = Decimal(cleaned.replace(",", ""))
    return -amount if negative else amount


def parse_accounts_csv(
    text: str,
    strictness: CsvStrictness | str = CsvStrictness.LENIENT,
) -> CsvParseResult:
    """
    Parse CSV text into candidate account rows.

    The first non-empty line is the header; header cells are matched
    case-insensitively after trimming. Under ``lenient`` a row missing any
    required cell is skipped silently; under ``strict`` only fully blank
    rows are skipped and partially filled ones are reported.

    Raises:
        MissingRequiredColumns: If the header lacks a required column
    """
    strictness = CsvStrictness(strictness)
    lines = [
        (number, line)
        for number, line in enumerate(text.lstrip("\ufeff").splitlines(), start=1)
        if line.strip()
    ]
    if not lines:
        raise MissingRequiredColumns(list(REQUIRED_COLUMNS))

    _, header_line = lines[0]
    headers = [cell.strip().lower() for cell in next(csv.reader([header_line]))]

    missing = [column for column in REQUIRED_COLUMNS if column not in headers]
    if missing:
        raise MissingRequiredColumns(missing)

    index = {column: headers.index(column) for column in REQUIRED_COLUMNS + OPTIONAL_COLUMNS if column in headers}

    def cell(values: List[str], column: str) -> str:
        position = index.get(column)
        if position is None or position >= len(values):
            return ""
        return values[position].strip()

    rows: List[ParsedAccountRow] = []
    errors: List[str] = []
    skipped = 0

    for row_number, line in lines[1:]:
        values = next(csv.reader([line]))
        required = [cell(values, column) for column in REQUIRED_COLUMNS]

        if not all(required):
            if strictness == CsvStrictness.STRICT and any(required):
                blank = [column for column, value in zip(REQUIRED_COLUMNS, required) if not value]
                errors.append(f"Row {row_number}: Missing value for {', '.join(blank)}")
            else:
                skipped += 1
            continue

        raw_balance = cell(values, "opening balance")
        balance = parse_opening_balance(raw_balance)
        if balance is None:
            errors.append(f"Row {row_number}: Invalid opening balance '{raw_balance}'")
            continue

        account_name, element_group, sub_element_group, detailed_group = required
        rows.append(ParsedAccountRow(
            row_number=row_number,
            account_name=account_name,
            element_group=element_group,
            sub_element_group=sub_element_group,
            detailed_group=detailed_group,
            description=cell(values, "description") or None,
            opening_balance=balance,
        ))

    logger.info(
        f"Parsed accounts CSV: {len(rows)} rows, {skipped} skipped, {len(errors)} errors "
        f"(strictness={strictness.value})"
    )
    return CsvParseResult(
        rows=rows,
        total_rows=len(lines) - 1,
        skipped_rows=skipped,
        errors=errors,
    )


class GroupResolver:
    """Resolves group name paths to detailed group ids for one tenant, caching hits per import."""

    def __init__(self, db: Session, tenant_id: int):
        self.db = db
        self.tenant_id = tenant_id
        self._cache: Dict[Tuple[str, str, str], int] = {}

    def _paths(self, row: ParsedAccountRow) -> List[int]:
        matches = (
            tenant_query(self.db, DetailedGroup, self.tenant_id)
            .join(SubElementGroup, SubElementGroup.id == DetailedGroup.sub_element_group_id)
            .join(ElementGroup, ElementGroup.id == SubElementGroup.element_group_id)
            .filter(
                SubElementGroup.tenant_id == self.tenant_id,
                ElementGroup.tenant_id == self.tenant_id,
                ElementGroup.name == row.element_group,
                SubElementGroup.name == row.sub_element_group,
                DetailedGroup.name == row.detailed_group,
            )
            .with_entities(DetailedGroup.id)
            .order_by(DetailedGroup.id)
            .all()
        )
        return [detailed_id for (detailed_id,) in matches]

    def _unresolved(self, row: ParsedAccountRow) -> UnresolvedGroup:
        """Name the first level of the row's path that has no match."""
        elements = (
            tenant_query(self.db, ElementGroup, self.tenant_id)
            .filter(ElementGroup.name == row.element_group)
            .with_entities(ElementGroup.id)
            .all()
        )
        if not elements:
            return UnresolvedGroup("element group", row.element_group)

        sub = (
            tenant_query(self.db, SubElementGroup, self.tenant_id)
            .filter(
                SubElementGroup.name == row.sub_element_group,
                SubElementGroup.element_group_id.in_([element_id for (element_id,) in elements]),
            )
            .first()
        )
        if not sub:
            return UnresolvedGroup("sub element group", row.sub_element_group)
        return UnresolvedGroup("detailed group", row.detailed_group)

    def resolve(self, row: ParsedAccountRow) -> int:
        """
        Match element -> sub-element -> detailed names as one path; returns
        the detailed group id.

        Raises:
            UnresolvedGroup: If no complete path matches
            AmbiguousGroupPath: If more than one path matches
        """
        key = (row.element_group, row.sub_element_group, row.detailed_group)
        if key in self._cache:
            return self._cache[key]

        matches = self._paths(row)
        if not matches:
            raise self._unresolved(row)
        if len(matches) > 1:
            raise AmbiguousGroupPath(" / ".join(key), len(matches))

        self._cache[key] = matches[0]
        return matches[0]


def _notify_import(db: Session, tenant_id: int, result: CsvImportResult) -> None:
    if not (result.successful or result.failed):
        return
    NotificationService(db).create(
        tenant_id=tenant_id,
        title="Chart of Accounts import finished",
        message=f"{result.successful} accounts imported, {result.failed} failed",
        notification_type="import",
        severity=(
            NotificationSeverity.WARNING.value if result.failed
            else NotificationSeverity.SUCCESS.value
        ),
        reference_type="chart_of_accounts",
    )


def import_accounts(
    db: Session,
    tenant_id: int,
    rows: Iterable[ParsedAccountRow],
    notify: bool = True,
) -> CsvImportResult:
    """
    Create one account per row. Each row commits on its own, so a failed
    row never blocks later ones. Rows are always inserted; importing the
    same file twice creates duplicates.
    """
    resolver = GroupResolver(db, tenant_id)
    result = CsvImportResult()

    for row in rows:
        try:
            detailed_group_id = resolver.resolve(row)
            hierarchy_service.create_account(
                db,
                tenant_id,
                detailed_group_id=detailed_group_id,
                account_name=row.account_name,
                description=row.description,
                opening_balance=row.opening_balance,
            )
            result.successful += 1
        except AccountingError as e:
            db.rollback()
            result.failed += 1
            result.errors.append(f"Row {row.row_number}: {e.message}")

    logger.info(
        f"Account import for tenant {tenant_id}: "
        f"{result.successful} created, {result.failed} failed"
    )

    if notify:
        _notify_import(db, tenant_id, result)
    return result


def _merge_parse_errors(result: CsvImportResult, errors: List[str]) -> CsvImportResult:
    if errors:
        result.failed += len(errors)
        result.errors = sorted(
            errors + result.errors,
            key=lambda message: int(message.split(":", 1)[0].split()[1]),
        )
    return result


def import_accounts_csv(
    db: Session,
    tenant_id: int,
    text: str,
    strictness: CsvStrictness | str = CsvStrictness.LENIENT,
) -> CsvImportResult:
    """Parse then import; rows rejected while parsing count as failed."""
    parsed = parse_accounts_csv(text, strictness)
    result = import_accounts(db, tenant_id, parsed.rows, notify=False)
    _merge_parse_errors(result, parsed.errors)

    _notify_import(db, tenant_id, result)
    return result


def import_account_records(
    db: Session,
    tenant_id: int,
    records: Iterable[Dict[str, Any]],
) -> CsvImportResult:
    """
    Import rows already split into fields by the client.

    Rows are numbered from 1 in the order given. A record with a blank
    required field or an unparseable balance is reported, not skipped.
    """
    rows: List[ParsedAccountRow] = []
    errors: List[str] = []

    for row_number, record in enumerate(records, start=1):
        values = {
            name: str(record.get(name) or "").strip()
            for name in ("account_name", "element_group", "sub_element_group", "detailed_group")
        }
        blank = [name for name, value in values.items() if not value]
        if blank:
            errors.append(f"Row {row_number}: Missing value for {', '.join(blank)}")
            continue

        balance = parse_opening_balance(record.get("opening_balance"))
        if balance is None:
            errors.append(f"Row {row_number}: Invalid opening balance '{record.get('opening_balance')}'")
            continue

        rows.append(ParsedAccountRow(
            row_number=row_number,
            description=(record.get("description") or "").strip() or None,
            opening_balance=balance,
            **values,
        ))

    result = import_accounts(db, tenant_id, rows, notify=False)
    _merge_parse_errors(result, errors)

    _notify_import(db, tenant_id, result)
    return result
