"""Accounting domain errors.

Each error carries the HTTP status it maps to and a stable ``code`` that
API clients can switch on.
"""

from typing import Any


class AccountingError(Exception):
    """Base class for rejected accounting operations."""

    status_code: int = 400
    code: str = "accounting_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.code}


class ValidationFailed(AccountingError):
    """Malformed input, rejected before any persistence attempt."""

    code = "validation_error"

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "fields": self.fields}


class NotFound(AccountingError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity.capitalize()} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ParentNotFound(AccountingError):
    status_code = 404
    code = "parent_not_found"

    def __init__(self, parent_level: str, parent_id: int):
        super().__init__(f"Parent {parent_level} {parent_id} not found")
        self.parent_level = parent_level
        self.parent_id = parent_id


class UnresolvedGroup(AccountingError):
    """A CSV row names a group that does not exist for the tenant."""

    status_code = 422
    code = "unresolved_group"

    def __init__(self, level_name: str, provided_name: str):
        super().__init__(f"{level_name.capitalize()} '{provided_name}' not found")
        self.level_name = level_name
        self.provided_name = provided_name


class AmbiguousGroupPath(AccountingError):
    """A CSV row's group names match more than one path in the tree."""

    status_code = 422
    code = "ambiguous_group_path"

    def __init__(self, path: str, matches: int):
        super().__init__(f"Group path '{path}' is ambiguous: {matches} matches")
        self.path = path
        self.matches = matches


class HasChildren(AccountingError):
    status_code = 409
    code = "has_children"

    def __init__(self, level: str, node_id: int, child_level: str, child_count: int):
        super().__init__(
            f"Cannot delete {level} {node_id}: it has {child_count} {child_level}(s). "
            f"Remove them first."
        )
        self.child_level = child_level
        self.child_count = child_count


class SystemAccountProtected(AccountingError):
    status_code = 409
    code = "system_account_protected"

    def __init__(self, account_id: int):
        super().__init__(f"Account {account_id} is a system account and cannot be deleted")
        self.account_id = account_id


class DuplicateCode(AccountingError):
    status_code = 409
    code = "duplicate_code"

    def __init__(self, level: str, code: str):
        super().__init__(f"A {level} with code '{code}' already exists")
        self.duplicate_code = code


class InvalidTransition(AccountingError):
    """Requested invoice status change is not an edge of the lifecycle."""

    status_code = 409
    code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            f"Cannot change invoice status from '{from_status}' to '{to_status}'"
        )
        self.from_status = from_status
        self.to_status = to_status

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "from": self.from_status, "to": self.to_status}


class ConcurrentModification(AccountingError):
    status_code = 409
    code = "concurrent_modification"

    def __init__(self, entity: str, entity_id: int):
        super().__init__(
            f"{entity.capitalize()} {entity_id} was modified concurrently, reload and retry"
        )


class MissingRequiredColumns(AccountingError):
    """CSV header lacks required columns; the whole import is rejected."""

    code = "missing_required_columns"

    def __init__(self, missing: list[str]):
        quoted = ", ".join(f'"{name}"' for name in missing)
        super().__init__(f"CSV is missing required columns: {quoted}")
        self.missing = missing

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "missing": self.missing}
