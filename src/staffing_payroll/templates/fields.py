"""Salary template field variants and the config value that holds them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Iterator, Union

from staffing_payroll.enums import (
    DeductionKind,
    EarningKind,
    FieldCategory,
    FieldPurpose,
    FieldType,
)
from staffing_payroll.errors import ValidationError


@dataclass(frozen=True)
class _BaseField:
    """Attributes shared by every field variant."""

    key: str
    label: str
    category: FieldCategory
    purpose: FieldPurpose
    enabled: bool = True
    description: str | None = None
    requires_admin_input: bool = False
    is_basic_pay: bool = False
    earning_kind: EarningKind | None = None
    deduction_kind: DeductionKind | None = None

    def __post_init__(self) -> None:
        if not self.key:
            raise ValidationError("Field key must not be empty", field="key")
        if self.purpose == FieldPurpose.ALLOWANCE and self.earning_kind is None:
            object.__setattr__(self, "earning_kind", EarningKind.ALLOWANCE)
        if self.purpose == FieldPurpose.DEDUCTION and self.deduction_kind is None:
            object.__setattr__(self, "deduction_kind", DeductionKind.OTHER)
        if self.purpose != FieldPurpose.ALLOWANCE and self.earning_kind is not None:
            raise ValidationError(
                f"Field '{self.key}' sets earning_kind but is not an ALLOWANCE field",
                field=self.key,
            )
        if self.purpose != FieldPurpose.DEDUCTION and self.deduction_kind is not None:
            raise ValidationError(
                f"Field '{self.key}' sets deduction_kind but is not a DEDUCTION field",
                field=self.key,
            )
        if self.is_basic_pay and self.purpose != FieldPurpose.CALCULATION:
            raise ValidationError(
                f"Basic pay field '{self.key}' must have CALCULATION purpose",
                field=self.key,
            )
        if self.is_basic_pay and self.type != FieldType.NUMBER:
            raise ValidationError(
                f"Basic pay field '{self.key}' must be a NUMBER field",
                field=self.key,
            )


@dataclass(frozen=True)
class TextField(_BaseField):
    """Free text field; informational only."""

    default_value: str | None = None

    type = FieldType.TEXT

    def coerce(self, value: Any) -> str:
        if value is None:
            raise ValidationError(f"Field '{self.key}' requires a value", field=self.key)
        return str(value)


@dataclass(frozen=True)
class NumberField(_BaseField):
    """Numeric field with optional bounds."""

    default_value: Decimal | None = None
    min_value: Decimal | None = None
    max_value: Decimal | None = None

    type = FieldType.NUMBER

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.default_value is not None:
            object.__setattr__(self, "default_value", self.coerce(self.default_value))

    def coerce(self, value: Any) -> Decimal:
        """Parse a value into a finite decimal inside the declared bounds."""
        if isinstance(value, bool) or value is None:
            raise ValidationError(
                f"Field '{self.key}' requires a numeric value, got {value!r}",
                field=self.key,
            )
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(
                f"Field '{self.key}' requires a numeric value, got {value!r}",
                field=self.key,
            )
        if not number.is_finite():
            raise ValidationError(f"Field '{self.key}' must be a finite number", field=self.key)
        if self.min_value is not None and number < self.min_value:
            raise ValidationError(
                f"Field '{self.key}' must be at least {self.min_value}", field=self.key
            )
        if self.max_value is not None and number > self.max_value:
            raise ValidationError(
                f"Field '{self.key}' must be at most {self.max_value}", field=self.key
            )
        return number


@dataclass(frozen=True)
class SelectField(_BaseField):
    """Field restricted to a declared option set."""

    options: tuple[str, ...] = ()
    default_value: str | None = None

    type = FieldType.SELECT

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "options", tuple(str(o) for o in self.options))
        if not self.options:
            raise ValidationError(
                f"Select field '{self.key}' must declare at least one option",
                field=self.key,
            )
        if self.default_value is not None:
            object.__setattr__(self, "default_value", self.coerce(self.default_value))

    def coerce(self, value: Any) -> str:
        choice = str(value) if value is not None else None
        if choice not in self.options:
            raise ValidationError(
                f"Field '{self.key}' must be one of {list(self.options)}, got {value!r}",
                field=self.key,
            )
        return choice


SalaryTemplateField = Union[TextField, NumberField, SelectField]

_FIELD_CLASSES: dict[FieldType, type] = {
    FieldType.TEXT: TextField,
    FieldType.NUMBER: NumberField,
    FieldType.SELECT: SelectField,
}


def field_to_dict(f: SalaryTemplateField) -> dict[str, Any]:
    """Serialize a field for JSON storage."""
    data: dict[str, Any] = {
        "key": f.key,
        "label": f.label,
        "type": f.type.value,
        "category": f.category.value,
        "purpose": f.purpose.value,
        "enabled": f.enabled,
        "description": f.description,
        "requires_admin_input": f.requires_admin_input,
        "is_basic_pay": f.is_basic_pay,
        "earning_kind": f.earning_kind.value if f.earning_kind else None,
        "deduction_kind": f.deduction_kind.value if f.deduction_kind else None,
        "default_value": str(f.default_value) if f.default_value is not None else None,
    }
    if isinstance(f, NumberField):
        data["min_value"] = str(f.min_value) if f.min_value is not None else None
        data["max_value"] = str(f.max_value) if f.max_value is not None else None
    elif isinstance(f, SelectField):
        data["options"] = list(f.options)
    return data


def field_from_dict(data: dict[str, Any]) -> SalaryTemplateField:
    """Build the correct field variant from its stored form."""
    try:
        field_type = FieldType(data["type"])
        kwargs: dict[str, Any] = {
            "key": data["key"],
            "label": data.get("label") or data["key"],
            "category": FieldCategory(data["category"]),
            "purpose": FieldPurpose(data["purpose"]),
            "enabled": bool(data.get("enabled", True)),
            "description": data.get("description"),
            "requires_admin_input": bool(data.get("requires_admin_input", False)),
            "is_basic_pay": bool(data.get("is_basic_pay", False)),
            "earning_kind": EarningKind(data["earning_kind"]) if data.get("earning_kind") else None,
            "deduction_kind": (
                DeductionKind(data["deduction_kind"]) if data.get("deduction_kind") else None
            ),
            "default_value": data.get("default_value"),
        }
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Malformed template field {data!r}: {e}") from e

    if field_type == FieldType.NUMBER:
        kwargs["min_value"] = _optional_decimal(data.get("min_value"), kwargs["key"])
        kwargs["max_value"] = _optional_decimal(data.get("max_value"), kwargs["key"])
    elif field_type == FieldType.SELECT:
        kwargs["options"] = tuple(data.get("options") or ())
    return _FIELD_CLASSES[field_type](**kwargs)


def _optional_decimal(value: Any, key: str) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Field '{key}' has a non-numeric bound {value!r}", field=key)


@dataclass(frozen=True)
class SalaryTemplateConfig:
    """A company's payslip field set.

    Values are immutable; every edit returns a new config.
    """

    mandatory_fields: tuple[SalaryTemplateField, ...] = ()
    optional_fields: tuple[SalaryTemplateField, ...] = ()
    custom_fields: tuple[SalaryTemplateField, ...] = field(default=())

    def __post_init__(self) -> None:
        for name in ("mandatory_fields", "optional_fields", "custom_fields"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        seen: set[str] = set()
        for f in self.all_fields():
            if f.key in seen:
                raise ValidationError(
                    f"Duplicate field key '{f.key}' in salary template", field=f.key
                )
            seen.add(f.key)

    def all_fields(self) -> Iterator[SalaryTemplateField]:
        """Iterate mandatory, then optional, then custom fields."""
        yield from self.mandatory_fields
        yield from self.optional_fields
        yield from self.custom_fields

    def keys(self) -> set[str]:
        return {f.key for f in self.all_fields()}

    def get(self, key: str) -> SalaryTemplateField | None:
        for f in self.all_fields():
            if f.key == key:
                return f
        return None

    def replace_field(self, updated: SalaryTemplateField) -> SalaryTemplateConfig:
        """Return a new config with the field of the same key swapped in place."""

        def swap(group: tuple[SalaryTemplateField, ...]) -> tuple[SalaryTemplateField, ...]:
            return tuple(updated if f.key == updated.key else f for f in group)

        return replace(
            self,
            mandatory_fields=swap(self.mandatory_fields),
            optional_fields=swap(self.optional_fields),
            custom_fields=swap(self.custom_fields),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "mandatory_fields": [field_to_dict(f) for f in self.mandatory_fields],
            "optional_fields": [field_to_dict(f) for f in self.optional_fields],
            "custom_fields": [field_to_dict(f) for f in self.custom_fields],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SalaryTemplateConfig:
        return cls(
            mandatory_fields=tuple(field_from_dict(f) for f in data.get("mandatory_fields") or ()),
            optional_fields=tuple(field_from_dict(f) for f in data.get("optional_fields") or ()),
            custom_fields=tuple(field_from_dict(f) for f in data.get("custom_fields") or ()),
        )
