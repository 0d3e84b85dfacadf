"""Salary template editing and enabled-field resolution."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable

from staffing_payroll.enums import FieldCategory, FieldPurpose, FieldType
from staffing_payroll.errors import NotFoundError, ValidationError
from staffing_payroll.templates.fields import (
    NumberField,
    SalaryTemplateConfig,
    SalaryTemplateField,
    SelectField,
    TextField,
)


class SalaryTemplateEngine:
    """Pure transformations over a company's ``SalaryTemplateConfig``.

    Every operation returns a new config; the input is never modified, so a
    failed edit leaves the caller's config exactly as it was.

    Ordering of resolved fields is mandatory, then optional, then custom,
    stable within each group.
    """

    CUSTOM_KEY_PREFIX = "customField"

    @staticmethod
    def find_field(config: SalaryTemplateConfig, key: str) -> SalaryTemplateField:
        """Locate a field by key across all three collections."""
        found = config.get(key)
        if found is None:
            raise NotFoundError("Template field", key, field=key)
        return found

    @classmethod
    def toggle(
        cls, config: SalaryTemplateConfig, key: str, enabled: bool
    ) -> SalaryTemplateConfig:
        """Flip a field's enabled flag. Mandatory fields cannot be disabled."""
        target = cls.find_field(config, key)
        if not enabled and target.category.is_mandatory:
            raise ValidationError(
                f"Mandatory field '{target.label}' cannot be disabled", field=key
            )
        if target.enabled == enabled:
            return config
        return config.replace_field(replace(target, enabled=enabled))

    @classmethod
    def set_default_value(
        cls, config: SalaryTemplateConfig, key: str, value: Any
    ) -> SalaryTemplateConfig:
        """Set or overwrite a field's default, validated against its type."""
        target = cls.find_field(config, key)
        coerced = target.coerce(value) if value is not None else None
        return config.replace_field(replace(target, default_value=coerced))

    @classmethod
    def add_custom_field(
        cls,
        config: SalaryTemplateConfig,
        key: str | None = None,
        label: str | None = None,
        field_type: FieldType = FieldType.TEXT,
        purpose: FieldPurpose = FieldPurpose.INFORMATION,
        **attributes: Any,
    ) -> SalaryTemplateConfig:
        """Append a CUSTOM field.

        Without arguments this adds an enabled TEXT/INFORMATION field under a
        generated key. Explicit keys must not collide with any existing key.
        """
        existing = config.keys()
        if key is None:
            key = cls._generate_key(existing)
        elif key in existing:
            raise ValidationError(f"Field key '{key}' already exists in template", field=key)

        field_cls = {
            FieldType.TEXT: TextField,
            FieldType.NUMBER: NumberField,
            FieldType.SELECT: SelectField,
        }[FieldType(field_type)]
        attributes.setdefault("enabled", True)
        try:
            new_field = field_cls(
                key=key,
                label=label or key,
                category=FieldCategory.CUSTOM,
                purpose=FieldPurpose(purpose),
                **attributes,
            )
        except TypeError as e:
            raise ValidationError(f"Invalid attributes for field '{key}': {e}", field=key) from e
        return replace(config, custom_fields=config.custom_fields + (new_field,))

    @classmethod
    def update_custom_field(
        cls, config: SalaryTemplateConfig, key: str, **changes: Any
    ) -> SalaryTemplateConfig:
        """Edit attributes of a custom field; key and category are fixed."""
        target = cls.find_field(config, key)
        if target.category != FieldCategory.CUSTOM:
            raise ValidationError(f"Field '{key}' is not a custom field", field=key)
        for fixed in ("key", "category"):
            if fixed in changes:
                raise ValidationError(f"Custom field {fixed} cannot be changed", field=key)
        try:
            updated = replace(target, **changes)
        except TypeError as e:
            raise ValidationError(f"Invalid change for field '{key}': {e}", field=key) from e
        return config.replace_field(updated)

    @classmethod
    def remove_custom_field(
        cls, config: SalaryTemplateConfig, key: str
    ) -> SalaryTemplateConfig:
        """Remove a custom field. Mandatory and optional fields can only be disabled."""
        target = cls.find_field(config, key)
        if target.category != FieldCategory.CUSTOM or target not in config.custom_fields:
            raise ValidationError(
                f"Only custom fields can be removed; disable '{key}' instead", field=key
            )
        return replace(
            config,
            custom_fields=tuple(f for f in config.custom_fields if f.key != key),
        )

    @staticmethod
    def enabled_fields(
        config: SalaryTemplateConfig, purpose: FieldPurpose | None = None
    ) -> list[SalaryTemplateField]:
        """All enabled fields, optionally filtered by purpose."""
        return [
            f
            for f in config.all_fields()
            if f.enabled and (purpose is None or f.purpose == purpose)
        ]

    @staticmethod
    def basic_pay_field(fields: Iterable[SalaryTemplateField]) -> SalaryTemplateField:
        """The single canonical basic-pay field among ``fields``."""
        candidates = [
            f for f in fields if f.is_basic_pay and f.purpose == FieldPurpose.CALCULATION
        ]
        if len(candidates) != 1:
            keys = [f.key for f in candidates]
            raise ValidationError(
                "Salary template must declare exactly one enabled CALCULATION field "
                f"as basic pay, found {len(candidates)} {keys}",
                field="is_basic_pay",
            )
        return candidates[0]

    @classmethod
    def validate_config(cls, config: SalaryTemplateConfig) -> list[str]:
        """Validate a whole config, returning error messages (empty if valid)."""
        errors: list[str] = []

        for f in config.mandatory_fields:
            if not f.category.is_mandatory:
                errors.append(f"Field '{f.key}' in mandatory fields has category {f.category.value}")
            if not f.enabled:
                errors.append(f"Mandatory field '{f.label}' must be enabled")
        for f in config.optional_fields:
            if f.category.is_mandatory or f.category == FieldCategory.CUSTOM:
                errors.append(f"Field '{f.key}' in optional fields has category {f.category.value}")
        for f in config.custom_fields:
            if f.category != FieldCategory.CUSTOM:
                errors.append(f"Field '{f.key}' in custom fields has category {f.category.value}")

        try:
            cls.basic_pay_field(cls.enabled_fields(config))
        except ValidationError as e:
            errors.append(e.reason)

        return errors

    @classmethod
    def ensure_valid(cls, config: SalaryTemplateConfig) -> SalaryTemplateConfig:
        """Raise ValidationError listing every problem with ``config``."""
        errors = cls.validate_config(config)
        if errors:
            raise ValidationError("; ".join(errors), field="salary_template")
        return config

    @classmethod
    def _generate_key(cls, existing: set[str]) -> str:
        n = 1
        while f"{cls.CUSTOM_KEY_PREFIX}{n}" in existing:
            n += 1
        return f"{cls.CUSTOM_KEY_PREFIX}{n}"
