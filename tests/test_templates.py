"""Tests for salary template fields and the template engine."""

from dataclasses import replace
from decimal import Decimal

import pytest

from staffing_payroll.enums import (
    DeductionKind,
    EarningKind,
    FieldCategory,
    FieldPurpose,
    FieldType,
)
from staffing_payroll.errors import NotFoundError, ValidationError
from staffing_payroll.templates import (
    NumberField,
    SalaryTemplateConfig,
    SalaryTemplateEngine,
    SelectField,
    TextField,
    default_salary_template,
)
from staffing_payroll.templates.fields import field_from_dict


@pytest.fixture
def config() -> SalaryTemplateConfig:
    return default_salary_template()


class TestFieldVariants:
    """Test per-type value validation."""

    def test_number_field_coerces_strings(self):
        f = NumberField("bonus", "Bonus", FieldCategory.CUSTOM, FieldPurpose.ALLOWANCE)
        assert f.coerce("2000") == Decimal("2000")
        assert f.coerce(12.5) == Decimal("12.5")

    @pytest.mark.parametrize("bad", ["abc", None, True, "NaN", "Infinity"])
    def test_number_field_rejects(self, bad):
        f = NumberField("bonus", "Bonus", FieldCategory.CUSTOM, FieldPurpose.ALLOWANCE)
        with pytest.raises(ValidationError):
            f.coerce(bad)

    def test_number_field_bounds(self):
        f = NumberField(
            "lwf", "LWF", FieldCategory.OPTIONAL, FieldPurpose.DEDUCTION, min_value=Decimal("0")
        )
        with pytest.raises(ValidationError):
            f.coerce("-1")

    def test_select_field_requires_option(self):
        f = SelectField(
            "shift", "Shift", FieldCategory.CUSTOM, FieldPurpose.INFORMATION, options=("DAY", "NIGHT")
        )
        assert f.coerce("NIGHT") == "NIGHT"
        with pytest.raises(ValidationError):
            f.coerce("EVENING")

    def test_select_field_needs_options(self):
        with pytest.raises(ValidationError):
            SelectField("shift", "Shift", FieldCategory.CUSTOM, FieldPurpose.INFORMATION)

    def test_allowance_defaults_earning_kind(self):
        f = NumberField("bonus", "Bonus", FieldCategory.CUSTOM, FieldPurpose.ALLOWANCE)
        assert f.earning_kind == EarningKind.ALLOWANCE

    def test_deduction_kind_on_allowance_rejected(self):
        with pytest.raises(ValidationError):
            NumberField(
                "bonus",
                "Bonus",
                FieldCategory.CUSTOM,
                FieldPurpose.ALLOWANCE,
                deduction_kind=DeductionKind.PF,
            )

    def test_basic_pay_must_be_calculation(self):
        with pytest.raises(ValidationError):
            NumberField(
                "basic", "Basic", FieldCategory.CUSTOM, FieldPurpose.ALLOWANCE, is_basic_pay=True
            )

    @pytest.mark.parametrize("field_type", ["TEXT", "SELECT"])
    def test_basic_pay_must_be_number(self, field_type):
        """A stored template cannot tag a text or select field as basic pay."""
        data = {
            "key": "basicPay",
            "label": "Basic Pay",
            "type": field_type,
            "category": "MANDATORY_WITH_RULES",
            "purpose": "CALCULATION",
            "is_basic_pay": True,
            "default_value": "n/a",
            "options": ["n/a"],
        }
        with pytest.raises(ValidationError) as exc_info:
            field_from_dict(data)
        assert exc_info.value.field == "basicPay"

    def test_text_basic_pay_rejected(self):
        with pytest.raises(ValidationError):
            TextField(
                "basicPay", "Basic Pay", FieldCategory.MANDATORY_WITH_RULES,
                FieldPurpose.CALCULATION, is_basic_pay=True, default_value="n/a",
            )

    def test_duplicate_keys_rejected(self):
        f = TextField("note", "Note", FieldCategory.CUSTOM, FieldPurpose.INFORMATION)
        with pytest.raises(ValidationError):
            SalaryTemplateConfig(custom_fields=(f, f))


class TestDefaultTemplate:
    """Test the template given to new companies."""

    def test_default_template_is_valid(self, config):
        assert SalaryTemplateEngine.validate_config(config) == []

    def test_basic_duty_options(self, config):
        duty = config.get("basicDuty")
        assert duty.type == FieldType.SELECT
        assert duty.options == ("26", "27", "28", "29", "30", "31")
        assert duty.default_value == "30"

    def test_basic_duty_override(self):
        assert default_salary_template(basic_duty=26).get("basicDuty").default_value == "26"

    def test_lwf_default(self, config):
        assert config.get("lwf").default_value == Decimal("10")

    def test_single_basic_pay_field(self, config):
        basic = SalaryTemplateEngine.basic_pay_field(SalaryTemplateEngine.enabled_fields(config))
        assert basic.key == "basicPay"

    def test_dict_round_trip(self, config):
        assert SalaryTemplateConfig.from_dict(config.to_dict()) == config


class TestToggle:
    """Test enabling and disabling fields."""

    def test_disable_optional_field(self, config):
        updated = SalaryTemplateEngine.toggle(config, "lwf", False)

        assert updated.get("lwf").enabled is False
        assert config.get("lwf").enabled is True

    def test_disable_mandatory_field_rejected(self, config):
        """Rejected edit leaves the config unchanged."""
        before = config.to_dict()

        with pytest.raises(ValidationError) as exc_info:
            SalaryTemplateEngine.toggle(config, "employeeName", False)

        assert exc_info.value.field == "employeeName"
        assert config.to_dict() == before

    def test_disable_mandatory_with_rules_rejected(self, config):
        with pytest.raises(ValidationError):
            SalaryTemplateEngine.toggle(config, "basicDuty", False)

    def test_enable_mandatory_is_noop(self, config):
        assert SalaryTemplateEngine.toggle(config, "employeeName", True) is config

    def test_toggle_unknown_field(self, config):
        with pytest.raises(NotFoundError):
            SalaryTemplateEngine.toggle(config, "nope", False)


class TestSetDefaultValue:
    def test_set_number_default(self, config):
        updated = SalaryTemplateEngine.set_default_value(config, "bonus", "2000")
        assert updated.get("bonus").default_value == Decimal("2000")

    def test_set_select_default_validates(self, config):
        with pytest.raises(ValidationError):
            SalaryTemplateEngine.set_default_value(config, "basicDuty", "25")

    def test_set_number_default_rejects_text(self, config):
        with pytest.raises(ValidationError):
            SalaryTemplateEngine.set_default_value(config, "bonus", "a lot")

    def test_clear_default(self, config):
        updated = SalaryTemplateEngine.set_default_value(config, "lwf", None)
        assert updated.get("lwf").default_value is None


class TestCustomFields:
    """Test custom field management."""

    def test_add_generated_key(self, config):
        updated = SalaryTemplateEngine.add_custom_field(config)

        added = updated.custom_fields[-1]
        assert added.key == "customField1"
        assert added.type == FieldType.TEXT
        assert added.purpose == FieldPurpose.INFORMATION
        assert added.category == FieldCategory.CUSTOM
        assert added.enabled is True

    def test_generated_keys_are_unique(self, config):
        once = SalaryTemplateEngine.add_custom_field(config)
        twice = SalaryTemplateEngine.add_custom_field(once)
        assert [f.key for f in twice.custom_fields][-2:] == ["customField1", "customField2"]

    def test_add_duplicate_key_rejected(self, config):
        with pytest.raises(ValidationError):
            SalaryTemplateEngine.add_custom_field(config, key="pf", label="PF again")

    def test_add_number_allowance(self, config):
        updated = SalaryTemplateEngine.add_custom_field(
            config,
            key="nightAllowance",
            label="Night Allowance",
            field_type=FieldType.NUMBER,
            purpose=FieldPurpose.ALLOWANCE,
            earning_kind=EarningKind.OTHER_ALLOWANCE,
            default_value="300",
        )
        added = updated.get("nightAllowance")
        assert added.default_value == Decimal("300")
        assert added.earning_kind == EarningKind.OTHER_ALLOWANCE

    def test_add_with_bad_attribute_rejected(self, config):
        with pytest.raises(ValidationError):
            SalaryTemplateEngine.add_custom_field(config, key="note", options=["a"])

    def test_update_custom_label(self, config):
        updated = SalaryTemplateEngine.update_custom_field(config, "bonus", label="Performance Bonus")
        assert updated.get("bonus").label == "Performance Bonus"

    def test_update_non_custom_rejected(self, config):
        with pytest.raises(ValidationError):
            SalaryTemplateEngine.update_custom_field(config, "pf", label="Provident Fund")

    def test_remove_custom(self, config):
        updated = SalaryTemplateEngine.remove_custom_field(config, "advanceTaken")
        assert updated.get("advanceTaken") is None
        assert config.get("advanceTaken") is not None

    @pytest.mark.parametrize("key", ["employeeName", "pf"])
    def test_remove_non_custom_rejected(self, config, key):
        with pytest.raises(ValidationError):
            SalaryTemplateEngine.remove_custom_field(config, key)


class TestEnabledFields:
    """Test resolution of the fields a payslip uses."""

    def test_order_is_mandatory_optional_custom(self, config):
        keys = [f.key for f in SalaryTemplateEngine.enabled_fields(config)]

        assert keys[0] == "serialNumber"
        assert keys.index("netSalary") < keys.index("pf") < keys.index("bonus")

    def test_disabled_fields_excluded(self, config):
        updated = SalaryTemplateEngine.toggle(config, "esic", False)
        keys = [f.key for f in SalaryTemplateEngine.enabled_fields(updated)]
        assert "esic" not in keys

    def test_filter_by_purpose(self, config):
        deductions = SalaryTemplateEngine.enabled_fields(config, FieldPurpose.DEDUCTION)
        assert [f.key for f in deductions] == ["pf", "esic", "lwf", "advanceTaken"]

    def test_two_basic_pay_fields_invalid(self, config):
        extra = replace(config.get("monthlyPay"), is_basic_pay=True)
        broken = config.replace_field(extra)

        errors = SalaryTemplateEngine.validate_config(broken)
        assert any("basic pay" in e for e in errors)
        with pytest.raises(ValidationError):
            SalaryTemplateEngine.ensure_valid(broken)

    def test_disabled_mandatory_is_invalid(self, config):
        broken = config.replace_field(replace(config.get("employeeName"), enabled=False))
        assert SalaryTemplateEngine.validate_config(broken)
