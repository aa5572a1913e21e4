"""
Tests for the runtime struct validator used by generated modules.
"""

import datetime
import math
from dataclasses import dataclass, field
from typing import List, Optional
from unittest import TestCase

import pytest

from validgen.runtime import (
    ConversionError,
    FieldTransformError,
    RuleDefinitionError,
    StructValidationError,
    parse_rules,
    to_text,
    transform_field,
    validate_struct,
)


@dataclass
class ProductInput:
    name: str = field(metadata={"json": "name", "validate": "required,min=5"})
    price: float = field(metadata={"json": "price", "validate": "required,gt=0"})
    description: str = field(default="", metadata={"json": "description"})


@dataclass
class AccountInput:
    email: str = field(metadata={"validate": "required,email"})
    role: str = field(default="member", metadata={"validate": "oneof=admin member guest"})
    nickname: str = field(default="", metadata={"validate": "omitempty,min=3,max=12"})
    pin: str = field(default="0000", metadata={"validate": "len=4"})
    tags: List[str] = field(default_factory=list, metadata={"validate": "max=3"})
    age: int = field(default=30, metadata={"validate": "gte=18,lte=130"})
    score: int = field(default=1, metadata={"validate": "ne=0,lt=100"})
    level: int = field(default=5, metadata={"validate": "eq=5"})
    model_config: str = field(default="", metadata={"json": "-"})


class TestValidateStruct(TestCase):
    """Test cases for validate_struct"""

    def test_valid_product_passes(self):
        self.assertIsNone(validate_struct(ProductInput(name="Snickers", price=2.0)))

    def test_every_failing_field_is_reported(self):
        """Both name (min=5) and price (gt=0) are collected in one error"""
        with self.assertRaises(StructValidationError) as ctx:
            validate_struct(ProductInput(name="nike", price=-1.0))

        error = ctx.exception
        self.assertEqual(error.type_name, "ProductInput")
        self.assertEqual(error.fields, ["name", "price"])
        self.assertEqual([v.rule for v in error.violations], ["min=5", "gt=0"])
        self.assertEqual(error.violations[0].message, "length must be at least 5")
        self.assertEqual(error.violations[1].message, "value must be greater than 0")
        self.assertEqual(error.violations[0].value, "nike")
        self.assertIn("ProductInput has 2 invalid field(s)", str(error))

    def test_required_rejects_zero_values(self):
        with self.assertRaises(StructValidationError) as ctx:
            validate_struct(ProductInput(name="", price=0.0))

        self.assertEqual([v.rule for v in ctx.exception.violations], ["required", "required"])

    def test_valid_account_passes(self):
        validate_struct(AccountInput(email="ada@lovelace.org"))

    def test_email_rule(self):
        with self.assertRaises(StructValidationError) as ctx:
            validate_struct(AccountInput(email="not-an-email"))

        violation = ctx.exception.violations[0]
        self.assertEqual(violation.field, "email")
        self.assertEqual(violation.rule, "email")

    def test_oneof_rule(self):
        with self.assertRaises(StructValidationError) as ctx:
            validate_struct(AccountInput(email="ada@lovelace.org", role="owner"))

        self.assertEqual(ctx.exception.violations[0].message, "must be one of [admin, member, guest]")

    def test_omitempty_skips_empty_values(self):
        validate_struct(AccountInput(email="ada@lovelace.org", nickname=""))

        with self.assertRaises(StructValidationError) as ctx:
            validate_struct(AccountInput(email="ada@lovelace.org", nickname="al"))
        self.assertEqual(ctx.exception.fields, ["nickname"])

    def test_collection_and_number_bounds(self):
        bad = AccountInput(
            email="ada@lovelace.org",
            pin="123",
            tags=["a", "b", "c", "d"],
            age=17,
            score=0,
            level=4,
        )

        with self.assertRaises(StructValidationError) as ctx:
            validate_struct(bad)

        rules = {v.field: v.rule for v in ctx.exception.violations}
        self.assertEqual(rules, {"pin": "len=4", "tags": "max=3", "age": "gte=18", "score": "ne=0", "level": "eq=5"})

    def test_field_named_like_model_attribute(self):
        """Dataclass fields are never confused with pydantic model attributes"""
        validate_struct(AccountInput(email="ada@lovelace.org", model_config="anything"))

    def test_untagged_dataclass_always_valid(self):
        @dataclass
        class NoteInput:
            text: str = ""

        validate_struct(NoteInput())

    def test_rejects_non_dataclass(self):
        with self.assertRaises(TypeError):
            validate_struct({"name": "Snickers"})
        with self.assertRaises(TypeError):
            validate_struct(ProductInput)

    def test_nan_fails_numeric_rule(self):
        """NaN is reported as a violation, not raised from the comparison"""
        with self.assertRaises(StructValidationError) as ctx:
            validate_struct(ProductInput(name="Snickers", price=math.nan))

        violation = ctx.exception.violations[0]
        self.assertEqual((violation.field, violation.rule), ("price", "gt=0"))
        self.assertEqual(violation.message, "value must be greater than 0, got NaN")

    def test_infinity_compares_normally(self):
        validate_struct(ProductInput(name="Snickers", price=math.inf))

    def test_none_fails_size_rules(self):
        """None in an Optional field is bad input, not a broken declaration"""

        @dataclass
        class ProfileInput:
            nickname: Optional[str] = field(default=None, metadata={"validate": "min=2"})
            contact: Optional[str] = field(default=None, metadata={"validate": "email"})
            plan: Optional[str] = field(default=None, metadata={"validate": "oneof=free pro"})
            bio: Optional[str] = field(default=None, metadata={"validate": "omitempty,max=10"})

        with self.assertRaises(StructValidationError) as ctx:
            validate_struct(ProfileInput())

        rules = {v.field: v.rule for v in ctx.exception.violations}
        self.assertEqual(rules, {"nickname": "min=2", "contact": "email", "plan": "oneof=free pro"})
        self.assertEqual(ctx.exception.violations[0].message, "is missing; must be at least 2")

    def test_rule_on_unsupported_type(self):
        @dataclass
        class WhenInput:
            at: datetime.date = field(metadata={"validate": "min=1"})

        with self.assertRaises(RuleDefinitionError):
            validate_struct(WhenInput(at=datetime.date(2020, 1, 1)))

    def test_undefined_rule(self):
        @dataclass
        class OddInput:
            x: str = field(default="", metadata={"validate": "required,shiny"})

        with self.assertRaises(RuleDefinitionError):
            validate_struct(OddInput())


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("required,min=5", [("required", "", "required"), ("min", "5", "min=5")]),
        (" required , gt=0 ", [("required", "", "required"), ("gt", "0", "gt=0")]),
        ("omitempty,oneof=a b", [("omitempty", "", "omitempty"), ("oneof", "a b", "oneof=a b")]),
        ("", []),
    ],
)
def test_parse_rules(tag, expected):
    assert parse_rules(tag) == expected


def test_parse_rules_rejects_bad_number():
    @dataclass
    class LimitInput:
        n: int = field(default=1, metadata={"validate": "max=lots"})

    with pytest.raises(RuleDefinitionError):
        validate_struct(LimitInput())


def test_conversion_error_wraps_violations():
    with pytest.raises(StructValidationError) as info:
        validate_struct(ProductInput(name="nike", price=-1.0))

    error = ConversionError("ProductInput", info.value)

    assert error.input_type == "ProductInput"
    assert error.cause is info.value
    assert [v.field for v in error.violations] == ["name", "price"]
    assert str(error).startswith("validation failed for ProductInput:")
    assert isinstance(error, ValueError)


def test_transform_field_reports_field():
    def to_upper(raw):
        if not raw:
            raise FieldTransformError("empty value")
        return raw.upper()

    assert transform_field("code", to_upper, "abc") == "ABC"

    with pytest.raises(StructValidationError) as info:
        transform_field("code", to_upper, "")

    violation = info.value.violations[0]
    assert (violation.field, violation.rule, violation.message) == ("code", "transform", "empty value")


def test_transform_field_propagates_other_errors():
    def broken(raw):
        raise KeyError(raw)

    with pytest.raises(KeyError):
        transform_field("code", broken, "abc")


def test_nan_bound_is_a_definition_error():
    @dataclass
    class LimitInput:
        n: float = field(default=1.0, metadata={"validate": "lt=nan"})

    with pytest.raises(RuleDefinitionError):
        validate_struct(LimitInput())


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("s3cret-pass", "s3cret-pass"),
        (b"s3cret-pass", "s3cret-pass"),
        (bytearray(b"caf\xc3\xa9"), "café"),
        (12345678, "12345678"),
    ],
)
def test_to_text(raw, expected):
    assert to_text(raw) == expected


def test_to_text_rejects_undecodable_bytes():
    with pytest.raises(StructValidationError) as info:
        transform_field("password", to_text, b"\xff\xfe")

    assert info.value.violations[0].rule == "transform"
