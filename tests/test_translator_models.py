"""Tests for SELinux label models."""

import pytest
from pydantic import ValidationError

from src.translator.models import (
    FieldConflict,
    LabelField,
    SELinuxOptions,
    options_from_mapping,
)


class TestLabelField:
    """Test LabelField enum."""

    def test_field_order(self):
        """Fields are listed in file label order."""
        assert [f.value for f in LabelField] == ["user", "role", "type", "level"]


class TestSELinuxOptions:
    """Test SELinuxOptions model."""

    def test_defaults_are_unspecified(self):
        """Test that all fields default to empty strings."""
        opts = SELinuxOptions()

        assert opts.user == ""
        assert opts.role == ""
        assert opts.type == ""
        assert opts.level == ""
        assert opts.is_empty()

    def test_partial_options_not_empty(self):
        """Test that a single specified field makes options non-empty."""
        assert not SELinuxOptions(level="s0:c1,c2").is_empty()
        assert not SELinuxOptions(user="system_u").is_empty()

    def test_none_fields_are_unspecified(self):
        """Test that None coming from an API object becomes an empty string."""
        opts = SELinuxOptions(user=None, role=None, type="container_t", level=None)

        assert opts.user == ""
        assert opts.role == ""
        assert opts.type == "container_t"
        assert opts.level == ""

    def test_field_values_order(self, container_options):
        """Test field values are returned in user, role, type, level order."""
        assert container_options.field_values() == [
            "system_u",
            "system_r",
            "container_t",
            "s0:c1,c2",
        ]

    def test_non_string_field_rejected(self):
        """Test that non-string values fail validation."""
        with pytest.raises(ValidationError):
            SELinuxOptions(user=["system_u"])

    def test_string_representation(self):
        """Test string representation names every field."""
        text = str(SELinuxOptions(type="container_t"))

        assert "type='container_t'" in text
        assert "user=''" in text


class TestOptionsFromMapping:
    """Test building options from raw seLinuxOptions mappings."""

    def test_none_mapping(self):
        """Test that a missing mapping yields no options."""
        assert options_from_mapping(None) is None

    def test_pod_security_context_mapping(self):
        """Test a mapping as found in a pod security context."""
        opts = options_from_mapping({"type": "spc_t", "level": "s0:c10,c20"})

        assert opts == SELinuxOptions(type="spc_t", level="s0:c10,c20")

    def test_unknown_keys_ignored(self):
        """Test that unrelated keys in the mapping are ignored."""
        opts = options_from_mapping({"level": "s0", "runAsUser": 1000})

        assert opts == SELinuxOptions(level="s0")

    def test_invalid_mapping(self):
        """Test that invalid field types raise a validation error."""
        with pytest.raises(ValidationError):
            options_from_mapping({"level": {"sensitivity": "s0"}})


class TestFieldConflict:
    """Test FieldConflict model."""

    def test_describe(self):
        """Test human-readable conflict description."""
        conflict = FieldConflict(
            field=LabelField.LEVEL, value_a="s0:c1,c2", value_b="s0:c98,c99"
        )

        assert conflict.describe() == "level 's0:c1,c2' conflicts with 's0:c98,c99'"

    def test_field_from_string(self):
        """Test that the field accepts its string value."""
        conflict = FieldConflict(field="type", value_a="container_t", value_b="spc_t")

        assert conflict.field == LabelField.TYPE
