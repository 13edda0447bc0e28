"""
Tests for catalog payload models and ToolDefinition invariants
"""

import pytest
from pydantic import ValidationError

from models import (
    FunctionDetails,
    NamedColumn,
    NamedParameter,
    ObjectKind,
    SchemaObject,
    ToolDefinition,
    ViewDetails,
    object_details_adapter,
)


class TestCatalogPayloads:

    def test_discriminated_by_object_type(self, payloads):
        assert isinstance(object_details_adapter.validate_python(payloads.active_user_profiles()), ViewDetails)
        assert isinstance(object_details_adapter.validate_python(payloads.add_note_to_user()), FunctionDetails)

    def test_unknown_object_type_rejected(self):
        with pytest.raises(ValidationError):
            object_details_adapter.validate_python({"object_name": "t", "object_type": "TABLE"})

    def test_listing_requires_name(self):
        with pytest.raises(ValidationError):
            SchemaObject.model_validate({"object_name": "", "object_type": "VIEW"})


class TestToolDefinition:

    def test_view_cannot_have_parameters(self):
        with pytest.raises(ValidationError, match="VIEW definitions cannot have parameters"):
            ToolDefinition(
                tool_name="v", source_name="v", kind=ObjectKind.VIEW,
                parameters=(NamedParameter(name="p", public_name="p", pg_type="text", position=1),),
            )

    def test_function_cannot_have_columns(self):
        with pytest.raises(ValidationError, match="FUNCTION definitions cannot have columns"):
            ToolDefinition(
                tool_name="f", source_name="f", kind=ObjectKind.FUNCTION, return_type="int4",
                columns=(NamedColumn(name="c", public_name="c", pg_type="text", nullable=False),),
            )

    def test_function_needs_return_type(self):
        with pytest.raises(ValidationError):
            ToolDefinition(tool_name="f", source_name="f", kind=ObjectKind.FUNCTION)

    def test_frozen(self):
        definition = ToolDefinition(tool_name="v", source_name="v", kind=ObjectKind.VIEW)
        with pytest.raises(ValidationError):
            definition.tool_name = "other"
