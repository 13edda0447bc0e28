"""
Data models for catalog discovery and tool definitions
Using Pydantic for validation and serialization

TWO LAYERS:
- Raw catalog payloads (SchemaObject, ViewDetails, FunctionDetails) mirror the
  JSON produced by the catalog queries and are validated before use
- ToolDefinition is the canonical, immutable artifact handed to the tool registry
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class ObjectKind(str, Enum):
    """Kinds of catalog objects that become tools"""
    VIEW = "VIEW"
    FUNCTION = "FUNCTION"


# ============================================================================
# Raw catalog payloads
# ============================================================================

class SchemaObject(BaseModel):
    """One discoverable object, as listed by the catalog"""
    object_name: str = Field(min_length=1)
    object_type: ObjectKind
    comment: Optional[str] = None


class ColumnDetail(BaseModel):
    column_name: str = Field(min_length=1)
    data_type: str = Field(min_length=1)  # udt_name
    is_nullable: bool
    comment: Optional[str] = None


class ParameterDetail(BaseModel):
    # Parameter comments are not available from the catalog
    parameter_name: str = Field(min_length=1)
    data_type: str = Field(min_length=1)  # udt_name
    position: int


class ViewDetails(BaseModel):
    object_name: str = Field(min_length=1)
    object_type: Literal["VIEW"]
    comment: Optional[str] = None
    columns: list[ColumnDetail]


class FunctionDetails(BaseModel):
    object_name: str = Field(min_length=1)
    object_type: Literal["FUNCTION"]
    comment: Optional[str] = None
    parameters: list[ParameterDetail]
    return_type: str = Field(min_length=1)
    returns_set: bool


ObjectDetails = Annotated[Union[ViewDetails, FunctionDetails], Field(discriminator="object_type")]

object_details_adapter: TypeAdapter[Union[ViewDetails, FunctionDetails]] = TypeAdapter(ObjectDetails)


# ============================================================================
# Canonical tool definitions
# ============================================================================

class NamedParameter(BaseModel):
    """A FUNCTION input parameter with its public (camelCase) name"""
    model_config = ConfigDict(frozen=True)

    name: str
    public_name: str
    pg_type: str
    position: int
    description: Optional[str] = None


class NamedColumn(BaseModel):
    """A VIEW output column with its public (camelCase) name"""
    model_config = ConfigDict(frozen=True)

    name: str
    public_name: str
    pg_type: str
    nullable: bool
    description: Optional[str] = None


class ToolDefinition(BaseModel):
    """
    Stable description of one tool, derived purely from catalog metadata.

    VIEW definitions never carry parameters; FUNCTION definitions never carry columns.
    """
    model_config = ConfigDict(frozen=True)

    tool_name: str
    source_name: str
    kind: ObjectKind
    description: Optional[str] = None
    parameters: tuple[NamedParameter, ...] = ()
    columns: tuple[NamedColumn, ...] = ()
    return_type: Optional[str] = None
    returns_set: Optional[bool] = None

    @model_validator(mode="after")
    def _check_variant(self) -> "ToolDefinition":
        if self.kind is ObjectKind.VIEW and self.parameters:
            raise ValueError("VIEW definitions cannot have parameters")
        if self.kind is ObjectKind.FUNCTION:
            if self.columns:
                raise ValueError("FUNCTION definitions cannot have columns")
            if self.return_type is None:
                raise ValueError("FUNCTION definitions need a return type")
        return self
