"""
Base domain model with camelCase JSON compatibility.

All domain models inherit from BaseDomainModel. Python code uses snake_case
field names; to_json()/from_json() speak camelCase so bundles and index
records can be handed to editor clients unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound="BaseDomainModel")


def to_camel_case(snake_str: str) -> str:
    """
    Convert snake_case to camelCase.

    Examples:
        >>> to_camel_case("file_path")
        'filePath'
        >>> to_camel_case("content_hash")
        'contentHash'
    """
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def to_snake_case(camel_str: str) -> str:
    """
    Convert camelCase to snake_case.

    Examples:
        >>> to_snake_case("filePath")
        'file_path'
        >>> to_snake_case("maxTokens")
        'max_tokens'
    """
    if not camel_str:
        return camel_str
    result = [camel_str[0].lower()]
    for char in camel_str[1:]:
        if char.isupper():
            result.extend(["_", char.lower()])
        else:
            result.append(char)
    return "".join(result)


class BaseDomainModel(BaseModel):
    """
    Base class for all domain models.

    - to_json() serializes to camelCase
    - from_json() accepts camelCase or snake_case keys
    - Enums are serialized as their values, datetimes as ISO 8601 strings
    """

    model_config = ConfigDict(
        alias_generator=to_camel_case,
        populate_by_name=True,
        use_enum_values=False,
        arbitrary_types_allowed=True,
    )

    def to_json(self) -> Dict[str, Any]:
        """Serialize to camelCase JSON-compatible dict."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Deserialize from camelCase JSON.

        Raises:
            pydantic.ValidationError: If required fields are missing or invalid
        """
        return cls.model_validate(data)

    def __str__(self) -> str:
        field_strs = [f"{name}={getattr(self, name)!r}" for name in type(self).model_fields]
        return f"{self.__class__.__name__}({', '.join(field_strs)})"
