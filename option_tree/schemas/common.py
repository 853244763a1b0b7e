from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from option_tree.core.errors import DocumentSchemaError


_M = TypeVar("_M", bound="DocumentModel")


class DocumentModel(BaseModel):
    """
    Base for every v2 document model.

    Wire keys are camelCase, attributes are snake_case. Unknown keys are
    kept so a parsed document dumps back without losing data.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_document(self) -> dict[str, Any]:
        """Dump to the JSON document shape (camelCase, only keys that were set)."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten pydantic errors into `path: message` strings."""
    messages = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "$"
        messages.append(f"{path}: {error['msg']}")
    return messages


def validate_document(model: type[_M], doc: Any, document_name: str) -> _M:
    """
    Validate a JSON document (mapping, JSON text or bytes) into `model`.

    Raises:
        DocumentSchemaError: With every pydantic error in details["errors"]
    """
    try:
        if isinstance(doc, str | bytes | bytearray):
            return model.model_validate_json(doc)
        return model.model_validate(doc)
    except ValidationError as e:
        errors = format_validation_errors(e)
        raise DocumentSchemaError(
            f"Invalid {document_name} document ({len(errors)} error(s))",
            details={"document": document_name, "errors": errors},
        ) from e
