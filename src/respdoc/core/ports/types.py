from collections.abc import Iterable
from typing import Any, Protocol

from respdoc.models import Declaration, Field, InlineType, TypeRef


class TypeDescriber(Protocol):
    def default_content_type(self, ty: TypeRef) -> str: ...

    def schema_of(self, ty: InlineType) -> dict[str, Any]: ...

    def response_name(self, ty: TypeRef) -> str: ...

    def declaration_schema(self, declaration: Declaration) -> dict[str, Any]: ...

    def named_struct_schema(self, fields: Iterable[Field], docs: Iterable[str] = ()) -> dict[str, Any]: ...
