"""Universal schema: validation plus conversion to provider schemas.

A :class:`UniversalSchema` wraps a pydantic model class.  It validates raw
tool input (returning a result object instead of raising) and derives a
:class:`ProviderSchema`, the JSON-Schema-like structure every provider
declares its tools with.

Conversion walks the model's pydantic JSON schema and normalizes it:

- ``$ref`` / single-item ``allOf`` nodes are inlined from ``$defs``; a
  reference back to a definition already being inlined becomes an untyped node.
- ``Optional[X]`` (``anyOf`` with ``null``) collapses to X's schema.
- ``Literal`` / ``Enum`` become ``enum`` lists in declaration order.
- Other unions of several types become untyped nodes.
- ``description`` is copied onto every node; titles and defaults are dropped.
- ``required`` lists exactly the fields that declare no default.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)
ConvertedT = TypeVar("ConvertedT")

_PRIMITIVE_TYPES = frozenset({"string", "number", "integer", "boolean", "null"})


# ---------------------------------------------------------------------------
# Provider schema
# ---------------------------------------------------------------------------


class ProviderSchema(BaseModel):
    """Provider-native schema node (recursive)."""

    model_config = ConfigDict(frozen=True)

    type: str | None = None
    properties: dict[str, ProviderSchema] | None = None
    required: list[str] | None = None
    items: ProviderSchema | None = None
    enum: list[Any] | None = None
    description: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Dump as plain JSON-compatible dict, omitting absent keys."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Validation outcomes
# ---------------------------------------------------------------------------


class ValidationIssue(BaseModel):
    """One offending location in a failed validation."""

    path: tuple[str | int, ...] = ()
    message: str
    code: str = "invalid"

    @property
    def location(self) -> str:
        return ".".join(str(part) for part in self.path) or "<root>"

    def to_wire(self) -> dict[str, Any]:
        return {"path": list(self.path), "message": self.message, "code": self.code}


class ValidationFailure(BaseModel):
    """Input did not satisfy the schema."""

    success: Literal[False] = False
    issues: list[ValidationIssue]

    def summary(self) -> str:
        return "; ".join(f"{issue.location}: {issue.message}" for issue in self.issues)


class ValidationSuccess(BaseModel):
    """Input satisfied the schema; ``data`` is the validated model instance."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: Literal[True] = True
    data: Any


ValidationResult = ValidationSuccess | ValidationFailure


# ---------------------------------------------------------------------------
# Universal schema
# ---------------------------------------------------------------------------


class UniversalSchema(Generic[ModelT]):
    """Provider-independent description of a tool's input."""

    def __init__(self, model: type[ModelT]) -> None:
        if not (isinstance(model, type) and issubclass(model, BaseModel)):
            msg = f"UniversalSchema requires a pydantic model class, got {model!r}"
            raise TypeError(msg)
        self._model = model
        self._cache: dict[str, Any] = {}

    @classmethod
    def of(cls, source: UniversalSchema[Any] | type[BaseModel]) -> UniversalSchema[Any]:
        """Return *source* unchanged if already a schema, else wrap the model class."""
        if isinstance(source, UniversalSchema):
            return source
        return cls(source)

    @property
    def model(self) -> type[ModelT]:
        return self._model

    def validate(self, data: Any) -> ValidationResult:
        """Validate *data* without raising."""
        try:
            value = self._model.model_validate(data)
        except ValidationError as exc:
            return ValidationFailure(issues=_issues_from(exc))
        return ValidationSuccess(data=value)

    def to_provider_schema(self) -> ProviderSchema:
        """Convert to the generic provider schema (pure, uncached)."""
        return model_to_provider_schema(self._model)

    def provider_schema(
        self,
        provider: str,
        converter: Callable[[UniversalSchema[ModelT]], ConvertedT],
    ) -> ConvertedT:
        """Return *converter*'s output for *provider*, computing it once."""
        if provider not in self._cache:
            self._cache[provider] = converter(self)
        result: ConvertedT = self._cache[provider]
        return result

    def __repr__(self) -> str:
        return f"UniversalSchema({self._model.__name__})"


def _issues_from(exc: ValidationError) -> list[ValidationIssue]:
    return [
        ValidationIssue(path=tuple(err["loc"]), message=err["msg"], code=err["type"])
        for err in exc.errors()
    ]


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def model_to_provider_schema(model: type[BaseModel]) -> ProviderSchema:
    """Convert a pydantic model class into a :class:`ProviderSchema`."""
    raw = model.model_json_schema(mode="validation")
    defs: dict[str, Any] = raw.get("$defs", {})
    # The root may be emitted inline while nested nodes still refer back to it.
    inline_root = "$ref" not in raw and model.__name__ in defs
    root = frozenset({model.__name__}) if inline_root else frozenset()
    return _convert_node(raw, defs, root)


def _convert_node(
    node: dict[str, Any],
    defs: dict[str, Any],
    seen: frozenset[str],
) -> ProviderSchema:
    description = node.get("description")

    reference = _resolve_reference(node, defs)
    if reference is not None:
        name, target = reference
        if name is not None and name in seen:
            # Recursive reference: leave the node untyped.
            return ProviderSchema(description=description or target.get("description"))
        inner_seen = seen | {name} if name is not None else seen
        converted = _convert_node(target, defs, inner_seen)
        return _with_description(converted, description)

    variants = node.get("anyOf") or node.get("oneOf")
    if variants:
        non_null = [v for v in variants if v.get("type") != "null"]
        if len(non_null) == 1:
            return _with_description(_convert_node(non_null[0], defs, seen), description)
        enum_values = _union_enum_values(non_null, defs)
        if enum_values is not None:
            return ProviderSchema(
                type=_infer_enum_type(enum_values),
                enum=enum_values,
                description=description,
            )
        # Mixed unions have no single-type rendering.
        return ProviderSchema(description=description)

    if "const" in node:
        values = [node["const"]]
        return ProviderSchema(
            type=node.get("type") or _infer_enum_type(values),
            enum=values,
            description=description,
        )

    if "enum" in node:
        values = list(node["enum"])
        return ProviderSchema(
            type=node.get("type") or _infer_enum_type(values),
            enum=values,
            description=description,
        )

    node_type = node.get("type")

    if node_type == "object" or "properties" in node:
        raw_props: dict[str, Any] = node.get("properties", {})
        properties = {name: _convert_node(prop, defs, seen) for name, prop in raw_props.items()}
        declared_required = set(node.get("required", []))
        required = [name for name in raw_props if name in declared_required]
        return ProviderSchema(
            type="object",
            properties=properties,
            required=required,
            description=description,
        )

    if node_type == "array":
        items = node.get("items")
        return ProviderSchema(
            type="array",
            items=_convert_node(items, defs, seen) if isinstance(items, dict) else None,
            description=description,
        )

    if isinstance(node_type, str) and node_type in _PRIMITIVE_TYPES:
        return ProviderSchema(type=node_type, description=description)

    return ProviderSchema(description=description)


def _resolve_reference(
    node: dict[str, Any], defs: dict[str, Any]
) -> tuple[str | None, dict[str, Any]] | None:
    """Return ``(def name, target)`` for a ``$ref`` or single-item ``allOf`` node."""
    ref = node.get("$ref")
    if ref is None:
        all_of = node.get("allOf")
        if isinstance(all_of, list) and len(all_of) == 1:
            ref = all_of[0].get("$ref")
            if ref is None:
                return None, all_of[0]
    if ref is None:
        return None
    name = ref.rsplit("/", 1)[-1]
    if name not in defs:
        msg = f"Unresolvable schema reference: {ref}"
        raise ValueError(msg)
    return name, defs[name]


def _union_enum_values(variants: list[dict[str, Any]], defs: dict[str, Any]) -> list[Any] | None:
    values: list[Any] = []
    for variant in variants:
        reference = _resolve_reference(variant, defs)
        resolved = reference[1] if reference is not None else variant
        if "const" in resolved:
            values.append(resolved["const"])
        elif "enum" in resolved:
            values.extend(resolved["enum"])
        else:
            return None
    return values


def _infer_enum_type(values: list[Any]) -> str | None:
    kinds = {_json_type(value) for value in values}
    if len(kinds) == 1:
        return kinds.pop()
    return None


def _json_type(value: Any) -> str | None:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    return None


def _with_description(schema: ProviderSchema, description: str | None) -> ProviderSchema:
    if description is None or description == schema.description:
        return schema
    return schema.model_copy(update={"description": description})


def check_provider_schema(schema: dict[str, Any]) -> list[str]:
    """Return MCP-compatibility problems with a wire schema (empty means valid)."""
    errors: list[str] = []
    if not schema.get("type"):
        errors.append('Schema must have a "type" property')
    if schema.get("type") == "object" and "properties" not in schema:
        errors.append('Object schemas should have "properties" defined')
    return errors
