"""Declared schema surface of the unattend ISO resource.

The attribute names here are the wire contract with the host: ``id``,
``file_name``, ``xml_content``, ``path_override`` and ``result_path``.
Required attributes are enforced by validate_config(), which stands in for
the host's schema layer; the lifecycle controller does not re-check them.
"""

from dataclasses import asdict, dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from unattend_iso.diagnostics import CONFIGURATION_ERROR


class ConfigurationError(Exception):
    """Declared configuration or tracked state does not match the schema."""

    def __init__(self, message: str, code: str = CONFIGURATION_ERROR) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class StringAttribute:
    """Metadata for a single string attribute.

    Attributes:
        name: Attribute name on the wire.
        description: Markdown description for documentation.
        required: Must be set in the declaration.
        optional: May be set in the declaration.
        computed: Set by the provider.
        default: Value used when an optional attribute is unset.
        use_state_for_unknown: Carry the prior state value into the plan.
    """

    name: str
    description: str
    required: bool = False
    optional: bool = False
    computed: bool = False
    default: str | None = None
    use_state_for_unknown: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class ResourceSchema:
    """Schema of a resource type."""

    description: str
    attributes: tuple[StringAttribute, ...]

    def attribute(self, name: str) -> StringAttribute:
        """Return an attribute by name.

        Raises:
            KeyError: If the schema has no such attribute.
        """
        for attr in self.attributes:
            if attr.name == name:
                return attr
        raise KeyError(name)

    def names(self) -> list[str]:
        """Return all attribute names in declaration order."""
        return [attr.name for attr in self.attributes]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "description": self.description,
            "attributes": [attr.to_dict() for attr in self.attributes],
        }


RESOURCE_SCHEMA = ResourceSchema(
    description="Unattend ISO Resource.",
    attributes=(
        StringAttribute(
            name="path_override",
            description="Directory to write the local ISO file to, "
            "defaults to a unique file in the OS temp directory",
            optional=True,
            computed=True,
            default=None,
        ),
        StringAttribute(
            name="file_name",
            description="Name for the created ISO file",
            required=True,
        ),
        StringAttribute(
            name="xml_content",
            description="XML content for the unattend.xml file.",
            required=True,
        ),
        StringAttribute(
            name="id",
            description="ISO identifier",
            computed=True,
            use_state_for_unknown=True,
        ),
        StringAttribute(
            name="result_path",
            description="Resultant File Path",
            computed=True,
            use_state_for_unknown=True,
        ),
    ),
)


class UnattendISOModel(BaseModel):
    """Typed view of the resource's plan or tracked state.

    Every attribute may be unset: a freshly imported resource only carries
    its id until the other fields are reconciled.
    """

    model_config = ConfigDict(extra="forbid")

    id: str | None = Field(default=None, description="ISO identifier")
    file_name: str | None = Field(default=None, description="ISO file name")
    path_override: str | None = Field(
        default=None, description="Directory for the ISO file (None = temp file)"
    )
    xml_content: str | None = Field(
        default=None, description="Payload written as unattend.xml"
    )
    result_path: str | None = Field(default=None, description="Written file path")


def validate_config(
    data: dict[str, Any], schema: ResourceSchema = RESOURCE_SCHEMA
) -> dict[str, Any]:
    """Validate a declared configuration against the schema.

    Applies defaults for unset optional attributes.

    Args:
        data: Attribute mapping from the declaration.
        schema: Resource schema.

    Returns:
        A new mapping with defaults applied.

    Raises:
        ConfigurationError: If a required attribute is missing, an unknown
            or computed-only attribute is set, or a value is not a string.
    """
    problems: list[str] = []
    known = set(schema.names())

    for key in sorted(set(data) - known):
        problems.append(f"unsupported attribute '{key}'")

    result: dict[str, Any] = {}
    for attr in schema.attributes:
        value = data.get(attr.name)
        if value is None:
            if attr.required:
                problems.append(f"missing required attribute '{attr.name}'")
            elif attr.optional:
                result[attr.name] = attr.default
            continue
        if not (attr.required or attr.optional):
            problems.append(f"attribute '{attr.name}' is computed and cannot be set")
            continue
        if not isinstance(value, str):
            problems.append(
                f"attribute '{attr.name}' must be a string, "
                f"got {type(value).__name__}"
            )
            continue
        result[attr.name] = value

    if problems:
        raise ConfigurationError("Invalid configuration: " + "; ".join(problems))
    return result


def parse_model(data: dict[str, Any]) -> UnattendISOModel:
    """Convert a raw attribute mapping into a typed model.

    Raises:
        ConfigurationError: If the mapping does not fit the model.
    """
    try:
        return UnattendISOModel.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid resource data: {e}") from e


__all__ = [
    "RESOURCE_SCHEMA",
    "ConfigurationError",
    "ResourceSchema",
    "StringAttribute",
    "UnattendISOModel",
    "parse_model",
    "validate_config",
]
