"""Registry index config schema - Parse an index's config.json.

Alternative registries publish a config.json at the root of their index
repository describing where crate files are downloaded from:

    {
      "dl": "https://example.com/api/v1/crates",
      "api": "https://example.com",
      "allowed-registries": ["https://github.com/rust-lang/crates.io-index"]
    }

Only "dl" is required. Unknown keys are ignored so newer index formats keep
parsing.
"""

from pydantic import AnyUrl
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from .exceptions import IndexConfigError


class IndexConfig(BaseModel):
    """Download settings read from a registry index (immutable)."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    # Download URL template, or base URL when it has no placeholders
    dl: str
    api: AnyUrl | None = None
    allowed_registries: list[str] = Field(default_factory=list, alias="allowed-registries")

    @classmethod
    def from_json(cls, content: str, index: str = "") -> "IndexConfig":
        """
        Parse config.json content.

        Args:
            content: Raw JSON document
            index: Index URL, for diagnostics

        Returns:
            IndexConfig instance

        Raises:
            IndexConfigError: If the document is not valid JSON or "dl" is missing
        """
        try:
            return cls.model_validate_json(content)
        except ValidationError as e:
            raise IndexConfigError(
                f"Invalid config.json in registry index {index}: {e}",
                context={"index": index},
            ) from e
