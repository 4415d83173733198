"""Variable catalog: the names a template may reference, with descriptions."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vartext.exceptions import CatalogError

logger = logging.getLogger(__name__)

EmailType = Literal["verification", "welcome"]


class TemplateVariable(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(pattern=r"^[A-Za-z0-9_]+$")
    description: str = ""
    # Empty means the variable is available to every email type.
    email_types: tuple[str, ...] = Field(default=(), alias="emailTypes")


class VariableCatalog(BaseModel):
    """Ordered, read-only list of template variables."""

    model_config = ConfigDict(frozen=True)

    variables: tuple[TemplateVariable, ...] = ()

    def names(self) -> list[str]:
        return [variable.name for variable in self.variables]

    def get(self, name: str) -> TemplateVariable | None:
        for variable in self.variables:
            if variable.name == name:
                return variable
        return None

    def describe(self, name: str) -> str | None:
        variable = self.get(name)
        return variable.description if variable else None

    def for_email_type(self, email_type: str) -> VariableCatalog:
        """Variables usable in emails of *email_type*, order preserved."""
        return VariableCatalog(
            variables=tuple(
                v for v in self.variables if not v.email_types or email_type in v.email_types
            )
        )


DEFAULT_CATALOG = VariableCatalog(
    variables=(
        TemplateVariable(name="first_name", description="User's first name"),
        TemplateVariable(name="email", description="User's email address"),
        TemplateVariable(name="position", description="Waitlist position number"),
        TemplateVariable(name="referral_link", description="User's unique referral link"),
        TemplateVariable(name="campaign_name", description="Name of the campaign"),
        TemplateVariable(
            name="verification_link",
            description="Email verification link (verification only)",
            email_types=("verification",),
        ),
    )
)

SAMPLE_TEMPLATE_DATA: dict[str, str | int] = {
    "first_name": "John",
    "email": "john@example.com",
    "position": 42,
    "referral_link": "https://example.com/ref/ABC123",
    "campaign_name": "Product Launch",
    "verification_link": "https://example.com/verify?token=xyz123",
}


def load_catalog(path: str | Path) -> VariableCatalog:
    """Read a catalog from JSON: a list of variables or ``{"variables": [...]}``."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        logger.warning("Could not read catalog %s: %s", path, e)
        raise CatalogError(f"cannot read catalog: {e}", str(path)) from e
    except json.JSONDecodeError as e:
        logger.warning("Catalog %s is not valid JSON: %s", path, e)
        raise CatalogError(f"invalid JSON: {e}", str(path)) from e

    if isinstance(data, list):
        data = {"variables": data}

    try:
        return VariableCatalog.model_validate(data)
    except ValidationError as e:
        logger.warning("Catalog %s failed validation", path)
        raise CatalogError(f"invalid catalog: {e}", str(path)) from e
