# demo_mailer/schemas/demo_request.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_FIELDS = (
    "email",
    "first_name",
    "last_name",
    "company_name",
    "country",
    "fleet_size",
    "industry",
)


def coerce_field_value(value: Any) -> Optional[str]:
    """Stringify a submitted form value; falsy non-strings count as absent."""
    if isinstance(value, str):
        return value
    if not value:
        return None
    if isinstance(value, bool):
        return "true"
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    return str(value)


@dataclass(frozen=True)
class DemoRequest:
    email: str
    first_name: str
    last_name: str
    company_name: str
    country: str
    fleet_size: str
    industry: str
    phone: str = ""
    message: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class DemoRequestIn(BaseModel):
    """Inbound form body. Every field is optional here so the handler can report all gaps at once."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: Optional[str] = Field(default=None)
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    company_name: Optional[str] = Field(default=None, alias="companyName")
    country: Optional[str] = Field(default=None)
    fleet_size: Optional[str] = Field(default=None, alias="fleetSize")
    industry: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    message: Optional[str] = Field(default=None)

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_string(cls, v):
        return coerce_field_value(v)

    def missing_fields(self) -> List[str]:
        """Required fields that are absent or blank, by their JSON names, in form order."""
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or not value.strip():
                field = type(self).model_fields[name]
                missing.append(field.alias or name)
        return missing

    def to_domain(self) -> DemoRequest:
        return DemoRequest(
            email=self.email or "",
            first_name=self.first_name or "",
            last_name=self.last_name or "",
            company_name=self.company_name or "",
            country=self.country or "",
            fleet_size=self.fleet_size or "",
            industry=self.industry or "",
            phone=self.phone or "",
            message=self.message or "",
        )


class MessageRef(BaseModel):
    id: Optional[str] = None


class SendEmailResponse(BaseModel):
    ok: bool = True
    support: MessageRef
    user: MessageRef


class ErrorResponse(BaseModel):
    ok: bool = False
    message: str
    code: Optional[str] = None
