"""
Form submission input schemas and query models.

Each public form type has its own pydantic schema. Field constraints are
collected in one pass so a rejected submission names every failing field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

import phonenumbers
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from storefront.domain.entities import FormSubmission, FormType, SubmissionStatus

# --- Constants ---

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

COUNTRY_CODE_PATTERN = r"^\+\d{1,4}$"
PHONE_PATTERN = r"^[0-9\s-]+$"

HelpType = Literal["clinic_buy", "start_business", "just_interested", "buy_contact"]
TrainingInterestType = Literal[
    "machine_purchase",
    "already_customer",
    "certification_info",
    "general_info",
]


def is_valid_phone(country_code: str, phone: str) -> bool:
    """True if `phone` is a valid number for the dialling code `country_code`."""
    digits = re.sub(r"[\s-]", "", phone)
    try:
        parsed = phonenumbers.parse(f"{country_code}{digits}", None)
    except phonenumbers.NumberParseException:
        return False
    return phonenumbers.is_valid_number(parsed)


# --- Input Schemas ---


class _FormInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    gdpr_consent: bool

    @field_validator("gdpr_consent")
    @classmethod
    def _consent_given(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must accept the privacy policy")
        return v


class _PhoneInput(_FormInput):
    # Declared before `phone` so the phone check can see it.
    country_code: str = Field(pattern=COUNTRY_CODE_PATTERN)
    phone: str = Field(min_length=6, max_length=20, pattern=PHONE_PATTERN)

    @field_validator("phone")
    @classmethod
    def _phone_matches_country(cls, v: str, info: ValidationInfo) -> str:
        code = info.data.get("country_code")
        if code and not is_valid_phone(code, v):
            raise ValueError("Invalid phone number for the selected country")
        return v


class _ContactDetails(_PhoneInput):
    full_name: str = Field(min_length=2, max_length=100)
    email: str = Field(max_length=255)

    @field_validator("email")
    @classmethod
    def _email_format(cls, v: str) -> str:
        if not EMAIL_REGEX.match(v):
            raise ValueError("Enter a valid email address")
        return v.lower()


class BaseFormInput(_ContactDetails):
    """Fields shared by the full inquiry forms."""

    country_name: str = Field(min_length=2, max_length=100)
    corporation_number: str | None = Field(default=None, max_length=30)
    message: str | None = Field(default=None, max_length=2000)
    marketing_consent: bool = False


class ContactInput(BaseFormInput):
    subject: str = Field(min_length=3, max_length=200)
    message: str = Field(min_length=10, max_length=2000)


class ProductInquiryInput(BaseFormInput):
    help_type: HelpType
    product_id: str = Field(min_length=1)
    product_name: str = Field(min_length=1)
    product_slug: str = Field(min_length=1)


class TrainingInquiryInput(BaseFormInput):
    training_interest_type: TrainingInterestType


class CallbackRequestInput(_PhoneInput):
    preferred_date: str = Field(min_length=1)
    preferred_time: str = Field(min_length=1)


class TourRequestInput(_ContactDetails):
    message: str | None = Field(default=None, max_length=1000)


class QuoteRequestInput(_ContactDetails):
    company_name: str | None = Field(default=None, max_length=200)
    message: str | None = Field(default=None, max_length=2000)


class ResellerApplicationInput(BaseFormInput):
    company_name: str = Field(min_length=2, max_length=200)
    website: str | None = Field(default=None, max_length=255)

    @field_validator("website")
    @classmethod
    def _website_url(cls, v: str | None) -> str | None:
        if v and not re.match(r"^https?://\S+\.\S+$", v):
            raise ValueError("Website must be an http(s) URL")
        return v or None


FORM_SCHEMAS: dict[FormType, type[_FormInput]] = {
    "contact": ContactInput,
    "product_inquiry": ProductInquiryInput,
    "training_inquiry": TrainingInquiryInput,
    "callback_request": CallbackRequestInput,
    "tour_request": TourRequestInput,
    "quote_request": QuoteRequestInput,
    "reseller_application": ResellerApplicationInput,
}

# Free-text fields that are stripped of markup before storage
FREE_TEXT_FIELDS: tuple[str, ...] = (
    "full_name",
    "phone",
    "country_name",
    "corporation_number",
    "company_name",
    "website",
    "subject",
    "message",
    "product_name",
    "preferred_time",
)


# --- Config / Query Models ---


@dataclass(frozen=True)
class FormsConfig:
    gdpr_consent_version: str = "1.0"
    enabled_types: frozenset[str] = field(default_factory=lambda: frozenset(FORM_SCHEMAS))


SubmissionSort = Literal["created_at", "-created_at", "full_name", "-full_name"]


@dataclass(frozen=True)
class SubmissionFilters:
    """Admin listing / export filters."""

    type: FormType | None = None
    status: SubmissionStatus | None = None
    search: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    product_id: str | None = None
    ids: tuple[str, ...] | None = None
    sort: SubmissionSort = "-created_at"
    limit: int = 20
    offset: int = 0


@dataclass(frozen=True)
class SubmissionStats:
    total: int
    by_status: dict[str, int]
    by_type: dict[str, int]

    def to_dict(self) -> dict[str, object]:
        return {"total": self.total, **self.by_status, "by_type": self.by_type}


@dataclass(frozen=True)
class SubmissionPage:
    items: list[FormSubmission]
    total: int
    limit: int
    offset: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit
