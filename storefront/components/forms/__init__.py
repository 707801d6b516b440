"""
Forms component - visitor form intake and the admin submission inbox.
"""

from .component import (
    CSV_COLUMNS,
    RATE_LIMIT_MESSAGE,
    FormSubmissionService,
    collect_errors,
)
from .models import (
    EMAIL_REGEX,
    FORM_SCHEMAS,
    BaseFormInput,
    CallbackRequestInput,
    ContactInput,
    FormsConfig,
    ProductInquiryInput,
    QuoteRequestInput,
    ResellerApplicationInput,
    SubmissionFilters,
    SubmissionPage,
    SubmissionStats,
    TourRequestInput,
    TrainingInquiryInput,
    is_valid_phone,
)
from .ports import FormSubmissionRepoPort, RateLimiterPort, TimePort

__all__ = [
    # Service
    "FormSubmissionService",
    "collect_errors",
    "CSV_COLUMNS",
    "RATE_LIMIT_MESSAGE",
    # Schemas
    "FORM_SCHEMAS",
    "BaseFormInput",
    "ContactInput",
    "ProductInquiryInput",
    "TrainingInquiryInput",
    "CallbackRequestInput",
    "TourRequestInput",
    "QuoteRequestInput",
    "ResellerApplicationInput",
    "EMAIL_REGEX",
    "is_valid_phone",
    # Config / query models
    "FormsConfig",
    "SubmissionFilters",
    "SubmissionPage",
    "SubmissionStats",
    # Ports
    "FormSubmissionRepoPort",
    "RateLimiterPort",
    "TimePort",
]
