from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class ContentRules(BaseModel):
    slug_max_length: int = 120


class SanitizerRules(BaseModel):
    allowed_tags: list[str]
    allowed_attributes: dict[str, list[str]] = Field(default_factory=dict)
    allowed_protocols: list[str] = Field(default_factory=lambda: ["http", "https", "mailto"])
    add_noopener: bool = True


class FormsRules(BaseModel):
    gdpr_consent_version: str = "1.0"
    enabled_types: list[str]


class RateLimitWindow(BaseModel):
    window_seconds: int
    max_requests: int


class RateLimitRules(BaseModel):
    form_submission: RateLimitWindow


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    content: ContentRules
    sanitizer: SanitizerRules
    forms: FormsRules
    rate_limits: RateLimitRules
    ops: OpsRules
