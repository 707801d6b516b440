from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
PublishType = Literal["draft", "pending", "publish", "private"]
ContentKind = Literal["blog_post", "product"]
CategoryKind = Literal["blog", "product"]
ProductVisibility = Literal["public", "hidden"]
FormType = Literal[
    "contact",
    "product_inquiry",
    "training_inquiry",
    "callback_request",
    "tour_request",
    "quote_request",
    "reseller_application",
]
SubmissionStatus = Literal["new", "read", "archived"]

PUBLISH_TYPES: tuple[PublishType, ...] = ("draft", "pending", "publish", "private")
FORM_TYPES: tuple[FormType, ...] = (
    "contact",
    "product_inquiry",
    "training_inquiry",
    "callback_request",
    "tour_request",
    "quote_request",
    "reseller_application",
)
SUBMISSION_STATUSES: tuple[SubmissionStatus, ...] = ("new", "read", "archived")


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Categories ---

class Category(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    kind: CategoryKind
    name: str
    slug: str
    description: str = ""
    parent_id: UUID | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class IdRef(BaseModel):
    """Category reference holding only the id."""

    kind: Literal["id"] = "id"
    id: str


class PopulatedRef(BaseModel):
    """Category reference as returned by a populated read."""

    kind: Literal["populated"] = "populated"
    id: str
    name: str = ""
    slug: str = ""


CategoryRef = IdRef | PopulatedRef

# --- Content ---

class SeoMeta(BaseModel):
    title: str = ""
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    og_image: str = ""
    canonical_url: str = ""
    noindex: bool = False


class ImageRef(BaseModel):
    url: str
    alt: str = ""


class TechSpecification(BaseModel):
    title: str = ""
    description: str = ""


class DocumentationLink(BaseModel):
    title: str = ""
    url: str = ""


class QuestionAnswer(BaseModel):
    question: str = ""
    answer: str = ""
    visible: bool = True


class ContentEntity(BaseModel):
    """Fields shared by every publishable document."""

    id: UUID = Field(default_factory=uuid4)
    title: str = ""
    slug: str = ""
    categories: list[UUID] = Field(default_factory=list)
    publish_type: PublishType = "draft"
    seo: SeoMeta = Field(default_factory=SeoMeta)
    author_id: str | None = None
    last_edited_by: str | None = None
    published_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class BlogPost(ContentEntity):
    kind: Literal["blog_post"] = "blog_post"
    excerpt: str = ""
    content: str = ""  # Rich HTML
    featured_image: ImageRef | None = None
    tags: list[str] = Field(default_factory=list)


class Product(ContentEntity):
    kind: Literal["product"] = "product"
    short_description: str = ""
    product_description: str = ""  # Rich HTML
    description: str = ""  # Rich HTML
    product_images: list[str] = Field(default_factory=list)
    tech_specifications: list[TechSpecification] = Field(default_factory=list)
    documentation: list[DocumentationLink] = Field(default_factory=list)
    qa: list[QuestionAnswer] = Field(default_factory=list)
    youtube_url: str = ""
    visibility: ProductVisibility = "public"


Entity = BlogPost | Product

ENTITY_CLASSES: dict[ContentKind, type[BlogPost] | type[Product]] = {
    "blog_post": BlogPost,
    "product": Product,
}

# Fields holding editor-supplied HTML, per kind
RICH_TEXT_FIELDS: dict[ContentKind, tuple[str, ...]] = {
    "blog_post": ("content",),
    "product": ("product_description", "description"),
}

# --- Form submissions ---

class SubmissionMetadata(BaseModel):
    ip_address: str
    user_agent: str = ""
    page_url: str = ""
    referrer: str = ""
    submitted_at: datetime | None = None


class FormSubmission(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    type: FormType
    status: SubmissionStatus = "new"

    full_name: str = ""
    email: str = ""
    phone: str = ""
    country_code: str = ""
    country_name: str = ""
    corporation_number: str | None = None
    company_name: str | None = None
    website: str | None = None
    subject: str | None = None
    message: str | None = None

    # Type-specific payload
    product_id: str | None = None
    product_name: str | None = None
    product_slug: str | None = None
    help_type: str | None = None
    training_interest_type: str | None = None
    preferred_date: str | None = None
    preferred_time: str | None = None

    gdpr_consent: bool
    gdpr_consent_timestamp: datetime | None = None
    gdpr_consent_version: str = "1.0"
    marketing_consent: bool = False

    metadata: SubmissionMetadata

    read_at: datetime | None = None
    read_by: str | None = None
    archived_at: datetime | None = None
    archived_by: str | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
