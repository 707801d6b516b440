from storefront.api.deps import get_blog_post_service
from storefront.api.routes.content import build_content_router
from storefront.api.schemas import BlogPostWriteRequest
from storefront.components.content import BlogPostFields

router = build_content_router(
    "blog_post",
    get_blog_post_service,
    fields_model=BlogPostFields,
    write_model=BlogPostWriteRequest,
)
