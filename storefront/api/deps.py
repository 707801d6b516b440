import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from storefront.adapters.clock import SystemClock
from storefront.adapters.sqlite.migrator import DEFAULT_MIGRATIONS_DIR
from storefront.adapters.sqlite.repos import (
    SQLiteCategoryRepo,
    SQLiteContentRepo,
    SQLiteFormSubmissionRepo,
)
from storefront.api.auth_utils import DEFAULT_SECRET_KEY, AuthContext, CurrentUser
from storefront.app_shell.config import forms_config, sanitizer_config
from storefront.components.content import ContentService
from storefront.components.forms import FormSubmissionService
from storefront.components.rate_limit import SubmissionRateLimiter
from storefront.domain.entities import CategoryKind
from storefront.rules.loader import load_rules
from storefront.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("STOREFRONT_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "storefront.db")
        self.rules_path = Path(
            os.environ.get("STOREFRONT_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.migrations_dir = Path(
            os.environ.get("STOREFRONT_MIGRATIONS_DIR", str(DEFAULT_MIGRATIONS_DIR))
        )
        self.secret_key = os.environ.get("STOREFRONT_SECRET_KEY", DEFAULT_SECRET_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Repos ---
def get_blog_post_repo(settings: Settings = Depends(get_settings)) -> SQLiteContentRepo:
    return SQLiteContentRepo(settings.db_path, "blog_post", clock=get_clock())


def get_product_repo(settings: Settings = Depends(get_settings)) -> SQLiteContentRepo:
    return SQLiteContentRepo(settings.db_path, "product", clock=get_clock())


def get_blog_category_repo(settings: Settings = Depends(get_settings)) -> SQLiteCategoryRepo:
    return SQLiteCategoryRepo(settings.db_path, "blog", clock=get_clock())


def get_product_category_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteCategoryRepo:
    return SQLiteCategoryRepo(settings.db_path, "product", clock=get_clock())


def get_category_repo(
    kind: CategoryKind,
    settings: Settings = Depends(get_settings),
) -> SQLiteCategoryRepo:
    """Category repo selected by the `{kind}` path parameter."""
    return SQLiteCategoryRepo(settings.db_path, kind, clock=get_clock())


def get_form_submission_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteFormSubmissionRepo:
    return SQLiteFormSubmissionRepo(settings.db_path, clock=get_clock())


# --- Component Services ---
def get_blog_post_service(
    repo: SQLiteContentRepo = Depends(get_blog_post_repo),
    categories: SQLiteCategoryRepo = Depends(get_blog_category_repo),
    rules: Rules = Depends(get_rules),
) -> ContentService:
    return ContentService(
        "blog_post",
        repo=repo,
        categories=categories,
        clock=get_clock(),
        sanitizer=sanitizer_config(rules),
        slug_max_length=rules.content.slug_max_length,
    )


def get_product_service(
    repo: SQLiteContentRepo = Depends(get_product_repo),
    categories: SQLiteCategoryRepo = Depends(get_product_category_repo),
    rules: Rules = Depends(get_rules),
) -> ContentService:
    return ContentService(
        "product",
        repo=repo,
        categories=categories,
        clock=get_clock(),
        sanitizer=sanitizer_config(rules),
        slug_max_length=rules.content.slug_max_length,
    )


def get_rate_limiter(
    repo: SQLiteFormSubmissionRepo = Depends(get_form_submission_repo),
    rules: Rules = Depends(get_rules),
) -> SubmissionRateLimiter:
    return SubmissionRateLimiter.from_rules(repo, get_clock(), rules.rate_limits.form_submission)


def get_form_submission_service(
    repo: SQLiteFormSubmissionRepo = Depends(get_form_submission_repo),
    rate_limiter: SubmissionRateLimiter = Depends(get_rate_limiter),
    rules: Rules = Depends(get_rules),
) -> FormSubmissionService:
    return FormSubmissionService(
        repo=repo,
        rate_limiter=rate_limiter,
        clock=get_clock(),
        config=forms_config(rules),
    )


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


@lru_cache
def get_auth_context() -> AuthContext:
    """One verifier per process."""
    return AuthContext(secret_key=get_settings().secret_key)


def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    auth: AuthContext = Depends(get_auth_context),
) -> CurrentUser:
    # 1. Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token:
        token = cookie_token.removeprefix("Bearer ").strip()

    # 2. Authorization header, via oauth2_scheme
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 3. Decode
    user = auth.verify(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Admin dashboard routes: a valid token carrying the admin role."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return user


def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
