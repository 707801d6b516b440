import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path

from storefront.adapters.clock import SystemClock
from storefront.adapters.sqlite.migrator import SQLiteMigrator
from storefront.adapters.sqlite.repos import SQLiteCategoryRepo, SQLiteFormSubmissionRepo
from storefront.api.auth_utils import AuthContext
from storefront.api.deps import Settings
from storefront.components.forms import FormSubmissionService, SubmissionFilters
from storefront.components.rate_limit import SubmissionRateLimiter
from storefront.domain.entities import Category
from storefront.domain.slugs import generate_slug

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_seed_categories(settings: Settings, args: argparse.Namespace) -> None:
    repo = SQLiteCategoryRepo(settings.db_path, args.kind)
    created = 0
    for name in args.names:
        slug = generate_slug(name)
        if not slug:
            logger.warning("Skipping %r: empty slug", name)
            continue
        if repo.slug_exists(slug):
            logger.info("Category %s/%s already exists", args.kind, slug)
            continue
        category = repo.create(Category(kind=args.kind, name=name, slug=slug))
        print(f"{category.id}  {category.slug}")
        created += 1
    print(f"Created {created} {args.kind} categories.")


def handle_export_submissions(settings: Settings, args: argparse.Namespace) -> None:
    repo = SQLiteFormSubmissionRepo(settings.db_path)
    clock = SystemClock()
    service = FormSubmissionService(repo, SubmissionRateLimiter(repo, clock), clock)

    body = service.export_csv(SubmissionFilters(status=args.status, type=args.type))
    if args.out:
        Path(args.out).write_text(body, encoding="utf-8")
        print(f"Wrote {args.out}")
    else:
        sys.stdout.write(body)


def handle_dev_token(settings: Settings, args: argparse.Namespace) -> None:
    auth = AuthContext(secret_key=settings.secret_key)
    print(auth.issue(args.user_id, expires_delta=timedelta(hours=args.hours)))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Storefront CMS CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # seed-categories
    seed_parser = subparsers.add_parser("seed-categories", help="Create categories by name")
    seed_parser.add_argument("kind", choices=["blog", "product"])
    seed_parser.add_argument("names", nargs="+")

    # export-submissions
    export_parser = subparsers.add_parser("export-submissions", help="Export form submissions")
    export_parser.add_argument("--status", choices=["new", "read", "archived"])
    export_parser.add_argument("--type", dest="type")
    export_parser.add_argument("--out", help="Write CSV to this file instead of stdout")

    # dev-token
    token_parser = subparsers.add_parser("dev-token", help="Mint an admin token for local use")
    token_parser.add_argument("user_id")
    token_parser.add_argument("--hours", type=int, default=24)

    return parser


HANDLERS = {
    "migrate": handle_migrate,
    "seed-categories": handle_seed_categories,
    "export-submissions": handle_export_submissions,
    "dev-token": handle_dev_token,
}


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    HANDLERS[args.command](Settings(), args)


if __name__ == "__main__":
    main()
