import builtins
import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from storefront.adapters.clock import SystemClock
from storefront.components.content.models import ContentFilters
from storefront.components.content.ports import TimePort
from storefront.components.forms.models import SubmissionFilters
from storefront.domain.entities import (
    ENTITY_CLASSES,
    PUBLISH_TYPES,
    SUBMISSION_STATUSES,
    BlogPost,
    Category,
    CategoryKind,
    ContentKind,
    FormSubmission,
    Product,
)
from storefront.domain.errors import ConflictError, DatabaseError

logger = logging.getLogger(__name__)

Entity = BlogPost | Product

CONTENT_TABLES: dict[ContentKind, str] = {
    "blog_post": "blog_posts",
    "product": "products",
}

CONTENT_SORT_COLUMNS = {
    "created_at": "created_at",
    "title": "title COLLATE NOCASE",
    "published_at": "published_at",
}

SUBMISSION_SORT_COLUMNS = {
    "created_at": "created_at",
    "full_name": "full_name COLLATE NOCASE",
}


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def iso(dt: datetime | None) -> str | None:
    """UTC ISO-8601 with fixed precision so stored values compare lexically."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def _order_by(sort: str, columns: dict[str, str]) -> str:
    direction = "DESC" if sort.startswith("-") else "ASC"
    column = columns.get(sort.lstrip("-"), "created_at")
    return f"{column} {direction}, id ASC"


class SQLiteRepoBase:
    def __init__(self, db_path: str, clock: TimePort | None = None):
        self.db_path = db_path
        self.clock = clock if clock is not None else SystemClock()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _session(self, action: str) -> Iterator[sqlite3.Connection]:
        """Connection scope: commit on success, rollback and wrap on failure."""
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "UNIQUE" in str(e) and "slug" in str(e):
                raise ConflictError("Slug already exists") from e
            logger.exception("Integrity error during %s", action)
            raise DatabaseError(f"Failed to {action}") from e
        except sqlite3.Error as e:
            conn.rollback()
            logger.exception("Database error during %s", action)
            raise DatabaseError(f"Failed to {action}") from e
        finally:
            conn.close()


class SQLiteContentRepo(SQLiteRepoBase):
    """
    Blog posts or products stored as JSON documents.

    slug / publish_type / timestamps are mirrored into columns for lookups,
    uniqueness and ordering; doc_json is the source of truth.
    """

    def __init__(self, db_path: str, kind: ContentKind, clock: TimePort | None = None):
        super().__init__(db_path, clock)
        self.kind = kind
        self.table = CONTENT_TABLES[kind]
        self._entity_cls = ENTITY_CLASSES[kind]

    def _to_entity(self, row: dict[str, Any]) -> Entity:
        return self._entity_cls.model_validate_json(row["doc_json"])

    def _row_values(self, entity: Entity) -> tuple[Any, ...]:
        return (
            entity.slug,
            entity.title,
            entity.publish_type,
            entity.author_id,
            iso(entity.published_at),
            iso(entity.created_at),
            iso(entity.updated_at),
            entity.model_dump_json(),
        )

    def get_by_id(self, item_id: UUID) -> Entity | None:
        with self._session(f"load {self.kind}") as conn:
            row = conn.execute(
                f"SELECT doc_json FROM {self.table} WHERE id = ?", (str(item_id),)
            ).fetchone()
        return self._to_entity(row) if row else None

    def get_by_slug(self, slug: str) -> Entity | None:
        with self._session(f"load {self.kind}") as conn:
            row = conn.execute(
                f"SELECT doc_json FROM {self.table} WHERE slug = ?", (slug,)
            ).fetchone()
        return self._to_entity(row) if row else None

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        sql = f"SELECT 1 FROM {self.table} WHERE slug = ?"
        params: list[Any] = [slug]
        if exclude_id is not None:
            sql += " AND id != ?"
            params.append(str(exclude_id))
        with self._session(f"check {self.kind} slug") as conn:
            return conn.execute(sql, params).fetchone() is not None

    def create(self, entity: Entity) -> Entity:
        now = self.clock.now_utc()
        entity = entity.model_copy(update={"created_at": now, "updated_at": now})
        with self._session(f"create {self.kind}") as conn:
            conn.execute(
                f"""
                INSERT INTO {self.table} (
                    id, slug, title, publish_type, author_id,
                    published_at, created_at, updated_at, doc_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (str(entity.id), *self._row_values(entity)),
            )
        return entity

    def update_by_id(self, item_id: UUID, changes: dict[str, Any]) -> Entity | None:
        existing = self.get_by_id(item_id)
        if existing is None:
            return None

        merged = {**existing.model_dump(), **changes}
        merged["id"] = existing.id
        merged["created_at"] = existing.created_at
        merged["updated_at"] = self.clock.now_utc()
        entity = self._entity_cls.model_validate(merged)

        with self._session(f"update {self.kind}") as conn:
            cursor = conn.execute(
                f"""
                UPDATE {self.table} SET
                    slug = ?, title = ?, publish_type = ?, author_id = ?,
                    published_at = ?, created_at = ?, updated_at = ?, doc_json = ?
                WHERE id = ?
                """,
                (*self._row_values(entity), str(item_id)),
            )
            if cursor.rowcount == 0:
                return None
        return entity

    def delete_by_id(self, item_id: UUID) -> Entity | None:
        existing = self.get_by_id(item_id)
        if existing is None:
            return None
        with self._session(f"delete {self.kind}") as conn:
            conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (str(item_id),))
        return existing

    def list(self, filters: ContentFilters) -> tuple[builtins.list[Entity], int]:
        where: builtins.list[str] = []
        params: builtins.list[Any] = []

        if filters.publish_type:
            where.append("publish_type = ?")
            params.append(filters.publish_type)
        if filters.author_id:
            where.append("author_id = ?")
            params.append(filters.author_id)
        if filters.category_id:
            where.append(
                "EXISTS (SELECT 1 FROM json_each(doc_json, '$.categories') WHERE value = ?)"
            )
            params.append(str(filters.category_id))
        if filters.tag:
            where.append("EXISTS (SELECT 1 FROM json_each(doc_json, '$.tags') WHERE value = ?)")
            params.append(filters.tag)
        if filters.search:
            where.append("(title LIKE ? OR slug LIKE ?)")
            term = f"%{filters.search}%"
            params.extend([term, term])

        clause = f"WHERE {' AND '.join(where)}" if where else ""
        order = _order_by(filters.sort, CONTENT_SORT_COLUMNS)

        with self._session(f"list {self.kind}") as conn:
            total = conn.execute(
                f"SELECT COUNT(*) AS n FROM {self.table} {clause}", params
            ).fetchone()["n"]
            rows = conn.execute(
                f"SELECT doc_json FROM {self.table} {clause} ORDER BY {order} LIMIT ? OFFSET ?",
                [*params, filters.limit, filters.offset],
            ).fetchall()
        return [self._to_entity(r) for r in rows], total

    def stats(self) -> dict[str, int]:
        with self._session(f"count {self.kind}") as conn:
            rows = conn.execute(
                f"SELECT publish_type, COUNT(*) AS n FROM {self.table} GROUP BY publish_type"
            ).fetchall()
        counts = {t: 0 for t in PUBLISH_TYPES}
        for row in rows:
            counts[row["publish_type"]] = row["n"]
        counts["total"] = sum(counts.values())
        return counts


class SQLiteCategoryRepo(SQLiteRepoBase):
    """Categories of one kind (blog or product)."""

    def __init__(self, db_path: str, kind: CategoryKind, clock: TimePort | None = None):
        super().__init__(db_path, clock)
        self.kind = kind

    def _to_category(self, row: dict[str, Any]) -> Category:
        return Category(
            id=UUID(row["id"]),
            kind=row["kind"],
            name=row["name"],
            slug=row["slug"],
            description=row["description"],
            parent_id=UUID(row["parent_id"]) if row["parent_id"] else None,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def find_category_by_id(self, category_id: UUID) -> Category | None:
        with self._session("load category") as conn:
            row = conn.execute(
                "SELECT * FROM categories WHERE id = ? AND kind = ?",
                (str(category_id), self.kind),
            ).fetchone()
        return self._to_category(row) if row else None

    def get_by_slug(self, slug: str) -> Category | None:
        with self._session("load category") as conn:
            row = conn.execute(
                "SELECT * FROM categories WHERE slug = ? AND kind = ?", (slug, self.kind)
            ).fetchone()
        return self._to_category(row) if row else None

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        sql = "SELECT 1 FROM categories WHERE slug = ? AND kind = ?"
        params: list[Any] = [slug, self.kind]
        if exclude_id is not None:
            sql += " AND id != ?"
            params.append(str(exclude_id))
        with self._session("check category slug") as conn:
            return conn.execute(sql, params).fetchone() is not None

    def list_all(self) -> list[Category]:
        with self._session("list categories") as conn:
            rows = conn.execute(
                "SELECT * FROM categories WHERE kind = ? ORDER BY name COLLATE NOCASE",
                (self.kind,),
            ).fetchall()
        return [self._to_category(r) for r in rows]

    def create(self, category: Category) -> Category:
        now = self.clock.now_utc()
        category = category.model_copy(update={"created_at": now, "updated_at": now})
        with self._session("create category") as conn:
            conn.execute(
                """
                INSERT INTO categories (
                    id, kind, name, slug, description, parent_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(category.id),
                    category.kind,
                    category.name,
                    category.slug,
                    category.description,
                    str(category.parent_id) if category.parent_id else None,
                    iso(category.created_at),
                    iso(category.updated_at),
                ),
            )
        return category

    def delete_by_id(self, category_id: UUID) -> Category | None:
        existing = self.find_category_by_id(category_id)
        if existing is None:
            return None
        with self._session("delete category") as conn:
            conn.execute("DELETE FROM categories WHERE id = ?", (str(category_id),))
        return existing


class SQLiteFormSubmissionRepo(SQLiteRepoBase):
    def _to_submission(self, row: dict[str, Any]) -> FormSubmission:
        return FormSubmission.model_validate_json(row["doc_json"])

    def _row_values(self, s: FormSubmission) -> tuple[Any, ...]:
        return (
            s.type,
            s.status,
            s.full_name,
            s.email,
            s.product_id,
            s.metadata.ip_address,
            iso(s.metadata.submitted_at or s.created_at),
            iso(s.created_at),
            iso(s.updated_at),
            s.model_dump_json(),
        )

    def create(self, submission: FormSubmission) -> FormSubmission:
        now = self.clock.now_utc()
        submission = submission.model_copy(update={"created_at": now, "updated_at": now})
        with self._session("create form submission") as conn:
            conn.execute(
                """
                INSERT INTO form_submissions (
                    id, type, status, full_name, email, product_id, ip_address,
                    submitted_at, created_at, updated_at, doc_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (str(submission.id), *self._row_values(submission)),
            )
        return submission

    def get_by_id(self, submission_id: UUID) -> FormSubmission | None:
        with self._session("load form submission") as conn:
            row = conn.execute(
                "SELECT doc_json FROM form_submissions WHERE id = ?", (str(submission_id),)
            ).fetchone()
        return self._to_submission(row) if row else None

    def update_by_id(
        self, submission_id: UUID, changes: dict[str, Any]
    ) -> FormSubmission | None:
        existing = self.get_by_id(submission_id)
        if existing is None:
            return None
        merged = {**existing.model_dump(), **changes, "updated_at": self.clock.now_utc()}
        submission = FormSubmission.model_validate(merged)
        with self._session("update form submission") as conn:
            conn.execute(
                """
                UPDATE form_submissions SET
                    type = ?, status = ?, full_name = ?, email = ?, product_id = ?,
                    ip_address = ?, submitted_at = ?, created_at = ?, updated_at = ?,
                    doc_json = ?
                WHERE id = ?
                """,
                (*self._row_values(submission), str(submission_id)),
            )
        return submission

    def delete_by_id(self, submission_id: UUID) -> FormSubmission | None:
        existing = self.get_by_id(submission_id)
        if existing is None:
            return None
        with self._session("delete form submission") as conn:
            conn.execute("DELETE FROM form_submissions WHERE id = ?", (str(submission_id),))
        return existing

    def _where(self, filters: SubmissionFilters) -> tuple[str, list[Any]]:
        where: list[str] = []
        params: list[Any] = []
        if filters.type:
            where.append("type = ?")
            params.append(filters.type)
        if filters.status:
            where.append("status = ?")
            params.append(filters.status)
        if filters.product_id:
            where.append("product_id = ?")
            params.append(filters.product_id)
        if filters.date_from:
            where.append("created_at >= ?")
            params.append(iso(filters.date_from))
        if filters.date_to:
            where.append("created_at <= ?")
            params.append(iso(filters.date_to))
        if filters.ids:
            where.append(f"id IN ({', '.join('?' for _ in filters.ids)})")
            params.extend(filters.ids)
        if filters.search:
            where.append(
                "(full_name LIKE ? OR email LIKE ? OR json_extract(doc_json, '$.message') LIKE ?)"
            )
            term = f"%{filters.search}%"
            params.extend([term, term, term])
        clause = f"WHERE {' AND '.join(where)}" if where else ""
        return clause, params

    def list(self, filters: SubmissionFilters) -> tuple[builtins.list[FormSubmission], int]:
        clause, params = self._where(filters)
        order = _order_by(filters.sort, SUBMISSION_SORT_COLUMNS)
        with self._session("list form submissions") as conn:
            total = conn.execute(
                f"SELECT COUNT(*) AS n FROM form_submissions {clause}", params
            ).fetchone()["n"]
            rows = conn.execute(
                f"SELECT doc_json FROM form_submissions {clause} "
                f"ORDER BY {order} LIMIT ? OFFSET ?",
                [*params, filters.limit, filters.offset],
            ).fetchall()
        return [self._to_submission(r) for r in rows], total

    def find_for_export(self, filters: SubmissionFilters) -> builtins.list[FormSubmission]:
        clause, params = self._where(filters)
        with self._session("export form submissions") as conn:
            rows = conn.execute(
                f"SELECT doc_json FROM form_submissions {clause} ORDER BY created_at DESC",
                params,
            ).fetchall()
        return [self._to_submission(r) for r in rows]

    def count_by_ip_since(self, ip_address: str, since: datetime) -> int:
        with self._session("count form submissions") as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM form_submissions "
                "WHERE ip_address = ? AND submitted_at >= ?",
                (ip_address, iso(since)),
            ).fetchone()
        return int(row["n"])

    def stats(self) -> dict[str, Any]:
        with self._session("count form submissions") as conn:
            status_rows = conn.execute(
                "SELECT status, COUNT(*) AS n FROM form_submissions GROUP BY status"
            ).fetchall()
            type_rows = conn.execute(
                "SELECT type, COUNT(*) AS n FROM form_submissions GROUP BY type"
            ).fetchall()
        by_status = {s: 0 for s in SUBMISSION_STATUSES}
        by_status.update({r["status"]: r["n"] for r in status_rows})
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_type": {r["type"]: r["n"] for r in type_rows},
        }
