"""
Entity pipelines.

One class per entity type, each providing the delete / select / insert
triple the batch transfer engine drives. Selection is restricted to the
configured Movable Type blogs; mapping is delegated to ``mappers``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from mt_migrator.constants import (
    AUTHOR_PERMISSIONS,
    MT_ASSET_TABLE,
    MT_AUTHOR_TABLE,
    MT_CATEGORY_TABLE,
    MT_COMMENT_TABLE,
    MT_ENTRY_TABLE,
    MT_PERMISSION_TABLE,
    MT_PLACEMENT_TABLE,
    WP_COMMENTMETA,
    WP_COMMENTS,
    WP_POSTMETA,
    WP_POSTS,
    WP_TERM_RELATIONSHIPS,
    WP_TERM_TAXONOMY,
    WP_TERMMETA,
    WP_TERMS,
    WP_USERMETA,
    WP_USERS,
)
from mt_migrator.services.mappers import (
    map_asset_to_attachment,
    map_author_to_user,
    map_author_to_usermeta,
    map_category_to_term,
    map_category_to_term_taxonomy,
    map_comment,
    map_entry_to_post,
    map_placement_to_relationship,
)
from mt_migrator.types import Row
from mt_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from mt_migrator.core.context import MigrationContext


class TablePipeline:
    """Shared plumbing: blog-filtered, keyset-paginated source selects."""

    name: ClassVar[str]
    primary_key: ClassVar[str]
    source_table: ClassVar[str]
    blog_column: ClassVar[str]
    source_fields: ClassVar[tuple[str, ...]]
    # WordPress tables (unprefixed) cleared before the transfer, in order
    clears: ClassVar[tuple[str, ...]] = ()

    def __init__(self, ctx: MigrationContext) -> None:
        self.ctx = ctx

    def delete(self) -> None:
        for table in self.clears:
            deleted = self.ctx.destination.delete(self.ctx.wp_table(table))
            log_with_context(
                logging.DEBUG,
                f"Deleted {deleted} rows from {self.ctx.wp_table(table)}",
                entity=self.name,
            )

    def select(self, last_id: int) -> list[Row]:
        return self.ctx.source.select(
            self.source_table,
            self.source_fields,
            filters={self.blog_column: self.ctx.blog_ids},
            after=(self.primary_key, last_id),
            order_by=self.primary_key,
            limit=self.ctx.batch_size,
        )

    def insert(self, rows: list[Row]) -> None:
        raise NotImplementedError


class CategoryPipeline(TablePipeline):
    """mt_category -> wp_terms + wp_term_taxonomy."""

    name = "categories"
    primary_key = "category_id"
    source_table = MT_CATEGORY_TABLE
    blog_column = "category_blog_id"
    source_fields = (
        "category_basename",
        "category_description",
        "category_id",
        "category_label",
        "category_parent",
    )
    clears = (WP_TERM_TAXONOMY, WP_TERMMETA, WP_TERMS)

    def insert(self, rows: list[Row]) -> None:
        destination = self.ctx.destination
        destination.insert(
            self.ctx.wp_table(WP_TERMS), [map_category_to_term(row) for row in rows]
        )
        destination.insert(
            self.ctx.wp_table(WP_TERM_TAXONOMY),
            [map_category_to_term_taxonomy(row) for row in rows],
        )


_PERMISSION_MATCH = " or ".join(
    f"p.permission_permissions like :perm_{name}" for name in AUTHOR_PERMISSIONS
)

# Blog authors are the mt_author rows holding an authoring permission on a
# migrated blog; registered commenters live in the same table and are skipped.
AUTHOR_SELECT_SQL = f"""
select
    a.author_id,
    a.author_name,
    a.author_nickname,
    a.author_email,
    a.author_url,
    a.author_created_on,
    a.author_auth_type
from {MT_AUTHOR_TABLE} a
where a.author_id > :last_id
and exists (
    select 1 from {MT_PERMISSION_TABLE} p
    where p.permission_author_id = a.author_id
    and p.permission_blog_id in :blog_ids
    and ({_PERMISSION_MATCH})
)
order by a.author_id asc
limit :limit
"""


class UserPipeline(TablePipeline):
    """mt_author (authors only) -> wp_users + wp_usermeta, all as administrators."""

    name = "users"
    primary_key = "author_id"
    source_table = MT_AUTHOR_TABLE
    clears = (WP_USERMETA, WP_USERS)

    def select(self, last_id: int) -> list[Row]:
        params = {
            "last_id": last_id,
            "blog_ids": list(self.ctx.blog_ids),
            "limit": self.ctx.batch_size,
        }
        params.update(
            {f"perm_{name}": f"%{name}%" for name in AUTHOR_PERMISSIONS}
        )
        return self.ctx.source.raw_query(
            AUTHOR_SELECT_SQL, params, expanding=("blog_ids",)
        )

    def insert(self, rows: list[Row]) -> None:
        timestamps = self.ctx.timestamps
        self.ctx.destination.insert(
            self.ctx.wp_table(WP_USERS),
            [map_author_to_user(row, timestamps) for row in rows],
        )
        self.ctx.destination.insert(
            self.ctx.wp_table(WP_USERMETA),
            [
                meta
                for row in rows
                for meta in map_author_to_usermeta(row, self.ctx.config.table_prefix)
            ],
        )


class PostPipeline(TablePipeline):
    """mt_entry -> wp_posts (posts and pages).

    Clears all of wp_posts, including revisions, attachments and menu items,
    so that entry ids can be reused as post ids.
    """

    name = "posts"
    primary_key = "entry_id"
    source_table = MT_ENTRY_TABLE
    blog_column = "entry_blog_id"
    source_fields = (
        "entry_allow_comments",
        "entry_allow_pings",
        "entry_author_id",
        "entry_basename",
        "entry_comment_count",
        "entry_created_on",
        "entry_class",
        "entry_convert_breaks",
        "entry_excerpt",
        "entry_id",
        "entry_modified_on",
        "entry_pinged_urls",
        "entry_status",
        "entry_text",
        "entry_text_more",
        "entry_title",
        "entry_to_ping_urls",
    )
    clears = (WP_POSTMETA, WP_POSTS)

    def insert(self, rows: list[Row]) -> None:
        timestamps = self.ctx.timestamps
        posts = [
            map_entry_to_post(
                row,
                timestamps,
                self.ctx.guid_generator,
                self.ctx.content_formatter,
            )
            for row in rows
        ]
        self.ctx.destination.insert(self.ctx.wp_table(WP_POSTS), posts)


class PostCategoryPipeline(TablePipeline):
    """mt_placement -> wp_term_relationships."""

    name = "post_categories"
    primary_key = "placement_id"
    source_table = MT_PLACEMENT_TABLE
    blog_column = "placement_blog_id"
    source_fields = (
        "placement_category_id",
        "placement_entry_id",
        "placement_id",
    )
    clears = (WP_TERM_RELATIONSHIPS,)

    def insert(self, rows: list[Row]) -> None:
        self.ctx.destination.insert(
            self.ctx.wp_table(WP_TERM_RELATIONSHIPS),
            [map_placement_to_relationship(row) for row in rows],
        )


class CommentPipeline(TablePipeline):
    """mt_comment -> wp_comments. Trackbacks and pingbacks are not migrated."""

    name = "comments"
    primary_key = "comment_id"
    source_table = MT_COMMENT_TABLE
    blog_column = "comment_blog_id"
    source_fields = (
        "comment_author",
        "comment_created_on",
        "comment_email",
        "comment_entry_id",
        "comment_id",
        "comment_ip",
        "comment_modified_on",
        "comment_parent_id",
        "comment_text",
        "comment_url",
        "comment_visible",
    )
    clears = (WP_COMMENTS, WP_COMMENTMETA)

    def insert(self, rows: list[Row]) -> None:
        timestamps = self.ctx.timestamps
        self.ctx.destination.insert(
            self.ctx.wp_table(WP_COMMENTS),
            [map_comment(row, timestamps) for row in rows],
        )


class AssetPipeline(TablePipeline):
    """mt_asset -> wp_posts attachments.

    Nothing is cleared: attachments live in wp_posts, which the post
    pipeline already emptied. Asset files and asset tags are not migrated.
    """

    name = "assets"
    primary_key = "asset_id"
    source_table = MT_ASSET_TABLE
    blog_column = "asset_blog_id"
    source_fields = (
        "asset_class",
        "asset_created_by",
        "asset_created_on",
        "asset_description",
        "asset_file_ext",
        "asset_file_name",
        "asset_file_path",
        "asset_id",
        "asset_label",
        "asset_mime_type",
        "asset_modified_by",
        "asset_modified_on",
        "asset_parent",
        "asset_url",
    )

    def insert(self, rows: list[Row]) -> None:
        timestamps = self.ctx.timestamps
        self.ctx.destination.insert(
            self.ctx.wp_table(WP_POSTS),
            [map_asset_to_attachment(row, timestamps) for row in rows],
        )

