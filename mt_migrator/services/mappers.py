"""
Field mappers from Movable Type rows to WordPress rows.

Every mapper is a pure function from one source row to one or more
destination rows. Identifiers are carried over unchanged wherever WordPress
accepts an explicit id (everything except attachments). Columns that may be
NULL in Movable Type but not in WordPress get a fixed default; enumerated
columns go through the lookup tables below and an unknown value raises
``MappingError`` rather than being coerced.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import TYPE_CHECKING, Any, Mapping

from mt_migrator.constants import (
    ADMINISTRATOR_CAPABILITIES,
    ADMINISTRATOR_USER_LEVEL,
    CATEGORY_TAXONOMY,
)
from mt_migrator.exceptions import MappingError
from mt_migrator.types import (
    MTAsset,
    MTAuthor,
    MTCategory,
    MTComment,
    MTEntry,
    MTPlacement,
    Timestamp,
    WPComment,
    WPMeta,
    WPPost,
    WPTerm,
    WPTermRelationship,
    WPTermTaxonomy,
    WPUser,
)
from mt_migrator.utils.formatting import sanitize_title_with_dashes

if TYPE_CHECKING:
    from mt_migrator.services.strategies import ContentFormatStrategy, GuidGenerator

# entry_allow_comments -> comment_status
COMMENT_STATUS = {0: "closed", 1: "open"}

# entry_allow_pings -> ping_status
PING_STATUS = {0: "closed", 1: "open"}

# entry_class -> post_type
POST_TYPE = {"entry": "post", "page": "page"}

# entry_status (1 Draft, 2 Publish, 3 Review, 4 Future, 5 Junk) -> post_status
POST_STATUS = {
    1: "draft",
    2: "publish",
    3: "pending",
    4: "future",
    5: "trash",
}

# comment_visible -> comment_approved
COMMENT_APPROVED = {0: "0", 1: "1"}

# WordPress's value for "no date"
ZERO_DATE = "0000-00-00 00:00:00"

_ASSET_SLUG_SEPARATORS = re.compile(r"[_\s]+")


def lookup(table: Mapping[Any, str], value: Any, field: str) -> str:
    """
    Translate an enumerated source value.

    Raises:
        MappingError: If the value has no entry in the table
    """
    # bool is an int subclass; None and other types never match
    if value is None or value not in table:
        raise MappingError(
            f"No mapping for {field}={value!r} (expected one of {sorted(table)})",
            field=field,
            value=value,
        )
    return table[value]


def basename_to_slug(basename: str | None) -> str:
    """Movable Type basenames use underscores where WordPress slugs use dashes."""
    return (basename or "").replace("_", "-")


def label_to_slug(label: str | None) -> str:
    """Slug for an asset: runs of underscores and whitespace become a dash."""
    return _ASSET_SLUG_SEPARATORS.sub("-", label or "")


@dataclass(frozen=True)
class TimestampFormatter:
    """Formats source datetimes as WordPress local and GMT strings.

    Source datetimes are naive local times in ``tz``. Strings are parsed
    with ``date_format`` (falling back to ISO 8601). ``None``, blank strings
    and MySQL zero dates become the WordPress zero date.
    """

    tz: tzinfo
    date_format: str

    def parse(self, value: Timestamp, field: str = "timestamp") -> datetime:
        if isinstance(value, datetime):
            return value
        try:
            return datetime.strptime(str(value), self.date_format)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(str(value))
        except ValueError as e:
            raise MappingError(
                f"Cannot parse {field}={value!r} as a datetime", field=field, value=value
            ) from e

    @staticmethod
    def is_missing(value: Timestamp | None) -> bool:
        if value is None:
            return True
        if isinstance(value, datetime):
            return False
        text = str(value).strip()
        # PyMySQL hands zero dates back as strings
        return not text or text.startswith("0000-00-00")

    def _localize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value.astimezone(self.tz)

    def local(self, value: Timestamp | None, field: str = "timestamp") -> str:
        if self.is_missing(value):
            return ZERO_DATE
        return self._localize(self.parse(value, field)).strftime(self.date_format)

    def gmt(self, value: Timestamp | None, field: str = "timestamp") -> str:
        if self.is_missing(value):
            return ZERO_DATE
        localized = self._localize(self.parse(value, field))
        return localized.astimezone(timezone.utc).strftime(self.date_format)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def map_category_to_term(row: MTCategory) -> WPTerm:
    """mt_category -> wp_terms."""
    return {
        "term_id": row["category_id"],
        "name": row["category_label"],
        "slug": basename_to_slug(row["category_basename"]).lower(),
        "term_group": 0,
    }


def map_category_to_term_taxonomy(row: MTCategory) -> WPTermTaxonomy:
    """mt_category -> wp_term_taxonomy, reusing the category id for both ids."""
    return {
        "term_taxonomy_id": row["category_id"],
        "term_id": row["category_id"],
        "taxonomy": CATEGORY_TAXONOMY,
        "description": row.get("category_description") or "",
        "parent": row.get("category_parent") or 0,
        # Filled in by the taxonomy count pass once posts are linked
        "count": 0,
    }


# ---------------------------------------------------------------------------
# Authors
# ---------------------------------------------------------------------------


def map_author_to_user(row: MTAuthor, timestamps: TimestampFormatter) -> WPUser:
    """mt_author -> wp_users. Passwords are not migrated."""
    login = row["author_name"].lower()
    return {
        "ID": row["author_id"],
        "user_login": login,
        "user_pass": "",
        "user_nicename": sanitize_title_with_dashes(login),
        "user_email": row.get("author_email") or "",
        "user_url": row.get("author_url") or "",
        # WordPress keeps registration time in GMT
        "user_registered": timestamps.gmt(
            row.get("author_created_on"), "author_created_on"
        ),
        "user_activation_key": "",
        "user_status": 0,
        "display_name": row.get("author_nickname") or row["author_name"],
    }


def map_author_to_usermeta(row: MTAuthor, table_prefix: str) -> list[WPMeta]:
    """mt_author -> wp_usermeta rows making the user an administrator."""
    return [
        {
            "user_id": row["author_id"],
            "meta_key": f"{table_prefix}capabilities",
            "meta_value": ADMINISTRATOR_CAPABILITIES,
        },
        {
            "user_id": row["author_id"],
            "meta_key": f"{table_prefix}user_level",
            "meta_value": ADMINISTRATOR_USER_LEVEL,
        },
    ]


# ---------------------------------------------------------------------------
# Entries (posts and pages)
# ---------------------------------------------------------------------------


def map_entry_to_post(
    row: MTEntry,
    timestamps: TimestampFormatter,
    guid_generator: GuidGenerator,
    content_formatter: ContentFormatStrategy,
) -> WPPost:
    """mt_entry -> wp_posts for both posts and pages."""
    created_on = row.get("entry_created_on")
    modified_on = row.get("entry_modified_on")
    if timestamps.is_missing(modified_on):
        modified_on = created_on

    return {
        "ID": row["entry_id"],
        "post_author": row["entry_author_id"],
        "post_date": timestamps.local(created_on, "entry_created_on"),
        "post_date_gmt": timestamps.gmt(created_on, "entry_created_on"),
        "post_content": content_formatter(
            row.get("entry_text"),
            row.get("entry_text_more"),
            row.get("entry_convert_breaks"),
        ),
        "post_title": row.get("entry_title") or "",
        "post_excerpt": row.get("entry_excerpt") or "",
        "post_status": lookup(POST_STATUS, row["entry_status"], "entry_status"),
        "comment_status": lookup(
            COMMENT_STATUS, row["entry_allow_comments"], "entry_allow_comments"
        ),
        "ping_status": lookup(PING_STATUS, row["entry_allow_pings"], "entry_allow_pings"),
        "post_password": "",
        # Keeps Movable Type URLs reproducible under WordPress permalinks
        "post_name": basename_to_slug(row.get("entry_basename")),
        "to_ping": "",
        "pinged": "",
        "post_modified": timestamps.local(modified_on, "entry_modified_on"),
        "post_modified_gmt": timestamps.gmt(modified_on, "entry_modified_on"),
        "post_content_filtered": "",
        "post_parent": 0,
        # Must match what Movable Type published or feed readers see new posts
        "guid": guid_generator(row),
        "menu_order": 0,
        "post_type": lookup(POST_TYPE, row["entry_class"], "entry_class"),
        "post_mime_type": "",
        "comment_count": row.get("entry_comment_count") or 0,
    }


# ---------------------------------------------------------------------------
# Placements (post categories)
# ---------------------------------------------------------------------------


def map_placement_to_relationship(row: MTPlacement) -> WPTermRelationship:
    """mt_placement -> wp_term_relationships."""
    return {
        "object_id": row["placement_entry_id"],
        "term_taxonomy_id": row["placement_category_id"],
        "term_order": 0,
    }


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


def map_comment(row: MTComment, timestamps: TimestampFormatter) -> WPComment:
    """mt_comment -> wp_comments, detached from any registered commenter."""
    created_on = row.get("comment_created_on")
    return {
        "comment_ID": row["comment_id"],
        "comment_post_ID": row["comment_entry_id"],
        "comment_author": row.get("comment_author") or "",
        "comment_author_email": row.get("comment_email") or "",
        "comment_author_url": row.get("comment_url") or "",
        "comment_author_IP": row.get("comment_ip") or "",
        "comment_date": timestamps.local(created_on, "comment_created_on"),
        "comment_date_gmt": timestamps.gmt(created_on, "comment_created_on"),
        "comment_content": row.get("comment_text") or "",
        "comment_karma": 0,
        "comment_approved": lookup(
            COMMENT_APPROVED, row["comment_visible"], "comment_visible"
        ),
        "comment_agent": "",
        "comment_type": "comment",
        "comment_parent": row.get("comment_parent_id") or 0,
        "user_id": 0,
    }


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


def map_asset_to_attachment(row: MTAsset, timestamps: TimestampFormatter) -> WPPost:
    """mt_asset -> wp_posts attachment. No ID: WordPress assigns one."""
    created_on = row.get("asset_created_on")
    modified_on = row.get("asset_modified_on")
    if timestamps.is_missing(modified_on):
        modified_on = created_on
    title = row.get("asset_label") or row.get("asset_file_name") or ""

    return {
        "post_author": row.get("asset_created_by") or 0,
        "post_date": timestamps.local(created_on, "asset_created_on"),
        "post_date_gmt": timestamps.gmt(created_on, "asset_created_on"),
        "post_content": row.get("asset_description") or "",
        "post_title": title,
        "post_excerpt": "",
        "post_status": "inherit",
        "comment_status": "closed",
        "ping_status": "closed",
        "post_password": "",
        "post_name": label_to_slug(title),
        "to_ping": "",
        "pinged": "",
        "post_modified": timestamps.local(modified_on, "asset_modified_on"),
        "post_modified_gmt": timestamps.gmt(modified_on, "asset_modified_on"),
        "post_content_filtered": "",
        "post_parent": 0,
        # Needs rewriting if the files end up somewhere else
        "guid": row["asset_url"],
        "menu_order": 0,
        "post_type": "attachment",
        "post_mime_type": row.get("asset_mime_type") or "",
        "comment_count": 0,
    }
