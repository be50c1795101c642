"""Shared type definitions for the Movable Type to WordPress migration tool.

Provides TypedDicts for the row shapes flowing through the pipelines:
Movable Type source rows as selected from the source store, and WordPress
destination rows as handed to the destination store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, TypedDict, Union

# Datetime columns come back as datetime objects from most drivers, but as
# strings from some (and from hand-built rows in tests).
Timestamp = Union[datetime, str]

Row = dict[str, Any]

# ---------------------------------------------------------------------------
# Movable Type source rows
# ---------------------------------------------------------------------------


class MTCategory(TypedDict, total=False):
    """A row from ``mt_category``."""

    category_id: int
    category_label: str
    category_basename: str
    category_parent: int | None
    category_description: str | None


class MTAuthor(TypedDict, total=False):
    """A row from ``mt_author`` (restricted to blog authors)."""

    author_id: int
    author_name: str
    author_nickname: str | None
    author_email: str | None
    author_url: str | None
    author_created_on: Timestamp
    author_auth_type: str | None


class MTEntry(TypedDict, total=False):
    """A row from ``mt_entry`` (posts and pages)."""

    entry_id: int
    entry_allow_comments: int
    entry_allow_pings: int
    entry_author_id: int
    entry_basename: str
    entry_comment_count: int | None
    entry_created_on: Timestamp
    entry_class: str
    entry_convert_breaks: str | None
    entry_excerpt: str | None
    entry_modified_on: Timestamp
    entry_pinged_urls: str | None
    entry_status: int
    entry_text: str | None
    entry_text_more: str | None
    entry_title: str | None
    entry_to_ping_urls: str | None


class MTPlacement(TypedDict, total=False):
    """A row from ``mt_placement`` (entry to category junction)."""

    placement_id: int
    placement_entry_id: int
    placement_category_id: int


class MTComment(TypedDict, total=False):
    """A row from ``mt_comment``."""

    comment_id: int
    comment_entry_id: int
    comment_parent_id: int | None
    comment_author: str | None
    comment_email: str | None
    comment_ip: str | None
    comment_url: str | None
    comment_text: str | None
    comment_created_on: Timestamp
    comment_modified_on: Timestamp | None
    comment_visible: int


class MTAsset(TypedDict, total=False):
    """A row from ``mt_asset``."""

    asset_id: int
    asset_class: str | None
    asset_created_by: int | None
    asset_created_on: Timestamp
    asset_description: str | None
    asset_file_ext: str | None
    asset_file_name: str | None
    asset_file_path: str | None
    asset_label: str | None
    asset_mime_type: str | None
    asset_modified_by: int | None
    asset_modified_on: Timestamp | None
    asset_parent: int | None
    asset_url: str


# ---------------------------------------------------------------------------
# WordPress destination rows
# ---------------------------------------------------------------------------


class WPTerm(TypedDict):
    """A row for ``wp_terms``."""

    term_id: int
    name: str
    slug: str
    term_group: int


class WPTermTaxonomy(TypedDict):
    """A row for ``wp_term_taxonomy``."""

    term_taxonomy_id: int
    term_id: int
    taxonomy: str
    description: str
    parent: int
    count: int


class WPUser(TypedDict):
    """A row for ``wp_users``."""

    ID: int
    user_login: str
    user_pass: str
    user_nicename: str
    user_email: str
    user_url: str
    user_registered: str
    user_activation_key: str
    user_status: int
    display_name: str


class WPMeta(TypedDict):
    """A row for ``wp_usermeta`` (and the other key/value meta tables)."""

    user_id: int
    meta_key: str
    meta_value: str


class WPPost(TypedDict, total=False):
    """A row for ``wp_posts``. ``ID`` is absent for attachments."""

    ID: int
    post_author: int
    post_date: str
    post_date_gmt: str
    post_content: str
    post_title: str
    post_excerpt: str
    post_status: str
    comment_status: str
    ping_status: str
    post_password: str
    post_name: str
    to_ping: str
    pinged: str
    post_modified: str
    post_modified_gmt: str
    post_content_filtered: str
    post_parent: int
    guid: str
    menu_order: int
    post_type: str
    post_mime_type: str
    comment_count: int


class WPTermRelationship(TypedDict):
    """A row for ``wp_term_relationships``."""

    object_id: int
    term_taxonomy_id: int
    term_order: int


class WPComment(TypedDict):
    """A row for ``wp_comments``."""

    comment_ID: int
    comment_post_ID: int
    comment_author: str
    comment_author_email: str
    comment_author_url: str
    comment_author_IP: str
    comment_date: str
    comment_date_gmt: str
    comment_content: str
    comment_karma: int
    comment_approved: str
    comment_agent: str
    comment_type: str
    comment_parent: int
    user_id: int
