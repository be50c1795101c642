"""Constants shared across the migration tool."""

from __future__ import annotations

# Movable Type tables
MT_CATEGORY_TABLE = "mt_category"
MT_AUTHOR_TABLE = "mt_author"
MT_PERMISSION_TABLE = "mt_permission"
MT_ENTRY_TABLE = "mt_entry"
MT_PLACEMENT_TABLE = "mt_placement"
MT_COMMENT_TABLE = "mt_comment"
MT_ASSET_TABLE = "mt_asset"

MT_TABLES = (
    MT_CATEGORY_TABLE,
    MT_AUTHOR_TABLE,
    MT_PERMISSION_TABLE,
    MT_ENTRY_TABLE,
    MT_PLACEMENT_TABLE,
    MT_COMMENT_TABLE,
    MT_ASSET_TABLE,
)

# WordPress tables, without the configurable prefix
WP_TERMS = "terms"
WP_TERM_TAXONOMY = "term_taxonomy"
WP_TERMMETA = "termmeta"
WP_USERS = "users"
WP_USERMETA = "usermeta"
WP_POSTS = "posts"
WP_POSTMETA = "postmeta"
WP_TERM_RELATIONSHIPS = "term_relationships"
WP_COMMENTS = "comments"
WP_COMMENTMETA = "commentmeta"

WP_TABLES = (
    WP_TERMS,
    WP_TERM_TAXONOMY,
    WP_TERMMETA,
    WP_USERS,
    WP_USERMETA,
    WP_POSTS,
    WP_POSTMETA,
    WP_TERM_RELATIONSHIPS,
    WP_COMMENTS,
    WP_COMMENTMETA,
)

DEFAULT_BATCH_SIZE = 100
DEFAULT_TIMEZONE = "US/Central"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TABLE_PREFIX = "wp_"
DEFAULT_GUID_DOMAIN = "https://www.example.com/"

# Author permissions that qualify an mt_author row as a blog author
AUTHOR_PERMISSIONS = ("administer", "create_post")

# Serialized PHP array granting the administrator role
ADMINISTRATOR_CAPABILITIES = 'a:1:{s:13:"administrator";s:1:"1";}'
ADMINISTRATOR_USER_LEVEL = "10"

CATEGORY_TAXONOMY = "category"

# entry_convert_breaks values
CONVERT_NONE = "0"
CONVERT_DEFAULT = "__default__"
KNOWN_UNHANDLED_FORMATS = (
    "markdown",
    "markdown_with_smartypants",
    "richtext",
    "textile_2",
)

# Block-level tags that stop a paragraph from being wrapped in <p>
BLOCK_TAGS = (
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "table",
    "ol",
    "dl",
    "ul",
    "menu",
    "dir",
    "p",
    "pre",
    "center",
    "form",
    "fieldset",
    "select",
    "blockquote",
    "address",
    "div",
    "hr",
)
