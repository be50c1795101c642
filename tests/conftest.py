"""Shared test fixtures for the mt_migrator test suite.

Both databases are in-memory SQLite with just enough of the Movable Type
and WordPress schemas for the pipelines. WordPress datetime columns are
declared as text because SQLAlchemy's SQLite DATETIME type only binds
datetime objects, while the mappers produce formatted strings (which
MySQL accepts).
"""

from __future__ import annotations

import logging
from typing import Any

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from mt_migrator.core.config import GuidConfig, MigrationConfig
from mt_migrator.core.context import MigrationContext
from mt_migrator.services.store import StoreAdapter
from mt_migrator.services.strategies import IdGuidGenerator
from mt_migrator.utils.formatting import ContentFormatter

MT_SCHEMA = [
    """
    create table mt_category (
        category_id integer primary key,
        category_blog_id integer not null,
        category_label varchar(100) not null,
        category_basename varchar(255),
        category_parent integer,
        category_description text
    )
    """,
    """
    create table mt_author (
        author_id integer primary key,
        author_name varchar(255) not null,
        author_nickname varchar(255),
        author_email varchar(127),
        author_url varchar(255),
        author_created_on datetime,
        author_auth_type varchar(50)
    )
    """,
    """
    create table mt_permission (
        permission_id integer primary key,
        permission_author_id integer not null,
        permission_blog_id integer not null,
        permission_permissions text
    )
    """,
    """
    create table mt_entry (
        entry_id integer primary key,
        entry_blog_id integer not null,
        entry_allow_comments integer,
        entry_allow_pings integer,
        entry_author_id integer not null,
        entry_basename varchar(255),
        entry_comment_count integer,
        entry_created_on datetime,
        entry_class varchar(255) not null,
        entry_convert_breaks varchar(30),
        entry_excerpt text,
        entry_modified_on datetime,
        entry_pinged_urls text,
        entry_status integer not null,
        entry_text text,
        entry_text_more text,
        entry_title varchar(255),
        entry_to_ping_urls text
    )
    """,
    """
    create table mt_placement (
        placement_id integer primary key,
        placement_blog_id integer not null,
        placement_entry_id integer not null,
        placement_category_id integer not null,
        placement_is_primary integer not null default 0
    )
    """,
    """
    create table mt_comment (
        comment_id integer primary key,
        comment_blog_id integer not null,
        comment_entry_id integer not null,
        comment_parent_id integer,
        comment_author varchar(100),
        comment_email varchar(127),
        comment_ip varchar(50),
        comment_url varchar(255),
        comment_text text,
        comment_created_on datetime,
        comment_modified_on datetime,
        comment_visible integer
    )
    """,
    """
    create table mt_asset (
        asset_id integer primary key,
        asset_blog_id integer not null,
        asset_class varchar(255),
        asset_created_by integer,
        asset_created_on datetime,
        asset_description text,
        asset_file_ext varchar(20),
        asset_file_name varchar(255),
        asset_file_path varchar(255),
        asset_label varchar(255),
        asset_mime_type varchar(255),
        asset_modified_by integer,
        asset_modified_on datetime,
        asset_parent integer,
        asset_url varchar(255)
    )
    """,
]

WP_SCHEMA = [
    """
    create table wp_terms (
        term_id integer primary key,
        name varchar(200) not null default '',
        slug varchar(200) not null default '',
        term_group integer not null default 0
    )
    """,
    """
    create table wp_term_taxonomy (
        term_taxonomy_id integer primary key,
        term_id integer not null default 0,
        taxonomy varchar(32) not null default '',
        description text not null default '',
        parent integer not null default 0,
        count integer not null default 0
    )
    """,
    """
    create table wp_termmeta (
        meta_id integer primary key,
        term_id integer not null default 0,
        meta_key varchar(255),
        meta_value text
    )
    """,
    """
    create table wp_users (
        ID integer primary key,
        user_login varchar(60) not null default '',
        user_pass varchar(255) not null default '',
        user_nicename varchar(50) not null default '',
        user_email varchar(100) not null default '',
        user_url varchar(100) not null default '',
        user_registered varchar(19) not null default '0000-00-00 00:00:00',
        user_activation_key varchar(255) not null default '',
        user_status integer not null default 0,
        display_name varchar(250) not null default ''
    )
    """,
    """
    create table wp_usermeta (
        umeta_id integer primary key,
        user_id integer not null default 0,
        meta_key varchar(255),
        meta_value text
    )
    """,
    """
    create table wp_posts (
        ID integer primary key,
        post_author integer not null default 0,
        post_date varchar(19) not null default '0000-00-00 00:00:00',
        post_date_gmt varchar(19) not null default '0000-00-00 00:00:00',
        post_content text not null default '',
        post_title text not null default '',
        post_excerpt text not null default '',
        post_status varchar(20) not null default 'publish',
        comment_status varchar(20) not null default 'open',
        ping_status varchar(20) not null default 'open',
        post_password varchar(255) not null default '',
        post_name varchar(200) not null default '',
        to_ping text not null default '',
        pinged text not null default '',
        post_modified varchar(19) not null default '0000-00-00 00:00:00',
        post_modified_gmt varchar(19) not null default '0000-00-00 00:00:00',
        post_content_filtered text not null default '',
        post_parent integer not null default 0,
        guid varchar(255) not null default '',
        menu_order integer not null default 0,
        post_type varchar(20) not null default 'post',
        post_mime_type varchar(100) not null default '',
        comment_count integer not null default 0
    )
    """,
    """
    create table wp_postmeta (
        meta_id integer primary key,
        post_id integer not null default 0,
        meta_key varchar(255),
        meta_value text
    )
    """,
    """
    create table wp_term_relationships (
        object_id integer not null default 0,
        term_taxonomy_id integer not null default 0,
        term_order integer not null default 0,
        primary key (object_id, term_taxonomy_id)
    )
    """,
    """
    create table wp_comments (
        comment_ID integer primary key,
        comment_post_ID integer not null default 0,
        comment_author text not null default '',
        comment_author_email varchar(100) not null default '',
        comment_author_url varchar(200) not null default '',
        comment_author_IP varchar(100) not null default '',
        comment_date varchar(19) not null default '0000-00-00 00:00:00',
        comment_date_gmt varchar(19) not null default '0000-00-00 00:00:00',
        comment_content text not null default '',
        comment_karma integer not null default 0,
        comment_approved varchar(20) not null default '1',
        comment_agent varchar(255) not null default '',
        comment_type varchar(20) not null default 'comment',
        comment_parent integer not null default 0,
        user_id integer not null default 0
    )
    """,
    """
    create table wp_commentmeta (
        meta_id integer primary key,
        comment_id integer not null default 0,
        meta_key varchar(255),
        meta_value text
    )
    """,
]

# Blog 1 is migrated; blog 2 rows must never show up in WordPress.
MT_ROWS: dict[str, list[dict[str, Any]]] = {
    "mt_category": [
        {
            "category_id": 7,
            "category_blog_id": 1,
            "category_label": "News",
            "category_basename": "news",
            "category_parent": 0,
            "category_description": "Things that happened",
        },
        {
            "category_id": 8,
            "category_blog_id": 1,
            "category_label": "Sports Talk",
            "category_basename": "sports_talk",
            "category_parent": 7,
            "category_description": None,
        },
        {
            "category_id": 9,
            "category_blog_id": 2,
            "category_label": "Elsewhere",
            "category_basename": "elsewhere",
            "category_parent": 0,
            "category_description": None,
        },
    ],
    "mt_author": [
        {
            "author_id": 1,
            "author_name": "Alice",
            "author_nickname": "Alice A.",
            "author_email": "alice@example.com",
            "author_url": "https://alice.example.com",
            "author_created_on": "2008-01-15 09:30:00",
            "author_auth_type": "MT",
        },
        {
            "author_id": 2,
            "author_name": "bob_commenter",
            "author_nickname": "Bob",
            "author_email": "bob@example.com",
            "author_url": None,
            "author_created_on": "2008-02-01 12:00:00",
            "author_auth_type": "TypeKey",
        },
        {
            "author_id": 3,
            "author_name": "carol",
            "author_nickname": None,
            "author_email": "carol@example.com",
            "author_url": None,
            "author_created_on": "2008-03-01 12:00:00",
            "author_auth_type": "MT",
        },
        {
            "author_id": 4,
            "author_name": "Dave Smith",
            "author_nickname": None,
            "author_email": None,
            "author_url": None,
            "author_created_on": "2008-07-04 12:00:00",
            "author_auth_type": "MT",
        },
    ],
    "mt_permission": [
        {
            "permission_id": 1,
            "permission_author_id": 1,
            "permission_blog_id": 1,
            "permission_permissions": "'administer','create_post','edit_all_posts'",
        },
        {
            "permission_id": 2,
            "permission_author_id": 2,
            "permission_blog_id": 1,
            "permission_permissions": "'comment'",
        },
        {
            "permission_id": 3,
            "permission_author_id": 3,
            "permission_blog_id": 2,
            "permission_permissions": "'create_post'",
        },
        {
            "permission_id": 4,
            "permission_author_id": 4,
            "permission_blog_id": 1,
            "permission_permissions": "'create_post','publish_post'",
        },
    ],
    "mt_entry": [
        {
            "entry_id": 10,
            "entry_blog_id": 1,
            "entry_allow_comments": 1,
            "entry_allow_pings": 0,
            "entry_author_id": 1,
            "entry_basename": "hello_world",
            "entry_comment_count": 2,
            "entry_created_on": "2009-03-01 10:00:00",
            "entry_class": "entry",
            "entry_convert_breaks": "__default__",
            "entry_excerpt": "Greetings",
            "entry_modified_on": "2009-07-01 10:00:00",
            "entry_pinged_urls": None,
            "entry_status": 2,
            "entry_text": "line one\nline two",
            "entry_text_more": "<div>raw</div>",
            "entry_title": "Hello World",
            "entry_to_ping_urls": None,
        },
        {
            "entry_id": 11,
            "entry_blog_id": 1,
            "entry_allow_comments": 0,
            "entry_allow_pings": 0,
            "entry_author_id": 4,
            "entry_basename": "about",
            "entry_comment_count": None,
            "entry_created_on": "2009-03-02 10:00:00",
            "entry_class": "page",
            "entry_convert_breaks": "0",
            "entry_excerpt": None,
            "entry_modified_on": None,
            "entry_pinged_urls": None,
            "entry_status": 1,
            "entry_text": "<p>About us</p>",
            "entry_text_more": None,
            "entry_title": "About",
            "entry_to_ping_urls": None,
        },
        {
            "entry_id": 12,
            "entry_blog_id": 1,
            "entry_allow_comments": 1,
            "entry_allow_pings": 1,
            "entry_author_id": 1,
            "entry_basename": "notes",
            "entry_comment_count": 0,
            "entry_created_on": "2009-03-03 10:00:00",
            "entry_class": "entry",
            "entry_convert_breaks": "markdown",
            "entry_excerpt": None,
            "entry_modified_on": "2009-03-03 11:00:00",
            "entry_pinged_urls": None,
            "entry_status": 2,
            "entry_text": "*notes*",
            "entry_text_more": None,
            "entry_title": "Notes",
            "entry_to_ping_urls": None,
        },
        {
            "entry_id": 13,
            "entry_blog_id": 2,
            "entry_allow_comments": 1,
            "entry_allow_pings": 1,
            "entry_author_id": 3,
            "entry_basename": "other_blog",
            "entry_comment_count": 1,
            "entry_created_on": "2009-03-04 10:00:00",
            "entry_class": "entry",
            "entry_convert_breaks": "0",
            "entry_excerpt": None,
            "entry_modified_on": None,
            "entry_pinged_urls": None,
            "entry_status": 2,
            "entry_text": "elsewhere",
            "entry_text_more": None,
            "entry_title": "Other",
            "entry_to_ping_urls": None,
        },
    ],
    "mt_placement": [
        {"placement_id": 1, "placement_blog_id": 1, "placement_entry_id": 10, "placement_category_id": 7},
        {"placement_id": 2, "placement_blog_id": 1, "placement_entry_id": 11, "placement_category_id": 7},
        {"placement_id": 3, "placement_blog_id": 1, "placement_entry_id": 12, "placement_category_id": 7},
        {"placement_id": 4, "placement_blog_id": 1, "placement_entry_id": 10, "placement_category_id": 8},
        {"placement_id": 5, "placement_blog_id": 2, "placement_entry_id": 13, "placement_category_id": 9},
    ],
    "mt_comment": [
        {
            "comment_id": 100,
            "comment_blog_id": 1,
            "comment_entry_id": 10,
            "comment_parent_id": None,
            "comment_author": "Reader",
            "comment_email": "reader@example.com",
            "comment_ip": "10.0.0.1",
            "comment_url": None,
            "comment_text": "Nice post",
            "comment_created_on": "2009-03-01 12:00:00",
            "comment_modified_on": None,
            "comment_visible": 1,
        },
        {
            "comment_id": 101,
            "comment_blog_id": 1,
            "comment_entry_id": 10,
            "comment_parent_id": 100,
            "comment_author": "Spammer",
            "comment_email": None,
            "comment_ip": None,
            "comment_url": "http://spam.example.com",
            "comment_text": "Buy things",
            "comment_created_on": "2009-03-01 13:00:00",
            "comment_modified_on": None,
            "comment_visible": 0,
        },
        {
            "comment_id": 102,
            "comment_blog_id": 2,
            "comment_entry_id": 13,
            "comment_parent_id": None,
            "comment_author": "Someone",
            "comment_email": None,
            "comment_ip": None,
            "comment_url": None,
            "comment_text": "Other blog",
            "comment_created_on": "2009-03-04 12:00:00",
            "comment_modified_on": None,
            "comment_visible": 1,
        },
    ],
    "mt_asset": [
        {
            "asset_id": 1,
            "asset_blog_id": 1,
            "asset_class": "image",
            "asset_created_by": 1,
            "asset_created_on": "2009-03-01 09:00:00",
            "asset_description": "A photo",
            "asset_file_ext": "jpg",
            "asset_file_name": "photo.jpg",
            "asset_file_path": "%r/images/photo.jpg",
            "asset_label": "My Photo_file",
            "asset_mime_type": "image/jpeg",
            "asset_modified_by": None,
            "asset_modified_on": None,
            "asset_parent": None,
            "asset_url": "%r/images/photo.jpg",
        },
        {
            "asset_id": 2,
            "asset_blog_id": 2,
            "asset_class": "file",
            "asset_created_by": 3,
            "asset_created_on": "2009-03-04 09:00:00",
            "asset_description": None,
            "asset_file_ext": "pdf",
            "asset_file_name": "other.pdf",
            "asset_file_path": "%r/other.pdf",
            "asset_label": None,
            "asset_mime_type": "application/pdf",
            "asset_modified_by": None,
            "asset_modified_on": None,
            "asset_parent": None,
            "asset_url": "%r/other.pdf",
        },
    ],
}


def create_schema(engine: Engine, statements: list[str]) -> None:
    with engine.begin() as conn:
        for statement in statements:
            conn.execute(text(statement))


def insert_rows(engine: Engine, table: str, rows: list[dict[str, Any]]) -> None:
    """Insert rows with plain SQL so the values are stored exactly as given."""
    if not rows:
        return
    columns = list(rows[0])
    sql = (
        f"insert into {table} ({', '.join(columns)}) "
        f"values ({', '.join(':' + c for c in columns)})"
    )
    with engine.begin() as conn:
        conn.execute(text(sql), rows)


def fetch_all(engine: Engine, sql: str) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        return [dict(row) for row in conn.execute(text(sql)).mappings()]


@pytest.fixture(autouse=True)
def _reset_loggers():
    """Detach handlers tests add to the mt_migrator and SQLAlchemy loggers."""
    yield
    for name in ("mt_migrator", "sqlalchemy.engine"):
        logger = logging.getLogger(name)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@pytest.fixture()
def source_engine() -> Engine:
    """In-memory Movable Type database with the sample blog data."""
    engine = create_engine("sqlite://")
    create_schema(engine, MT_SCHEMA)
    for table, rows in MT_ROWS.items():
        insert_rows(engine, table, rows)
    yield engine
    engine.dispose()


@pytest.fixture()
def destination_engine() -> Engine:
    """Empty in-memory WordPress database."""
    engine = create_engine("sqlite://")
    create_schema(engine, WP_SCHEMA)
    yield engine
    engine.dispose()


@pytest.fixture()
def migration_config() -> MigrationConfig:
    return MigrationConfig(
        batch_size=2,
        blog_ids=[1],
        guid=GuidConfig(domain="blog.example.com"),
    )


@pytest.fixture()
def context(migration_config, source_engine, destination_engine) -> MigrationContext:
    """Migration context wired to the two in-memory databases."""
    return MigrationContext(
        config=migration_config,
        source=StoreAdapter(source_engine, name="source"),
        destination=StoreAdapter(destination_engine, name="destination"),
        guid_generator=IdGuidGenerator(migration_config.guid.domain),
        content_formatter=ContentFormatter(),
        show_progress=False,
    )


@pytest.fixture()
def wp_fetch(destination_engine):
    """``wp_fetch(sql)`` returns rows from the WordPress database as dicts."""
    return lambda sql: fetch_all(destination_engine, sql)


@pytest.fixture()
def wp_seed(destination_engine):
    """``wp_seed(table, rows)`` pre-populates a WordPress table."""
    return lambda table, rows: insert_rows(destination_engine, table, rows)
