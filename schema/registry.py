"""Tables the forum needs before it can serve requests.

Names follow the snake-case form of each record type. No table references
another, so the order below is only the order tables are reported in.
"""

from __future__ import annotations

from typing import Tuple

from schema.descriptors import Column, TableSchema


def _id() -> Column:
    return Column("id", "int", not_null=True, primary_key=True, autoincrement=True)


def _varchar(name: str, length: int = 100, **kwargs) -> Column:
    return Column(name, "varchar", length=length, **kwargs)


def _timestamp(name: str) -> Column:
    return Column(name, "varchar", length=40)


SESSION = TableSchema(
    "session",
    (
        Column("session_key", "char", length=64, not_null=True, primary_key=True),
        Column("session_data", "blob"),
        Column("session_expiry", "int", not_null=True),
    ),
)

TOPIC = TableSchema(
    "topic",
    (
        _id(),
        _varchar("author", index=True),
        _varchar("node_id", index=True),
        _varchar("node_name"),
        _varchar("tab", index=True),
        _varchar("title", 300),
        _timestamp("created_time"),
        Column("tags", "varchar", length=200),
        _varchar("last_reply_user"),
        _timestamp("last_reply_time"),
        Column("reply_count", "int"),
        Column("up_count", "int"),
        Column("hit_count", "int"),
        Column("hot", "int"),
        Column("favorite_count", "int"),
        _timestamp("home_page_top_time"),
        _timestamp("tab_top_time"),
        _timestamp("node_top_time"),
        Column("deleted", "bool"),
        Column("is_hidden", "bool"),
        Column("content", "mediumtext"),
    ),
)

REPLY = TableSchema(
    "reply",
    (
        _id(),
        _varchar("author", index=True),
        Column("topic_id", "int", index=True),
        Column("parent_id", "int"),
        Column("tags", "varchar", length=200),
        _timestamp("created_time"),
        Column("deleted", "bool"),
        Column("is_hidden", "bool"),
        Column("thanks", "int"),
        Column("edit_content", "mediumtext"),
        Column("content", "mediumtext"),
    ),
)

POSTER = TableSchema(
    "poster",
    (
        _varchar("id", not_null=True, primary_key=True),
        _varchar("advertiser"),
        _varchar("link"),
        _varchar("picture_link"),
        _varchar("state"),
    ),
)

TRANSLATOR = TableSchema(
    "translator",
    (
        _varchar("id", not_null=True, primary_key=True),
        _varchar("name"),
        _varchar("translator"),
        _varchar("key", 200),
        Column("enable", "bool"),
    ),
)

NODE = TableSchema(
    "node",
    (
        _varchar("id", not_null=True, primary_key=True),
        _varchar("name"),
        _timestamp("created_time"),
        _varchar("desc", 500),
        Column("extra", "text"),
        _varchar("image", 200),
        _varchar("background_image", 200),
        _varchar("header_image", 200),
        _varchar("background_color", 20),
        _varchar("background_repeat", 20),
        _varchar("tab", index=True),
        _varchar("parent_node"),
        _varchar("plane_id", index=True),
        Column("hot", "int"),
        Column("sorter", "int"),
        Column("ranking", "int"),
        _varchar("moderators", 200),
        _varchar("mail_list", 100),
        Column("is_hidden", "bool"),
        _varchar("git_repo", 200),
    ),
)

FAVORITES = TableSchema(
    "favorites",
    (
        _id(),
        _varchar("member_id", index=True),
        Column("favorites_type", "int", not_null=True),
        _varchar("object_id", index=True),
        _timestamp("created_time"),
    ),
)

TAB = TableSchema(
    "tab",
    (
        _varchar("id", not_null=True, primary_key=True),
        _varchar("name"),
        Column("sorter", "int"),
        _timestamp("created_time"),
        _varchar("default_node"),
        Column("home_page", "bool"),
    ),
)

NOTIFICATION = TableSchema(
    "notification",
    (
        _id(),
        Column("notification_type", "int"),
        Column("object_id", "int"),
        _timestamp("created_time"),
        _varchar("sender_id"),
        _varchar("receiver_id", index=True),
        Column("status", "int"),
    ),
)

BASIC_INFO = TableSchema(
    "basic_info",
    (
        _varchar("id", not_null=True, primary_key=True),
        Column("value", "text"),
    ),
)

PLANE = TableSchema(
    "plane",
    (
        _varchar("id", 50, not_null=True, primary_key=True),
        _varchar("name", 50),
        Column("sorter", "int"),
        _timestamp("created_time"),
        _varchar("image", 200),
        _varchar("background_color", 20),
        _varchar("color", 20),
        Column("visible", "bool"),
    ),
)

CONSUMPTION_RECORD = TableSchema(
    "consumption_record",
    (
        _id(),
        _varchar("receiver_id", index=True),
        _varchar("consumer_id", index=True),
        Column("object_id", "int"),
        Column("amount", "int"),
        Column("balance", "int"),
        Column("consumption_type", "int"),
        _timestamp("created_time"),
    ),
)

BROWSE_RECORD = TableSchema(
    "browse_record",
    (
        _id(),
        _varchar("member_id", index=True),
        _varchar("record_type"),
        _varchar("object_id"),
        _timestamp("created_time"),
        Column("expired", "bool"),
    ),
)

UPLOAD_FILE_RECORD = TableSchema(
    "upload_file_record",
    (
        _id(),
        _varchar("file_name", 200),
        _varchar("file_path", 300),
        _varchar("file_url", 300),
        _varchar("file_type"),
        _varchar("file_ext", 20),
        _varchar("member_id", index=True),
        _timestamp("created_time"),
        Column("size", "bigint"),
        Column("deleted", "bool"),
    ),
)

SENSITIVE_WORD = TableSchema(
    "sensitive_word",
    (_varchar("word", not_null=True, primary_key=True),),
)

FRONT_CONF = TableSchema(
    "front_conf",
    (
        _varchar("id", not_null=True, primary_key=True),
        Column("value", "text"),
        _varchar("field"),
        Column("tags", "varchar", length=200),
    ),
)

FORUM_SCHEMAS: Tuple[TableSchema, ...] = (
    SESSION,
    TOPIC,
    REPLY,
    POSTER,
    TRANSLATOR,
    NODE,
    FAVORITES,
    TAB,
    NOTIFICATION,
    BASIC_INFO,
    PLANE,
    CONSUMPTION_RECORD,
    BROWSE_RECORD,
    UPLOAD_FILE_RECORD,
    SENSITIVE_WORD,
    FRONT_CONF,
)


def registry_table_names() -> Tuple[str, ...]:
    return tuple(table.name for table in FORUM_SCHEMAS)
