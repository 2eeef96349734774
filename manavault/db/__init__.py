from manavault.db.database import get_session, init_db
from manavault.db.operations import (
    add_share,
    bulk_create_entries,
    can_view_shared,
    collection_to_model,
    count_entries,
    create_collection,
    create_entry,
    delete_collection,
    delete_entry,
    entry_to_model,
    get_collection,
    get_collection_by_slug,
    get_entry,
    list_collections,
    list_entries,
    list_shares,
    remove_share,
    set_visibility,
    update_collection,
    update_entry,
)

__all__ = [
    "add_share",
    "bulk_create_entries",
    "can_view_shared",
    "collection_to_model",
    "count_entries",
    "create_collection",
    "create_entry",
    "delete_collection",
    "delete_entry",
    "entry_to_model",
    "get_collection",
    "get_collection_by_slug",
    "get_entry",
    "get_session",
    "init_db",
    "list_collections",
    "list_entries",
    "list_shares",
    "remove_share",
    "set_visibility",
    "update_collection",
    "update_entry",
]
