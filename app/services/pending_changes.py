from __future__ import annotations

from typing import Any, Iterable, Mapping

# Closed set of fields a seller may change. Anything else in a patch is dropped,
# so a newly added system column is protected without touching this module.
EDITABLE_FIELDS = frozenset({
    "title", "description",
    "property_type", "transaction_type", "category", "project_id",
    "price", "price_per_sqft", "area",
    "bedrooms", "bathrooms", "balconies", "floor", "total_floors",
    "facing", "furnishing", "age_of_property", "possession_status",
    "address", "locality", "city", "state", "pincode", "latitude", "longitude",
    "amenities", "highlights", "nearby_places", "youtube_video_url",
})

# Admins edit directly and may additionally moderate these flags.
ADMIN_EDITABLE_FIELDS = EDITABLE_FIELDS | frozenset({"is_verified", "is_featured", "expires_at"})

# Never settable by a seller, whichever path the patch takes.
SYSTEM_FIELDS = frozenset({
    "id", "seller_id", "status", "workflow_status",
    "is_verified", "is_featured",
    "view_count", "inquiry_count", "favorite_count",
    "published_at", "expires_at", "approved_at", "approved_by",
    "pending_changes", "rejection_reason",
    "created_at", "updated_at", "created_by", "updated_by",
    "slug",
})

# Backed by NOT NULL columns; a patch may omit them but never set them to null.
NON_NULLABLE_FIELDS = frozenset({
    "title", "city", "property_type", "transaction_type",
    "price", "area", "address", "state",
    "is_verified", "is_featured",
})


def sanitize_patch(
    patch: Mapping[str, Any] | None,
    *,
    allowed: Iterable[str] = EDITABLE_FIELDS,
) -> dict[str, Any]:
    """
    Keep only allow-listed keys of a caller-supplied patch.

    Used for the direct-apply path, the overlay path and again when an overlay
    is applied on approval, so all three see the same field set.
    """
    allowed = frozenset(allowed)
    return {k: v for k, v in (patch or {}).items() if k in allowed}


def dropped_keys(patch: Mapping[str, Any] | None, *, allowed: Iterable[str] = EDITABLE_FIELDS) -> list[str]:
    allowed = frozenset(allowed)
    return sorted(k for k in (patch or {}) if k not in allowed)


def null_required_keys(fields: Mapping[str, Any] | None) -> list[str]:
    return sorted(k for k, v in (fields or {}).items() if v is None and k in NON_NULLABLE_FIELDS)


def drop_required_nulls(fields: Mapping[str, Any] | None) -> dict[str, Any]:
    return {k: v for k, v in (fields or {}).items() if not (v is None and k in NON_NULLABLE_FIELDS)}


def merge_pending(existing: Mapping[str, Any] | None, patch: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Shallow last-writer-wins union of the current overlay and a new patch.

    Repeated edits accumulate; a key set earlier survives unless the new patch
    sets it again. Returns a new dict so the JSON column sees a new value.
    """
    merged = dict(sanitize_patch(existing))
    merged.update(sanitize_patch(patch))
    return merged


def apply_fields(target: Any, fields: Mapping[str, Any]) -> dict[str, tuple[Any, Any]]:
    """
    Set attributes on a listing and return {field: (old, new)} for those that changed.
    Callers sanitize first; this function does not filter.
    """
    changes: dict[str, tuple[Any, Any]] = {}
    for name, value in fields.items():
        old = getattr(target, name)
        if old == value:
            continue
        setattr(target, name, value)
        changes[name] = (old, value)
    return changes
