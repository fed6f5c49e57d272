from types import SimpleNamespace

from app.services.pending_changes import (
    ADMIN_EDITABLE_FIELDS,
    EDITABLE_FIELDS,
    SYSTEM_FIELDS,
    apply_fields,
    drop_required_nulls,
    dropped_keys,
    merge_pending,
    null_required_keys,
    sanitize_patch,
)


def test_sanitize_strips_system_fields():
    patch = {
        "title": "New title",
        "price": 100,
        "is_featured": True,
        "seller_id": "slr_other",
        "workflow_status": "live",
        "pending_changes": {"x": 1},
        "rejection_reason": None,
    }
    out = sanitize_patch(patch)
    assert out == {"title": "New title", "price": 100}
    assert not (set(out) & SYSTEM_FIELDS)


def test_sanitize_drops_unknown_keys():
    assert sanitize_patch({"nonexistent_column": 1, "city": "Pune"}) == {"city": "Pune"}
    assert sanitize_patch(None) == {}


def test_admin_allow_list_keeps_moderation_flags_but_not_identity():
    out = sanitize_patch(
        {"is_featured": True, "is_verified": True, "seller_id": "slr_x", "id": "lst_x"},
        allowed=ADMIN_EDITABLE_FIELDS,
    )
    assert out == {"is_featured": True, "is_verified": True}


def test_dropped_keys_reports_what_was_stripped():
    assert dropped_keys({"title": "a", "is_featured": True, "id": "x"}) == ["id", "is_featured"]


def test_merge_is_last_writer_wins_and_keeps_other_keys():
    first = merge_pending(None, {"price": 1})
    first = merge_pending(first, {"title": "T"})
    second = merge_pending(first, {"price": 2})
    assert second == {"price": 2, "title": "T"}


def test_merge_never_lets_system_keys_into_overlay():
    merged = merge_pending({"price": 1}, {"is_verified": True, "status": "active", "price": 5})
    assert merged == {"price": 5}


def test_merge_returns_new_dict():
    existing = {"price": 1}
    merged = merge_pending(existing, {"title": "x"})
    assert merged is not existing
    assert existing == {"price": 1}


def test_apply_fields_reports_only_real_changes():
    target = SimpleNamespace(title="Old", price=10, city="Pune")
    changes = apply_fields(target, {"title": "New", "price": 10})
    assert changes == {"title": ("Old", "New")}
    assert target.title == "New"


def test_editable_and_system_fields_are_disjoint():
    assert not (EDITABLE_FIELDS & SYSTEM_FIELDS)


def test_required_nulls_detected_and_dropped():
    patch = {"title": None, "price": None, "description": None, "city": "Pune"}

    assert null_required_keys(patch) == ["price", "title"]
    assert drop_required_nulls(patch) == {"description": None, "city": "Pune"}
    assert null_required_keys(None) == []
