import pytest

from campus_scheduler.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_required_columns_cover_schedule_table():
    assert {"day_of_week", "start_time", "end_time", "room_number", "status"} <= bootstrap.REQUIRED_COLUMNS[
        "class_schedules"
    ]
