from __future__ import annotations

import pytest

from kalpvriksha.storage import artifact_path, report_filename, report_slug


@pytest.mark.parametrize(
    "client_name, expected",
    [
        ("Mr. Utkarsh Goyal", "mr_utkarsh_goyal_consultation.pdf"),
        ("A. Test! User", "a_test_user_consultation.pdf"),
        ("Śrī Rāma", "sri_rama_consultation.pdf"),
        ("  !!!  ", "report_consultation.pdf"),
        ("", "report_consultation.pdf"),
    ],
)
def test_report_filename(client_name, expected) -> None:
    assert report_filename(client_name) == expected


def test_slug_is_filesystem_safe() -> None:
    slug = report_slug("Budget / Planner: 2025!")
    assert slug == "budget_planner_2025"


def test_artifact_path_layout(tmp_path) -> None:
    path = artifact_path("mr_goyal", "record", base_dir=tmp_path)
    assert path == tmp_path / "mr_goyal" / "record.json"
    assert path.parent.is_dir()

    flat = artifact_path("mr_goyal", "error", base_dir=tmp_path, include_slug=False)
    assert flat == tmp_path / "error.log"
