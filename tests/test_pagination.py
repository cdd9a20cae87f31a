from __future__ import annotations

from app.shared.pagination import PaginationParams, build_page


def test_page_points_to_next_slice_while_rows_remain() -> None:
    page = build_page(["a", "b"], total=5, params=PaginationParams(limit=2, offset=2))

    assert page.items == ["a", "b"]
    assert page.next_offset == 4


def test_last_page_has_no_next_offset() -> None:
    page = build_page(["e"], total=5, params=PaginationParams(limit=2, offset=4))

    assert page.next_offset is None


def test_page_past_the_end_is_empty() -> None:
    page = build_page([], total=3, params=PaginationParams(limit=20, offset=40))

    assert page.items == []
    assert page.total == 3
    assert page.next_offset is None
