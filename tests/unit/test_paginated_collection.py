"""Unit tests for PaginatedCollection."""

from supplejack.domain.paginated_collection import PaginatedCollection


def test_middle_page():
    page = PaginatedCollection(["a", "b"], current_page=2, per_page=2, total_count=5)

    assert page == ["a", "b"]
    assert page.total_pages == 3
    assert page.num_pages == 3
    assert page.limit_value == 2
    assert page.offset == 2
    assert page.previous_page == 1
    assert page.next_page == 3
    assert not page.first_page
    assert not page.last_page
    assert not page.out_of_bounds


def test_first_and_last_page():
    first = PaginatedCollection([], current_page=1, per_page=10, total_count=10)
    assert first.first_page
    assert first.last_page
    assert first.previous_page is None
    assert first.next_page is None


def test_out_of_bounds():
    page = PaginatedCollection([], current_page=4, per_page=10, total_count=25)
    assert page.out_of_bounds
    assert page.last_page


def test_zero_per_page_has_no_pages():
    page = PaginatedCollection([], current_page=1, per_page=0, total_count=25)
    assert page.total_pages == 0
    assert not page.has_next


def test_total_aliases_share_a_value():
    page = PaginatedCollection([], total_count=5)
    page.total_entries = 40
    assert page.total_count == 40
    page.total_count = 60
    assert page.total_entries == 60
    assert page.total_pages == 3
