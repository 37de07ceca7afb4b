from datetime import datetime

import pytest

from pagination import MAX_WINDOW_VALUE, coerce_positive, paginate
from queries import video_feed


@pytest.mark.parametrize("value,expected", [
    (None, 3), ("", 3), ("abc", 3), ("0", 3), ("-2", 3), (0, 3),
    ("2", 2), (5, 5), ("4.0", 4),
    ("inf", 3), ("-inf", 3), ("1e400", 3), ("nan", 3),
])
def test_coerce_positive(value, expected):
    assert coerce_positive(value, 3) == expected


def test_huge_parameters_are_capped():
    assert coerce_positive("1e20", 3) == MAX_WINDOW_VALUE
    assert coerce_positive(10 ** 30, 3) == MAX_WINDOW_VALUE
    assert (MAX_WINDOW_VALUE - 1) * MAX_WINDOW_VALUE < 2 ** 63


def test_pages_are_slices_of_the_full_result(db, make_user, make_video):
    owner = make_user()
    for i in range(7):
        make_video(owner, title=f"clip {i}", views=i * 10)

    query = video_feed(sort_by="views", sort_type="asc")
    full = [v["title"] for v in query.fetch(db)]
    assert full == [f"clip {i}" for i in range(7)]

    for page in (1, 2, 3):
        result = paginate(db, query, page, 3)
        assert [v["title"] for v in result.docs] == full[(page - 1) * 3:page * 3]
        assert result.totalDocs == 7
        assert result.totalPages == 3
        assert result.hasNextPage == (page * 3 < 7)
        assert result.hasPrevPage == (page > 1)


def test_page_past_the_end_is_empty(db, make_user, make_video):
    owner = make_user()
    make_video(owner, title="only")
    result = paginate(db, video_feed(), 4, 10)
    assert result.docs == []
    assert result.totalDocs == 1
    assert not result.hasNextPage
    assert result.hasPrevPage


def test_defaults_apply_to_bad_parameters(db, make_user, make_video):
    owner = make_user()
    for i in range(12):
        make_video(owner, title=f"v{i}")
    result = paginate(db, video_feed(), "first", "many")
    assert (result.page, result.limit) == (1, 10)
    assert len(result.docs) == 10
    assert result.hasNextPage


def test_ties_are_broken_by_insertion_order(db, make_user, make_video):
    owner = make_user()
    same_time = datetime(2024, 1, 1, 8, 0, 0)
    ids = [make_video(owner, title=f"tie {i}", views=5, created_at=same_time) for i in range(5)]

    query = video_feed(sort_by="views", sort_type="desc")
    seen = []
    for page in (1, 2, 3):
        seen.extend(v["id"] for v in paginate(db, query, page, 2).docs)
    assert seen == [str(i) for i in ids]
    # repeated calls against unchanged data return the same window
    assert paginate(db, query, 2, 2).docs == paginate(db, query, 2, 2).docs


def test_to_dict_uses_the_listing_key(db, make_user, make_video):
    owner = make_user()
    make_video(owner)
    body = paginate(db, video_feed(), 1, 5).to_dict("videos")
    assert set(body) == {"videos", "page", "limit", "totalDocs", "totalPages", "hasNextPage", "hasPrevPage"}
