"""Tests for the library query engine and folder rows."""

import pytest

from playshelf.db import queries
from playshelf.db.views import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    SortKey,
    get_folder_thumbnails,
    query_videos,
)


@pytest.fixture
def library(add_video):
    """A small library spread over sibling folders with a shared prefix."""
    return {
        "root": add_video("root.mp4", created_at=100, views=5, duration=30.0),
        "action": add_video("Action/a.mp4", created_at=200, views=1, duration=90.0),
        "action90s": add_video(
            "Action/90s/b.mp4", created_at=300, views=3, release_date="1995-05-01"
        ),
        "figures": add_video(
            "ActionFigures/c.mp4", created_at=400, views=2, tags="toys, review"
        ),
        "hidden": add_video(".secret/d.mp4", created_at=500, channel="Hidden Ch"),
    }


def _ids(page) -> list[str]:
    return [v.id for v in page.items]


class TestFolderScope:
    def test_includes_descendants(self, db_conn, library) -> None:
        page = query_videos(db_conn, folder="Action")
        assert set(_ids(page)) == {library["action"].id, library["action90s"].id}

    def test_prefix_sibling_excluded(self, db_conn, library) -> None:
        """Selecting "Action" never returns videos from "ActionFigures"."""
        page = query_videos(db_conn, folder="Action")
        assert library["figures"].id not in _ids(page)

    def test_case_sensitive(self, db_conn, library) -> None:
        assert query_videos(db_conn, folder="action").total_count == 0

    def test_nested_folder(self, db_conn, library) -> None:
        page = query_videos(db_conn, folder="Action/90s")
        assert _ids(page) == [library["action90s"].id]

    def test_root_folder_name(self, db_conn, library) -> None:
        page = query_videos(db_conn, folder="Local Library")
        assert _ids(page) == [library["root"].id]


class TestFilters:
    def test_search_is_case_insensitive(self, db_conn, library) -> None:
        assert _ids(query_videos(db_conn, search="TOYS")) == [library["figures"].id]

    def test_search_matches_channel_and_filename(self, db_conn, library) -> None:
        assert _ids(query_videos(db_conn, search="hidden ch")) == [
            library["hidden"].id
        ]
        assert _ids(query_videos(db_conn, search="root.MP4")) == [library["root"].id]

    def test_search_treats_wildcards_literally(self, db_conn, library) -> None:
        assert query_videos(db_conn, search="%").total_count == 0
        assert query_videos(db_conn, search="_").total_count == 0

    def test_hide_hidden(self, db_conn, library) -> None:
        assert library["hidden"].id in _ids(query_videos(db_conn, hide_hidden=False))
        assert library["hidden"].id not in _ids(
            query_videos(db_conn, hide_hidden=True)
        )

    def test_favorites_only(self, db_conn, library) -> None:
        queries.set_favorite_flag(db_conn, library["action"].id, True)
        assert _ids(query_videos(db_conn, favorites_only=True)) == [
            library["action"].id
        ]

    def test_playlist_membership(self, db_conn, library) -> None:
        queries.insert_playlist(db_conn, "pl-1", "Mine", "t0")
        queries.add_playlist_member(db_conn, "pl-1", library["root"].id, "t1")
        page = query_videos(db_conn, playlist_id="pl-1")
        assert _ids(page) == [library["root"].id]
        assert query_videos(db_conn, playlist_id="pl-missing").total_count == 0

    def test_filters_combine_with_and(self, db_conn, library) -> None:
        queries.set_favorite_flag(db_conn, library["figures"].id, True)
        queries.set_favorite_flag(db_conn, library["action"].id, True)
        page = query_videos(db_conn, folder="Action", favorites_only=True)
        assert _ids(page) == [library["action"].id]

    def test_history_only_is_most_recent_first(self, db_conn, library) -> None:
        """History ordering ignores the requested sort."""
        queries.upsert_history(db_conn, library["root"].id, "t1")
        queries.upsert_history(db_conn, library["figures"].id, "t2")
        queries.upsert_history(db_conn, library["root"].id, "t3")

        page = query_videos(db_conn, history_only=True, sort=SortKey.NAME_ASC)
        assert _ids(page) == [library["root"].id, library["figures"].id]


class TestSorting:
    def test_default_is_newest_first(self, db_conn, library) -> None:
        page = query_videos(db_conn)
        assert _ids(page)[0] == library["hidden"].id
        assert _ids(page)[-1] == library["root"].id

    def test_views_desc(self, db_conn, library) -> None:
        page = query_videos(db_conn, sort=SortKey.VIEWS_DESC)
        assert _ids(page)[0] == library["root"].id

    def test_unknown_durations_sort_last(self, db_conn, library) -> None:
        for sort in (SortKey.DURATION_ASC, SortKey.DURATION_DESC):
            page = query_videos(db_conn, sort=sort)
            durations = [v.duration for v in page.items]
            assert durations[:2] == sorted(
                [30.0, 90.0], reverse=sort is SortKey.DURATION_DESC
            )
            assert durations[2:] == [None, None, None]

    def test_name_sort_ignores_case(self, db_conn, add_video) -> None:
        add_video("b.mp4", display_name="banana")
        add_video("a.mp4", display_name="Apple")
        page = query_videos(db_conn, sort=SortKey.NAME_ASC)
        names = [v.display_name for v in page.items]
        assert names == ["Apple", "banana"]

    def test_parse_unknown_sort_uses_default(self) -> None:
        assert SortKey.parse("sideways") is SortKey.CREATED_DESC
        assert SortKey.parse(None) is SortKey.CREATED_DESC
        assert SortKey.parse(" Views_Desc ") is SortKey.VIEWS_DESC


class TestPagination:
    def test_pages_cover_every_match_once(self, db_conn, add_video) -> None:
        """Walking every page yields each match exactly once."""
        for i in range(23):
            # Equal timestamps force the id tiebreaker
            add_video(f"clip{i:02d}.mp4", created_at=1000 + (i % 3))

        seen: list[str] = []
        first = query_videos(db_conn, page=1, page_size=5)
        assert first.total_count == 23
        assert first.total_pages == 5
        for page_number in range(1, first.total_pages + 1):
            seen.extend(_ids(query_videos(db_conn, page=page_number, page_size=5)))

        assert len(seen) == 23
        assert len(set(seen)) == 23

    def test_page_past_end_is_empty(self, db_conn, library) -> None:
        page = query_videos(db_conn, page=99, page_size=10)
        assert page.items == []
        assert page.total_count == len(library)

    def test_page_size_is_clamped(self, db_conn, library) -> None:
        assert query_videos(db_conn, page_size=0).page_size == 1
        assert query_videos(db_conn, page_size=10_000).page_size == MAX_PAGE_SIZE
        assert query_videos(db_conn, page_size=None).page_size == DEFAULT_PAGE_SIZE
        assert query_videos(db_conn, page=-3).page == 1

    def test_empty_result_has_zero_pages(self, db_conn) -> None:
        page = query_videos(db_conn)
        assert page.total_count == 0
        assert page.total_pages == 0


class TestFolderThumbnails:
    def test_rows_follow_default_order(self, db_conn, add_video) -> None:
        add_video("A/old.mp4", created_at=1, thumbnail="/old.jpg")
        add_video("A/new.mp4", created_at=2, thumbnail="/new.jpg")
        rows = get_folder_thumbnails(db_conn)
        assert rows == [("A", "/new.jpg"), ("A", "/old.jpg")]

    def test_parent_scope_and_hidden(self, db_conn, library) -> None:
        rows = get_folder_thumbnails(db_conn, parent="Action")
        assert {r[0] for r in rows} == {"Action", "Action/90s"}

        visible = get_folder_thumbnails(db_conn, hide_hidden=True)
        assert ".secret" not in {r[0] for r in visible}
