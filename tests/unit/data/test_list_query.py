import pytest

from portfolios.data.list_query import ListQuery, Paginator
from portfolios.data.records import GitHubRepo


@pytest.fixture
def repos():
    return [
        GitHubRepo(name="alpha", stargazers_count=5),
        GitHubRepo(name="beta", stargazers_count=12, fork=True),
        GitHubRepo(name="gamma", stargazers_count=1),
        GitHubRepo(name="delta", stargazers_count=12),
        GitHubRepo(name="epsilon", stargazers_count=8),
    ]


def _names(records):
    return [r.name for r in records]


class TestListQuery:

    def test_default_query_is_identity_copy(self, repos):
        result = ListQuery().apply(repos)
        assert result == repos
        assert result is not repos

    def test_exclude_forks(self, repos):
        result = ListQuery(exclude=lambda r: r.fork).apply(repos)
        assert "beta" not in _names(result)
        assert len(result) == 4

    def test_exclude_disabled_keeps_forks(self, repos):
        assert len(ListQuery(exclude=None).apply(repos)) == 5

    def test_sort_descending_is_stable(self, repos):
        result = ListQuery(sort_key=lambda r: r.stargazers_count).apply(repos)
        assert _names(result) == ["beta", "delta", "epsilon", "alpha", "gamma"]

    def test_sort_ascending(self, repos):
        result = ListQuery(sort_key=lambda r: r.stargazers_count, descending=False).apply(repos)
        assert _names(result)[0] == "gamma"

    def test_limit_after_sort_keeps_top(self, repos):
        query = ListQuery(sort_key=lambda r: r.stargazers_count, limit=3)
        assert _names(query.apply(repos)) == ["beta", "delta", "epsilon"]

    def test_limit_larger_than_list(self, repos):
        assert len(ListQuery(limit=50).apply(repos)) == 5

    def test_allow_list(self, repos):
        result = ListQuery(allow_list=["gamma", "alpha", "missing"]).apply(repos)
        # Order follows the input, not the allow list
        assert _names(result) == ["alpha", "gamma"]

    def test_allow_list_custom_key(self, repos):
        repos[0].language = "C#"
        result = ListQuery(allow_list={"C#"}, allow_key="language").apply(repos)
        assert _names(result) == ["alpha"]

    def test_reverse_before_filters(self, repos):
        result = ListQuery(reverse=True, limit=2).apply(repos)
        assert _names(result) == ["epsilon", "delta"]

    def test_input_not_mutated(self, repos):
        before = list(repos)
        ListQuery(reverse=True, sort_key=lambda r: r.stargazers_count, limit=1).apply(repos)
        assert repos == before


class TestPaginator:

    def test_cumulative_pages(self):
        pager = Paginator(list(range(12)), page_size=5)

        assert pager.total_pages == 3
        assert pager.visible_items() == [0, 1, 2, 3, 4]
        assert pager.has_more() is True
        assert pager.remaining() == 7

        assert pager.load_more() == [5, 6, 7, 8, 9]
        assert pager.visible_items() == list(range(10))
        assert pager.remaining() == 2

        assert pager.load_more() == [10, 11]
        assert pager.has_more() is False
        assert pager.remaining() == 0

    def test_load_more_at_end_is_noop(self):
        pager = Paginator([1, 2], page_size=5)
        assert pager.has_more() is False
        assert pager.load_more() == []
        assert pager.current_page == 0

    def test_exact_multiple(self):
        pager = Paginator(list(range(10)), page_size=5)
        pager.load_more()
        assert pager.has_more() is False

    def test_disabled_shows_everything(self):
        pager = Paginator(list(range(12)), page_size=5, enabled=False)
        assert pager.visible_items() == list(range(12))
        assert pager.page_items() == list(range(12))
        assert pager.has_more() is False
        assert pager.remaining() == 0

    def test_show_all(self):
        pager = Paginator(list(range(12)), page_size=5)
        assert pager.show_all() == list(range(12))
        assert pager.has_more() is False

    def test_empty(self):
        pager = Paginator([], page_size=5)
        assert pager.total_pages == 0
        assert pager.visible_items() == []
        assert pager.has_more() is False

    @pytest.mark.parametrize("size", [0, -1])
    def test_invalid_page_size(self, size):
        with pytest.raises(ValueError):
            Paginator([1], page_size=size)
