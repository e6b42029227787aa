"""Unit tests for host rows and the filterable host list."""

from ssm.domain.session import FilterState, HostList, describe, rows_from
from ssm.domain.sshconf import Config, Host


def _host(name, **options):
    return Host.build(name, {key.lower(): value for key, value in options.items()})


def _list(*names, page_size=10):
    return HostList(rows_from(Config(path="/cfg", hosts=tuple(_host(n) for n in names))), page_size=page_size)


class TestDescribe:
    """Tests for row descriptions."""

    def test_full_address(self):
        host = _host("box", user="ops", hostname="10.0.0.1", port="2222")

        assert describe(host) == "ops@10.0.0.1:2222"

    def test_default_port_hidden(self):
        assert describe(_host("box", hostname="h", port="22")) == "h"

    def test_tag_appended(self):
        host = Host.build("box", {"hostname": "h", "#tag:": "prod"})

        assert describe(host) == "h #prod"

    def test_alias_stands_in_for_hostname(self):
        assert describe(_host("box", user="me")) == "me@box"

    def test_bare_alias_fallback(self):
        assert describe(_host("box", identityfile="~/.ssh/id")) == "box"


class TestFiltering:
    """Tests for filter states and matching."""

    def test_live_substring_match(self):
        hosts = _list("web1", "web2", "db1")
        hosts.start_filtering()

        hosts.type_text("WEB")

        assert [row.title for row in hosts.visible] == ["web1", "web2"]
        assert hosts.is_filtering

    def test_matches_description(self, web_config):
        hosts = HostList(rows_from(web_config))

        hosts.set_filter_text("ops@")

        assert [row.title for row in hosts.visible] == ["web1"]
        assert hosts.filter_state is FilterState.APPLIED

    def test_apply_empty_filter_resets(self):
        hosts = _list("a", "b")
        hosts.start_filtering()

        hosts.apply_filter()

        assert hosts.filter_state is FilterState.UNFILTERED
        assert len(hosts.visible) == 2

    def test_reset_filter(self):
        hosts = _list("a", "b")
        hosts.set_filter_text("a")

        hosts.reset_filter()

        assert hosts.filter_text == ""
        assert not hosts.filter_active
        assert len(hosts.visible) == 2

    def test_no_match_has_no_selection(self):
        hosts = _list("a", "b")

        hosts.set_filter_text("zzz")

        assert hosts.selected() is None
        assert hosts.page() == ([], -1, 0, 1)

    def test_filter_text_limit(self):
        hosts = _list("a")
        hosts.start_filtering()

        hosts.type_text("x" * 100)

        assert len(hosts.filter_text) == 64


class TestCursor:
    """Tests for cursor movement and paging."""

    def test_moves_are_clamped(self):
        hosts = _list("a", "b", "c")

        hosts.cursor_up()
        assert hosts.selected().title == "a"

        hosts.cursor_down(10)
        assert hosts.selected().title == "c"

    def test_paging(self):
        hosts = _list(*[f"h{i}" for i in range(7)], page_size=3)

        hosts.page_down()
        rows, index, number, count = hosts.page()

        assert [row.title for row in rows] == ["h3", "h4", "h5"]
        assert (index, number, count) == (0, 1, 3)

        hosts.go_to_end()
        assert hosts.selected().title == "h6"

        hosts.half_page_up()
        assert hosts.selected().title == "h5"

        hosts.go_to_start()
        assert hosts.selected().title == "h0"


class TestReplaceRows:
    """Tests for swapping in reloaded rows."""

    def test_selection_follows_name(self):
        hosts = _list("web1", "web2", "web3")
        hosts.set_filter_text("web")
        hosts.cursor_down(2)

        hosts.replace_rows(rows_from(Config(path="/cfg", hosts=(_host("web0"), _host("web3"), _host("db")))))

        assert hosts.filter_text == "web"
        assert hosts.filter_state is FilterState.APPLIED
        assert [row.title for row in hosts.visible] == ["web0", "web3"]
        assert hosts.selected().title == "web3"

    def test_cursor_clamped_when_host_gone(self):
        hosts = _list("a", "b", "c")
        hosts.go_to_end()

        hosts.replace_rows(rows_from(Config(path="/cfg", hosts=(_host("a"),))))

        assert hosts.selected().title == "a"
