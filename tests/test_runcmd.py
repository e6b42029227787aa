"""Unit tests for the run-command sub-mode state."""

from ssm.domain.session import NO_OUTPUT, RunCommandState


class TestRunCommandState:
    """Tests for input, results and scrolling."""

    def test_submit_records_command(self):
        run = RunCommandState(host="web1")
        run.type_text("uptime")

        assert run.submit() == "uptime"
        assert run.running
        assert run.seq == 1
        assert run.input == ""
        assert run.lines == ["$ uptime"]

    def test_blank_submit_is_ignored(self):
        run = RunCommandState(host="web1")
        run.type_text("   ")

        assert run.submit() == ""
        assert not run.running
        assert run.seq == 0

    def test_input_locked_while_running(self):
        run = RunCommandState(host="web1")
        run.type_text("ls")
        run.submit()

        run.type_text("more")
        run.delete_char()

        assert run.input == ""
        assert run.submit() == ""

    def test_finish_appends_output(self):
        run = RunCommandState(host="web1")
        run.type_text("ls")
        run.submit()

        assert run.finish(1, "a\nb\n")
        assert run.lines == ["$ ls", "a", "b"]
        assert not run.running

    def test_finish_with_error(self):
        run = RunCommandState(host="web1")
        run.type_text("false")
        run.submit()

        run.finish(1, "", error="exit status 1")

        assert run.lines[-1] == "exit status 1"

    def test_stale_result_dropped_after_cancel(self):
        run = RunCommandState(host="web1")
        run.type_text("sleep 100")
        run.submit()

        assert run.cancel()
        assert not run.finish(1, "late output")
        assert run.lines == ["$ sleep 100", "[command cancelled]"]

    def test_cancel_without_command(self):
        run = RunCommandState(host="web1")

        assert not run.cancel()
        assert run.lines == ["[no running command to cancel]"]

    def test_input_limit(self):
        run = RunCommandState(host="web1")

        run.type_text("x" * 300)

        assert len(run.input) == 256

    def test_window_and_scroll(self):
        run = RunCommandState(host="web1", page_size=2)
        assert run.window() == [NO_OUTPUT]

        run.append("1\n2\n3\n4")
        assert run.window() == ["3", "4"]
        assert run.scroll_percent == 1.0

        run.scroll_up(5)
        assert run.scroll == 2
        assert run.window() == ["1", "2"]
        assert run.scroll_percent == 0.0

        run.scroll_down()
        assert run.window() == ["2", "3"]

    def test_clear(self):
        run = RunCommandState(host="web1")
        run.append("output")

        run.clear()

        assert run.lines == []
