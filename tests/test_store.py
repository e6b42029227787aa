"""Unit tests for ConfigStore and ConfigWatcher."""

import os
import threading

from watchdog.events import FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from ssm.core.exceptions import ConfigReadError
from ssm.domain.sshconf import ConfigStore, ConfigWatcher, parse


class FakeObserver:
    """Stand-in for watchdog's Observer that records scheduled directories."""

    def __init__(self):
        self.daemon = False
        self.scheduled = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path, recursive=False):
        self.scheduled.append(path)
        return path

    def unschedule(self, watch):
        self.scheduled.remove(watch)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def join(self, timeout=None):
        pass

    def is_alive(self):
        return self.started and not self.stopped


class TestConfigStore:
    """Tests for reloading through the store."""

    def test_reload_swaps_config(self, write_config):
        path = write_config("Host one\n")
        store = ConfigStore(parse(path))
        path.write_text("Host one\nHost two\n", encoding="utf-8")

        result = store.reload()

        assert result.success
        assert result.config.names == ("one", "two")
        assert store.config is result.config
        assert store.path == str(path)

    def test_failed_reload_keeps_previous(self, write_config):
        path = write_config("Host one\n")
        store = ConfigStore(parse(path))
        previous = store.config
        os.remove(path)

        result = store.reload()

        assert not result.success
        assert isinstance(result.error, ConfigReadError)
        assert store.config is previous


class TestConfigWatcher:
    """Tests for event filtering, arming and reloads."""

    def _watcher(self, path, results):
        store = ConfigStore(parse(path))
        observer = FakeObserver()
        watcher = ConfigWatcher(store, results.append, debounce=0.01, observer_factory=lambda: observer)
        return watcher, observer

    def test_arms_parent_directories_of_watch_set(self, write_config):
        write_config("Host inc\n", name="conf.d/inc.conf")
        path = write_config("Include conf.d/*.conf\n")
        watcher, observer = self._watcher(path, [])

        assert set(observer.scheduled) == {str(path.parent), str(path.parent / "conf.d")}
        assert str(path.parent / "conf.d" / "inc.conf") in watcher.watch_set

    def test_ignores_unrelated_files(self, write_config, tmp_path):
        path = write_config("Host one\n")
        watcher, _ = self._watcher(path, [])

        watcher.notify(FileModifiedEvent(str(tmp_path / "other")))

        assert watcher._events.empty()

    def test_moved_onto_watched_file_queues_reload(self, write_config, tmp_path):
        path = write_config("Host one\n")
        watcher, _ = self._watcher(path, [])

        watcher.notify(FileMovedEvent(str(tmp_path / ".config.swp"), str(path)))

        assert watcher._events.get_nowait() == str(path)

    def test_reload_arms_new_includes(self, write_config):
        path = write_config("Host one\n")
        results = []
        watcher, observer = self._watcher(path, results)
        write_config("Host extra\n", name="more/extra.conf")
        path.write_text("Host one\nInclude more/*.conf\n", encoding="utf-8")

        watcher.reload()

        assert results[-1].config.names == ("extra", "one")
        assert str(path.parent / "more") in observer.scheduled
        assert str(path.parent / "more" / "extra.conf") in watcher.watch_set

    def test_rearm_restores_dropped_directory(self, write_config):
        path = write_config("Host one\n")
        watcher, observer = self._watcher(path, [])
        observer.scheduled.clear()
        watcher._watched_dirs.clear()

        watcher.notify(FileCreatedEvent(str(path)))

        assert str(path.parent) in observer.scheduled

    def test_run_reloads_on_change_until_stopped(self, write_config):
        path = write_config("Host one\n")
        reloaded = threading.Event()
        results = []

        def on_reload(result):
            results.append(result)
            reloaded.set()

        observer = FakeObserver()
        watcher = ConfigWatcher(ConfigStore(parse(path)), on_reload, debounce=0.01, observer_factory=lambda: observer)
        thread = threading.Thread(target=watcher.run, daemon=True)
        thread.start()

        path.write_text("Host two\n", encoding="utf-8")
        watcher.notify(FileModifiedEvent(str(path)))
        watcher.notify(FileModifiedEvent(str(path)))

        assert reloaded.wait(timeout=5)
        watcher.stop()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert observer.stopped
        assert results[0].config.names == ("two",)

    def test_broken_edit_reports_error(self, write_config):
        path = write_config("Host one\n")
        results = []
        watcher, _ = self._watcher(path, results)
        os.remove(path)

        watcher.reload()

        assert not results[-1].success
