import pytest
from watchdog.events import DirCreatedEvent, FileModifiedEvent, FileMovedEvent

from sshcfg.store import ConfigStore
from sshcfg.watch import ConfigChangeHandler, ConfigWatcher


@pytest.fixture
def tree(tmp_path, write_config):
    config = write_config(tmp_path / "config", "Include conf.d/*\n\nHost main\n")
    fragment = write_config(tmp_path / "conf.d" / "work", "Host work\n")
    return config, fragment


@pytest.fixture
def watcher(tree):
    config, _ = tree
    changes = []
    watcher = ConfigWatcher(ConfigStore(config), on_change=lambda: changes.append(True))
    watcher.changes = changes
    watcher.refresh_closure()
    return watcher


def test_closure_and_directories(watcher, tree, tmp_path):
    config, fragment = tree
    assert watcher.files == {config, fragment}
    assert watcher.directories == {tmp_path, tmp_path / "conf.d"}


def test_relevance(watcher, tree, tmp_path):
    _, fragment = tree
    (tmp_path / "conf.d" / "new").write_text("Host new\n")
    (tmp_path / "conf.d" / "notes.md").write_text("# notes\n")
    (tmp_path / "elsewhere").mkdir()
    (tmp_path / "elsewhere" / "config").write_text("Host x\n")

    assert watcher.is_relevant(fragment)
    assert watcher.is_relevant(str(tmp_path / "conf.d" / "new"))
    assert not watcher.is_relevant(tmp_path / "conf.d" / "notes.md")
    assert not watcher.is_relevant(tmp_path / "elsewhere" / "config")
    assert not watcher.is_relevant(tmp_path / "conf.d" / "gone")


def test_process_pending_notifies_once(watcher, tree):
    _, fragment = tree
    assert not watcher.process_pending()

    watcher.queue_change(fragment)
    watcher.queue_change(fragment)

    assert watcher.process_pending()
    assert watcher.changes == [True]
    assert not watcher.process_pending()


def test_irrelevant_change_is_ignored(watcher, tmp_path):
    watcher.queue_change(tmp_path / "unrelated.txt")
    assert not watcher.process_pending()
    assert watcher.changes == []


def test_new_included_file_joins_closure(watcher, tmp_path):
    added = tmp_path / "conf.d" / "later"
    added.write_text("Host later\n")

    watcher.queue_change(added)
    watcher.process_pending()

    assert added in watcher.files


def test_handler_forwards_events(watcher, tree, tmp_path):
    config, fragment = tree
    handler = ConfigChangeHandler(watcher)

    handler.on_any_event(FileModifiedEvent(str(config)))
    assert watcher.process_pending()

    renamed = tmp_path / "conf.d" / "renamed"
    fragment.rename(renamed)
    handler.on_any_event(FileMovedEvent(str(fragment), str(renamed)))
    assert watcher.process_pending()
    assert renamed in watcher.files
    assert fragment not in watcher.files


def test_handler_ignores_directories(watcher, tmp_path):
    handler = ConfigChangeHandler(watcher)
    handler.on_any_event(DirCreatedEvent(str(tmp_path / "conf.d")))
    assert not watcher.process_pending()


def test_stop_before_start(watcher):
    watcher.stop()
    assert not watcher.running
