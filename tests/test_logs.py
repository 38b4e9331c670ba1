import logging
import os
import time

from rich.logging import RichHandler

from outage_monitor.logs import maybe_rotate_log, setup_logging


def test_rotate_skips_missing_and_fresh_files(tmp_path):
    path = tmp_path / "monitor.log"
    assert maybe_rotate_log(str(path)) is None
    path.write_text("fresh\n")
    assert maybe_rotate_log(str(path)) is None
    assert path.exists()


def test_rotate_renames_old_file(tmp_path):
    path = tmp_path / "monitor.log"
    path.write_text("old\n")
    old = time.time() - 91 * 24 * 60 * 60
    os.utime(path, (old, old))

    new_name = maybe_rotate_log(str(path))
    assert new_name is not None
    assert not path.exists()
    assert open(new_name).read() == "old\n"


def test_setup_logging_writes_file(tmp_path):
    path = tmp_path / "monitor.log"
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        setup_logging(verbose=True, log_file=str(path))
        assert root.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in root.handlers)
        logging.getLogger("outage_monitor.test").warning("connection lost")
        for h in root.handlers:
            h.flush()
        assert "WARNING | connection lost" in path.read_text()
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])


def test_setup_logging_closes_replaced_handlers(tmp_path):
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        setup_logging(log_file=str(tmp_path / "first.log"))
        (first,) = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        assert first.stream is not None

        setup_logging(log_file=str(tmp_path / "second.log"))
        assert first not in root.handlers
        assert first.stream is None
        (second,) = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        assert second.baseFilename.endswith("second.log")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
