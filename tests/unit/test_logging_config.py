import logging

from projax.logging_config import setup_logging


def test_setup_logging_installs_console_and_file_handlers(tmp_path, restore_root_logging):
    setup_logging("projax", user_friendly=True, log_dir=tmp_path)

    handlers = restore_root_logging.handlers
    assert len(handlers) == 2
    console, file_handler = handlers
    assert console.level == logging.WARNING
    assert file_handler.baseFilename == str(tmp_path / "projax.log")

    logging.getLogger("projax.test").info("registry updated")
    file_handler.flush()
    assert "registry updated" in (tmp_path / "projax.log").read_text()


def test_setup_logging_without_service_name_skips_file(tmp_path, restore_root_logging):
    setup_logging(log_dir=tmp_path)

    assert len(restore_root_logging.handlers) == 1
    assert restore_root_logging.handlers[0].level == logging.DEBUG
    assert list(tmp_path.iterdir()) == []


def test_quiet_mode_silences_console(tmp_path, monkeypatch, restore_root_logging):
    monkeypatch.setenv("PROJAX_QUIET", "1")

    setup_logging(log_dir=tmp_path)

    assert restore_root_logging.handlers[0].level > logging.CRITICAL


def test_technical_mode_lets_debug_records_reach_console(tmp_path, restore_root_logging):
    setup_logging("projax", log_dir=tmp_path)

    assert restore_root_logging.level == logging.DEBUG
    assert logging.getLogger("projax.test").isEnabledFor(logging.DEBUG)


def test_user_friendly_mode_keeps_root_at_info(tmp_path, restore_root_logging):
    setup_logging("projax", user_friendly=True, log_dir=tmp_path)

    assert restore_root_logging.level == logging.INFO
