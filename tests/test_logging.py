import logging

from querykit.logging import ROOT_LOGGER_NAME, configure_logging, get_logger


def test_get_logger_nests_under_package_namespace():
    assert get_logger("querykit.queries.base").name == "querykit.queries.base"
    assert get_logger("tests.helpers").name == "querykit.tests.helpers"


def test_configure_logging_installs_a_single_handler():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    before = list(logger.handlers)
    try:
        configure_logging("DEBUG")
        configure_logging("INFO")
        added = [handler for handler in logger.handlers if handler not in before]

        assert len(added) == 1
        assert logger.level == logging.INFO
    finally:
        for handler in list(logger.handlers):
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
