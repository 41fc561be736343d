import logging

import pytest

from mtl_catalog.host import logging_utils


@pytest.fixture
def base_logger():
    logger = logging.getLogger(logging_utils.get_base_logger_name())
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_derive_base_logger_name():
    """Ensure the base logger is the top-level package."""
    assert logging_utils.derive_base_logger_name("mtl_catalog.core.resolver") == "mtl_catalog"
    assert logging_utils.derive_base_logger_name("") == "mtl_catalog"


def test_configure_logging_installs_one_handler(base_logger):
    """Ensure repeated configuration does not duplicate the stdout handler."""
    logging_utils.configure_logging("mtl_catalog.cli")
    logging_utils.configure_logging("mtl_catalog.cli", debug=True)

    names = [handler.name for handler in base_logger.handlers]
    assert names.count("mtl_catalog_stdout") == 1
    assert base_logger.level == logging.DEBUG
    assert base_logger.propagate is False


def test_set_debug_toggles_level(base_logger):
    logging_utils.configure_logging("mtl_catalog.cli")

    logging_utils.set_debug(True)
    assert base_logger.level == logging.DEBUG
    logging_utils.set_debug(False)
    assert base_logger.level == logging.INFO
