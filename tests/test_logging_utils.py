# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-02
# Description: test_logging_utils.py
# -----------------------------------------------------------------------------
import logging

from utility.logging_utils import BASE_LOGGER_NAME, configure_logging, get_class_logger, get_logger
from vectorstore.JsonEntityVectorStore import JsonEntityVectorStore


def test_class_logger_is_named_after_module_and_class():
    logger = get_class_logger(JsonEntityVectorStore)
    assert logger.name == "navigate_ai.vectorstore.JsonEntityVectorStore.JsonEntityVectorStore"
    assert logger.handlers == []


def test_handlers_are_attached_once_to_the_package_root():
    root = configure_logging()
    before = list(root.handlers)
    configure_logging()
    get_logger("anything")
    assert root.name == BASE_LOGGER_NAME
    assert root.handlers == before
    # conftest turns file logging off
    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
