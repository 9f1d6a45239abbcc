import logging
from logging.handlers import RotatingFileHandler

from fastapi import status

from uxray.platform.logger import LOG_BACKUPS, LOG_FILE, MAX_LOG_BYTES, get_logger
from uxray.platform.response import api_response


def test_logger_writes_to_rotating_file_and_console():
    logger = get_logger("uxray.tests.rotating")

    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename == LOG_FILE
    assert file_handlers[0].maxBytes == MAX_LOG_BYTES
    assert file_handlers[0].backupCount == LOG_BACKUPS
    assert len(logger.handlers) == 2
    assert logger.level == logging.INFO


def test_logger_handlers_attached_once():
    first = get_logger("uxray.tests.once")
    second = get_logger("uxray.tests.once")

    assert first is second
    assert len(second.handlers) == 2


def test_error_envelope():
    response = api_response(message="Scan not found", status_code=status.HTTP_404_NOT_FOUND)

    assert response.status_code == 404
    assert response.body == (
        b'{"status_code":404,"status":"error","message":"Scan not found","data":{}}'
    )
