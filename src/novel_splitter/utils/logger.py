"""novel_splitter 로깅

분할/내보내기 단계는 모두 `get_logger(__name__)` 로 로거를 받는다.
임포트 시점에 루트 로거에 날짜별 파일 핸들러(data/logs)와 stdout 핸들러를 건다.
config.yml의 logging 섹션 값은 CLI가 set_levels로 반영한다.
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

LOG_DIR = Path("data/logs")
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / f"{datetime.now().strftime('%Y-%m-%d')}.log"

# 파일에는 위치(lineno)까지, 콘솔에는 레벨/모듈/메시지만
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"


def _level(name: str) -> int:
    return getattr(logging, name.upper())


def _make_handler(handler: logging.Handler, level: str, fmt: str) -> logging.Handler:
    handler.setLevel(_level(level))
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(level: str = "DEBUG", console_level: str = "INFO") -> None:
    """루트 로거 핸들러를 새로 구성

    다시 호출하면 이전 핸들러를 닫고 교체하므로 같은 줄이 두 번 찍히지 않는다.

    Args:
        level: 로그 파일 레벨 (후보 거부 사유 등은 DEBUG로 남는다)
        console_level: stdout 레벨
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(_make_handler(logging.FileHandler(LOG_FILE, encoding="utf-8"), level, FILE_FORMAT))
    root_logger.addHandler(_make_handler(logging.StreamHandler(sys.stdout), console_level, CONSOLE_FORMAT))

    root_logger.debug(f"Logging initialized: file={LOG_FILE}, level={level}, console={console_level}")


def set_levels(level: str = "DEBUG", console_level: str = "INFO") -> None:
    """핸들러는 그대로 두고 파일/콘솔 레벨만 변경"""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.FileHandler):
            handler.setLevel(_level(level))
        elif isinstance(handler, logging.StreamHandler):
            handler.setLevel(_level(console_level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """모듈 로거

    Example:
        >>> from novel_splitter.utils.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("후보 제목 검사")
    """
    return logging.getLogger(name or __name__)


setup_logging()
