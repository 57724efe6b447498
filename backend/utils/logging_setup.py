# utils/logging_setup.py

"""
로깅 초기화 유틸리티

- 프로세스 시작 시(main.py) 한 번만 호출한다.
- 각 모듈은 logging.getLogger(__name__) 로 로거를 받아 쓴다.
"""

from __future__ import annotations

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def _parse_level(value: Union[str, int, None]) -> int:
    if isinstance(value, int):
        return value
    if not value:
        return logging.INFO
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Union[str, int, None] = None, *, force: bool = False) -> logging.Logger:
    """
    루트 로거에 stream handler 를 붙이고 레벨을 맞춘다.
    이미 설정되어 있으면 force=True 일 때만 다시 설정한다.
    """
    global _configured

    if _configured and not force:
        return logging.getLogger("backend")

    logging.basicConfig(level=_parse_level(level), format=LOG_FORMAT, force=True)
    _configured = True

    return logging.getLogger("backend")


