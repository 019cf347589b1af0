"""텍스트 정리 유틸리티

제목 정규화, CJK 판별, 파일명 정리 등 챕터 분할/내보내기 공용 함수
"""

import re
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

# CJK 통합 한자 (기본 + 확장 A) 및 호환 한자
CJK_RE = re.compile(r'[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]')

# 전각 공백(　) 포함 모든 공백
WHITESPACE_RE = re.compile(r'[\s\u3000]+')

# 파일명에 허용하지 않는 문자 (단어 문자/CJK 외 전부)
UNSAFE_FILENAME_RE = re.compile(r'[^\w\u4e00-\u9fa5]')


def collapse_whitespace(text: str) -> str:
    """연속 공백/개행을 단일 공백으로 접고 앞뒤 공백 제거

    Examples:
        >>> collapse_whitespace("第一章　　开始\\n")
        "第一章 开始"
    """
    return WHITESPACE_RE.sub(' ', text).strip()


def contains_cjk(text: str) -> bool:
    """CJK 문자가 하나라도 있으면 True"""
    return bool(CJK_RE.search(text))


def is_blank(line: str) -> bool:
    return not line.strip()


def clip(text: str, max_length: int) -> str:
    """max_length 글자로 자른 뒤 끝 공백 제거"""
    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip()


def sanitize_filename(name: str) -> str:
    """파일명 정리

    단어 문자와 한자 이외의 문자는 모두 '_' 로 치환한다.

    Examples:
        >>> sanitize_filename("第一章 开始")
        "第一章_开始"

        >>> sanitize_filename("Chapter 3: The End?")
        "Chapter_3__The_End_"
    """
    safe = UNSAFE_FILENAME_RE.sub('_', name.strip())
    if not safe:
        safe = "_"
    logger.debug(f"Filename sanitized: '{name}' → '{safe}'")
    return safe
