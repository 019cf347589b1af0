"""챕터 제목 패턴 규칙

각 규칙은 (모양 정규식, 구조 검증, 제목 포매터) 한 벌로 구성된다.
규칙은 선언 순서가 곧 우선순위이며, 한 줄에 대해 모양이 처음 맞은 규칙 하나만 판정한다.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence
from novel_splitter.utils.text_cleaner import collapse_whitespace, contains_cjk
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

CN_NUMERALS = "零〇一二两三四五六七八九十百千万"
CHAPTER_UNITS = "章回节篇卷集部"
SPACE = r'[ \t\u3000]'

# 문장/절 구두점: 제목 라벨에 하나라도 있으면 본문 문장으로 간주
CLAUSE_PUNCTUATION_RE = re.compile(r'[，。！？；：,.!?;:]')

# 제목 모양이지만 실제로는 본문인 경우 (행동/추론 어휘, 第 뒤 대명사)
PROSE_BLACKLIST_RE = re.compile(r'需要|应该|必须|因为|所以|但是|可是|如果|虽然|第[她他它你我]')


def _label(match: re.Match) -> str:
    return collapse_whitespace(match.group('label') or '')


def _join(marker: str, label: str) -> str:
    return f"{marker} {label}" if label else marker


def _format_chinese(match: re.Match) -> str:
    return _join(collapse_whitespace(match.group('marker')), _label(match))


def _format_arabic(match: re.Match) -> str:
    marker = f"第{int(match.group('num'))}{match.group('unit')}"
    return _join(marker, _label(match))


def _format_english(match: re.Match) -> str:
    num = match.group('num')
    num = num if num.isdigit() else num.upper()
    return _join(f"Chapter {num}", _label(match))


def _format_enumerated(match: re.Match) -> str:
    return f"{match.group('num')}{match.group('delim')}{match.group('label')}"


@dataclass(frozen=True)
class TitleRule:
    """제목 규칙 하나

    Attributes:
        name: 규칙 이름 (로그/디버깅용)
        pattern: 줄 전체에 대한 모양 정규식 (marker/label 그룹 필수)
        min_length: 정규화된 제목 최소 길이
        max_length: 정규화된 제목 최대 길이
        requires_cjk: CJK 문자 필수 여부
        formatter: 매치 → 표시용 제목
    """
    name: str
    pattern: re.Pattern
    min_length: int
    max_length: int
    requires_cjk: bool
    formatter: Callable[[re.Match], str]

    def validate(self, match: re.Match, title: str) -> Optional[str]:
        """구조 검증. 통과하면 None, 실패하면 거부 사유 반환"""
        if match.string[:match.start('marker')].strip():
            return "not anchored at line start"

        if not self.min_length <= len(title) <= self.max_length:
            return f"length {len(title)} outside [{self.min_length}, {self.max_length}]"

        label = match.group('label') or ''
        if CLAUSE_PUNCTUATION_RE.search(label):
            return "clause punctuation in label"

        if self.requires_cjk and not contains_cjk(title):
            return "no CJK character"

        if PROSE_BLACKLIST_RE.search(match.string):
            return "prose blacklist"

        return None


TITLE_RULES: List[TitleRule] = [
    TitleRule(
        name="chinese_numeral",
        pattern=re.compile(
            rf'^{SPACE}*(?P<marker>第[{CN_NUMERALS}]+[{CHAPTER_UNITS}])'
            rf'(?:{SPACE}*(?P<label>.{{0,20}}))?$'
        ),
        min_length=3,
        max_length=30,
        requires_cjk=True,
        formatter=_format_chinese,
    ),
    TitleRule(
        name="arabic_numeral",
        pattern=re.compile(
            rf'^{SPACE}*(?P<marker>第{SPACE}*(?P<num>\d{{1,5}}){SPACE}*(?P<unit>[{CHAPTER_UNITS}]))'
            rf'(?:{SPACE}*(?P<label>.{{0,20}}))?$'
        ),
        min_length=3,
        max_length=30,
        requires_cjk=True,
        formatter=_format_arabic,
    ),
    TitleRule(
        name="english_chapter",
        pattern=re.compile(
            r'^[ \t]*(?P<marker>chapter[ \t]+(?P<num>\d{1,4}|[ivxlc]{1,7}))'
            r'(?:[ \t]+(?P<label>.{0,30}))?$',
            re.IGNORECASE
        ),
        min_length=3,
        max_length=40,
        requires_cjk=False,
        formatter=_format_english,
    ),
    TitleRule(
        name="enumerated",
        pattern=re.compile(
            rf'^{SPACE}*(?P<marker>(?P<num>\d{{1,4}})(?P<delim>[.、．])){SPACE}*'
            r'(?P<label>[\u4e00-\u9fa5]{1,15})$'
        ),
        min_length=3,
        max_length=20,
        requires_cjk=True,
        formatter=_format_enumerated,
    ),
]


def match_title(line: str, rules: Sequence[TitleRule] = TITLE_RULES) -> Optional[str]:
    """한 줄이 챕터 제목 후보인지 판정

    모양이 처음 맞은 규칙만 검증하며, 그 규칙이 거부하면 다른 규칙으로 넘어가지 않는다.

    Args:
        line: 원본 줄 (앞 공백 허용)
        rules: 우선순위 순 규칙 목록

    Returns:
        정규화된 제목, 후보가 아니면 None
    """
    candidate = line.rstrip()
    if not candidate.strip():
        return None

    for rule in rules:
        match = rule.pattern.match(candidate)
        if not match:
            continue

        title = rule.formatter(match)
        reason = rule.validate(match, title)
        if reason:
            logger.debug(f"Rejected title [{rule.name}] '{candidate.strip()}': {reason}")
            return None
        return title

    return None
