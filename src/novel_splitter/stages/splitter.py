"""Splitter for Chapter Text

Line-by-line chapter boundary detector for raw (noisy) TXT novels.
Ad lines are dropped, candidate titles must pass a structural validator,
and every extracted chapter goes through a content-quality gate.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence
from novel_splitter.config.loader import SplitterConfig
from novel_splitter.stages.chapter import Chapter
from novel_splitter.stages.noise_filter import NoiseFilter
from novel_splitter.stages.patterns import TITLE_RULES, TitleRule, match_title
from novel_splitter.utils.text_cleaner import clip, collapse_whitespace, is_blank
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

# 품질 검사용 문장 구분
SENTENCE_SPLIT_RE = re.compile(r'[。！？!?；;…]+')

# 제목 보강 발췌는 첫 절 구두점에서 끊는다
EXCERPT_STOP_RE = re.compile(r'[，。！？；：,.!?;:…、“”"「」『』]')

FALLBACK_TITLE = "全文"

# 후보가 없을 때 대체 제목으로 쓸 "의미 있는" 줄의 최소 길이 (초과)
MEANINGFUL_LINE_LENGTH = 10


@dataclass(frozen=True)
class TitleCandidate:
    """검증을 통과한 제목 후보 (line_index: 원본 줄 번호, 0부터)"""
    line_index: int
    title: str


class ChapterSegmenter:
    """줄 단위 규칙 스캔으로 원문 텍스트를 챕터 목록으로 분할

    Pipeline:
    1. 광고 줄/빈 줄은 제목 탐색에서 제외
    2. 우선순위 규칙(TITLE_RULES)으로 제목 후보 수집
    3. 후보 사이 줄을 본문으로 잘라냄 (광고 줄 제외, 앞뒤 빈 줄 제거)
    4. 품질 검사 미달 후보는 버림 (병합하지 않음)
    5. 짧은 제목은 본문 첫 줄 발췌로 보강
    6. 남은 챕터가 없으면 전체 문서를 한 챕터로 (문서가 충분히 길 때만)
    """

    def __init__(self, config: Optional[SplitterConfig] = None, rules: Sequence[TitleRule] = TITLE_RULES):
        self.config = config or SplitterConfig()
        self.rules = rules
        self.noise_filter = NoiseFilter(self.config.ad_keywords)

    def detect_chapters(self, raw_text: str) -> List[Chapter]:
        """원문 → 챕터 목록

        Args:
            raw_text: 디코딩된 원문 (크기 제한 없음)

        Returns:
            index가 1부터 연속인 Chapter 리스트 (없으면 빈 리스트)
        """
        if not raw_text or not raw_text.strip():
            return []

        lines = raw_text.lstrip('\ufeff').splitlines()
        candidates = self.find_candidates(lines)
        logger.debug(f"Found {len(candidates)} title candidates in {len(lines)} lines")

        chapters: List[Chapter] = []
        for i, candidate in enumerate(candidates):
            end = candidates[i + 1].line_index if i + 1 < len(candidates) else len(lines)
            content = self.extract_content(lines, candidate.line_index + 1, end)

            reason = self.check_quality(content)
            if reason:
                logger.debug(f"Dropped candidate '{candidate.title}' (line {candidate.line_index}): {reason}")
                continue

            title = self.refine_title(candidate.title, content)
            chapters.append(Chapter(
                index=len(chapters) + 1,
                title=title,
                content=content,
                word_count=len(content)
            ))

        if not chapters:
            fallback = self.build_fallback(lines)
            if fallback:
                chapters.append(fallback)

        logger.info(f"✅ Detected {len(chapters)} chapters ({len(candidates)} candidates)")
        return chapters

    def find_candidates(self, lines: Sequence[str]) -> List[TitleCandidate]:
        """광고가 아닌 줄 중 제목 규칙을 통과한 줄 목록"""
        candidates = []
        for line_index, line in enumerate(lines):
            if is_blank(line) or self.noise_filter.is_ad_line(line):
                continue

            title = match_title(line, self.rules)
            if title:
                candidates.append(TitleCandidate(line_index=line_index, title=title))
        return candidates

    def extract_content(self, lines: Sequence[str], start: int, end: int) -> str:
        """lines[start:end] 중 광고 줄을 뺀 본문 (앞뒤 빈 줄 제거)"""
        body = [line for line in lines[start:end] if not self.noise_filter.is_ad_line(line)]

        while body and is_blank(body[0]):
            body.pop(0)
        while body and is_blank(body[-1]):
            body.pop()

        return "\n".join(body)

    def check_quality(self, content: str) -> Optional[str]:
        """품질 검사. 통과하면 None, 실패하면 사유 반환"""
        if len(content) < self.config.min_chapter_length:
            return f"too short ({len(content)} < {self.config.min_chapter_length})"

        if content.strip().isdigit():
            return "digits only"

        segments = [s for s in SENTENCE_SPLIT_RE.split(content) if s.strip()]
        if len(segments) < self.config.min_sentence_count:
            return f"too few sentences ({len(segments)} < {self.config.min_sentence_count})"

        return None

    def refine_title(self, title: str, content: str) -> str:
        """짧은 제목에 본문 첫 줄 발췌를 덧붙이고 공백/개행 정리"""
        title = collapse_whitespace(title)

        if len(title) <= self.config.short_title_length:
            first_line = next((line for line in content.splitlines() if not is_blank(line)), "")
            excerpt = EXCERPT_STOP_RE.split(collapse_whitespace(first_line))[0].strip()
            excerpt = clip(excerpt, self.config.title_excerpt_length)
            if excerpt:
                title = f"{title} {excerpt}"

        return clip(collapse_whitespace(title), self.config.max_title_length)

    def build_fallback(self, lines: Sequence[str]) -> Optional[Chapter]:
        """후보가 하나도 남지 않았을 때 전체 문서 챕터 생성

        광고를 뺀 문서가 fallback_min_length 미만이면 None.
        """
        content = self.extract_content(lines, 0, len(lines))
        if len(content) < self.config.fallback_min_length:
            logger.debug(f"No fallback chapter: {len(content)} < {self.config.fallback_min_length} chars")
            return None

        title = FALLBACK_TITLE
        for line in content.splitlines():
            normalized = collapse_whitespace(line)
            if len(normalized) > MEANINGFUL_LINE_LENGTH:
                title = clip(normalized, self.config.max_title_length)
                break

        logger.info(f"⚠️  No chapter boundary found, using whole document as '{title}'")
        return Chapter(index=1, title=title, content=content, word_count=len(content))


def detect_chapters(raw_text: str, config: Optional[SplitterConfig] = None) -> List[Chapter]:
    """ChapterSegmenter 단축 함수

    Example:
        >>> from novel_splitter.stages.splitter import detect_chapters
        >>> chapters = detect_chapters(text)
        >>> [c.title for c in chapters]
    """
    return ChapterSegmenter(config).detect_chapters(raw_text)
