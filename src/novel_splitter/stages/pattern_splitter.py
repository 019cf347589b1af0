"""Global Pattern Splitter

전체 텍스트에 전역 정규식 몇 개를 돌려 매치 수가 가장 많은 패턴 하나를
문서 전체의 챕터 구분자로 채택하는 단순 분할기.
구조 검증 없이 최소 길이 검사만 하므로 오탐이 더 많다. mode="global" 로만 사용.
"""

import re
from typing import Dict, List, Optional, Tuple
from novel_splitter.config.loader import SplitterConfig
from novel_splitter.stages.chapter import Chapter
from novel_splitter.stages.splitter import ChapterSegmenter
from novel_splitter.utils.text_cleaner import clip, collapse_whitespace
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

GLOBAL_PATTERNS: Dict[str, re.Pattern] = {
    "chinese_chapter": re.compile(
        r'^[ \t\u3000]*第[零〇一二两三四五六七八九十百千万\d]+[章回节][^\n]{0,30}$', re.MULTILINE
    ),
    "chinese_volume": re.compile(
        r'^[ \t\u3000]*第[零〇一二两三四五六七八九十百千万\d]+[卷部篇集][^\n]{0,30}$', re.MULTILINE
    ),
    "english_chapter": re.compile(
        r'^[ \t]*chapter[ \t]+\w+[^\n]{0,40}$', re.MULTILINE | re.IGNORECASE
    ),
    "enumerated": re.compile(
        r'^[ \t\u3000]*\d{1,4}[.、．][ \t\u3000]*[^\n]{1,20}$', re.MULTILINE
    ),
}


class PatternSplitter(ChapterSegmenter):
    """매치 수 최다 전역 패턴 하나로 분할 (폴백 규칙은 ChapterSegmenter와 동일)"""

    def __init__(self, config: Optional[SplitterConfig] = None, patterns: Optional[Dict[str, re.Pattern]] = None):
        super().__init__(config)
        self.patterns = patterns or GLOBAL_PATTERNS

    def select_pattern(self, text: str) -> Tuple[Optional[str], List[re.Match]]:
        """매치 수가 가장 많은 패턴 (2개 이상 매치 필수)

        Returns:
            (패턴 이름, 매치 목록). 조건을 만족하는 패턴이 없으면 (None, [])
        """
        best_name, best_matches = None, []
        for name, pattern in self.patterns.items():
            matches = list(pattern.finditer(text))
            logger.debug(f"Pattern '{name}': {len(matches)} matches")
            if len(matches) > max(1, len(best_matches)):
                best_name, best_matches = name, matches
        return best_name, best_matches

    def detect_chapters(self, raw_text: str) -> List[Chapter]:
        if not raw_text or not raw_text.strip():
            return []

        lines = raw_text.lstrip('\ufeff').splitlines()
        text = "\n".join(self.noise_filter.filter_lines(lines))

        name, matches = self.select_pattern(text)
        chapters: List[Chapter] = []
        if name:
            logger.info(f"   -> Delimiter pattern: {name} ({len(matches)} matches)")
            for i, match in enumerate(matches):
                end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
                section = text[match.end():end].split("\n")
                content = self.extract_content(section, 0, len(section))
                if len(content) < self.config.min_chapter_length:
                    logger.debug(f"Dropped '{match.group(0).strip()}': {len(content)} chars")
                    continue

                title = clip(collapse_whitespace(match.group(0)), self.config.max_title_length)
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

        logger.info(f"✅ Detected {len(chapters)} chapters (global pattern mode)")
        return chapters
