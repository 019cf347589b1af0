"""검출 방식 선택

per-line(기본): 규칙 + 구조 검증 + 품질 검사 (ChapterSegmenter)
global: 최다 매치 전역 패턴 + 최소 길이 검사 (PatternSplitter)
"""

from typing import Optional
from novel_splitter.config.loader import SplitterConfig
from novel_splitter.stages.splitter import ChapterSegmenter
from novel_splitter.stages.pattern_splitter import PatternSplitter

MODES = {
    "per-line": ChapterSegmenter,
    "global": PatternSplitter,
}


def create_detector(mode: str = "per-line", config: Optional[SplitterConfig] = None) -> ChapterSegmenter:
    """mode 이름으로 검출기 생성

    Raises:
        ValueError: 알 수 없는 mode
    """
    if mode not in MODES:
        raise ValueError(f"Unknown detection mode: {mode} (choose from {', '.join(MODES)})")
    return MODES[mode](config)
