"""여러 문서 일괄 분할

문서별 검출은 상태를 공유하지 않으므로 스레드 풀로 병렬 실행한다.
내용이 같은 문서(XXHash 동일)는 한 번만 검출하고 결과를 재사용한다.
"""

import time
import xxhash
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
from novel_splitter.config.loader import InputConfig, SplitterConfig
from novel_splitter.stages.chapter import Chapter
from novel_splitter.stages.detector import create_detector
from novel_splitter.stages.reader import read_novel_file
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class BatchItem:
    """문서 하나의 처리 결과"""
    path: str
    chapters: List[Chapter] = field(default_factory=list)
    encoding: Optional[str] = None
    content_hash: Optional[str] = None
    duplicate_of: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def content_hash(text: str) -> str:
    """XXHash 계산

    Returns:
        16진수 해시 문자열
    """
    return xxhash.xxh64(text.encode("utf-8")).hexdigest()


class BatchRunner:
    """여러 TXT 파일 일괄 챕터 검출"""

    def __init__(
        self,
        config: Optional[SplitterConfig] = None,
        mode: str = "per-line",
        input_config: Optional[InputConfig] = None,
        max_workers: int = 4
    ):
        """
        Args:
            config: 분할 임계값
            mode: 검출 방식 ('per-line' / 'global')
            input_config: 파일 읽기 설정
            max_workers: 동시 검출 수
        """
        self.config = config or SplitterConfig()
        self.mode = mode
        self.input_config = input_config or InputConfig()
        self.max_workers = max(1, max_workers)
        # 모드 오류는 파일을 읽기 전에 드러나야 한다
        create_detector(mode, self.config)
        logger.info(f"BatchRunner initialized: mode={mode}, workers={self.max_workers}")

    def _detect(self, text: str) -> List[Chapter]:
        return create_detector(self.mode, self.config).detect_chapters(text)

    def run(self, file_paths: Sequence[str]) -> List[BatchItem]:
        """파일 목록 처리 (입력 순서대로 결과 반환)

        실패한 파일은 error에 사유를 담고 나머지 파일은 계속 처리한다.
        """
        started = time.time()
        items = [BatchItem(path=p) for p in file_paths]
        texts: Dict[str, str] = {}
        first_by_hash: Dict[str, BatchItem] = {}

        for item in items:
            try:
                novel = read_novel_file(item.path, self.input_config)
            except (OSError, ValueError) as e:
                item.error = str(e)
                logger.error(f"❌ {item.path}: {e}")
                continue

            item.encoding = novel.encoding
            item.content_hash = content_hash(novel.text)
            if item.content_hash in first_by_hash:
                item.duplicate_of = first_by_hash[item.content_hash].path
                logger.warning(f"⚠️ Duplicate content: {item.path} = {item.duplicate_of}")
                continue

            first_by_hash[item.content_hash] = item
            texts[item.content_hash] = novel.text

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_item = {
                executor.submit(self._detect, texts[item.content_hash]): item
                for item in first_by_hash.values()
            }
            for future in as_completed(future_to_item):
                item = future_to_item[future]
                try:
                    item.chapters = future.result()
                except Exception as e:
                    item.error = f"Detection failed: {e}"
                    logger.error(f"❌ {item.path}: {item.error}")

        for item in items:
            if item.duplicate_of:
                original = first_by_hash[item.content_hash]
                item.chapters = list(original.chapters)
                item.error = original.error

        success = sum(1 for item in items if item.ok)
        logger.info(
            f"✅ Batch finished: {success}/{len(items)} files, "
            f"{sum(len(item.chapters) for item in items)} chapters, {time.time() - started:.1f}s"
        )
        return items
