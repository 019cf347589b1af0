"""일괄 분할 테스트 (병렬 처리, 중복 감지, 실패 격리)"""

import sys
import tempfile
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from novel_splitter.stages.batch import BatchRunner, content_hash
from novel_splitter.stages.splitter import detect_chapters
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

SAMPLE = "他走进院子，看了看天色。远处传来几声狗叫。"


def novel(*titles: str) -> str:
    return "\n".join(f"{title}\n" + "\n".join([SAMPLE] * 50) for title in titles)


def test_content_hash():
    assert content_hash("第一章") == content_hash("第一章")
    assert content_hash("第一章") != content_hash("第二章")
    assert len(content_hash("")) == 16


def test_batch_run():
    with tempfile.TemporaryDirectory() as tmp:
        first = Path(tmp) / "a.txt"
        second = Path(tmp) / "b.txt"
        copy = Path(tmp) / "a_copy.txt"
        missing = Path(tmp) / "missing.txt"

        first.write_text(novel("第一章 开始", "第二章 继续"), encoding="utf-8")
        second.write_text(novel("第一章 出发", "第二章 途中", "第三章 抵达"), encoding="utf-8")
        copy.write_text(novel("第一章 开始", "第二章 继续"), encoding="utf-8")

        paths = [str(first), str(missing), str(second), str(copy)]
        items = BatchRunner(max_workers=2).run(paths)

        assert [item.path for item in items] == paths

        assert items[0].ok
        assert [c.title for c in items[0].chapters] == ["第一章 开始", "第二章 继续"]
        assert items[0].duplicate_of is None

        assert not items[1].ok
        assert "not found" in items[1].error
        assert items[1].chapters == []

        assert [c.title for c in items[2].chapters] == ["第一章 出发", "第二章 途中", "第三章 抵达"]

        assert items[3].duplicate_of == str(first)
        assert items[3].content_hash == items[0].content_hash
        assert items[3].chapters == items[0].chapters


def test_batch_matches_single_detection():
    """병렬 처리 결과는 문서별 단독 검출과 같다"""
    texts = [novel("第一章 开始"), novel("第一章 开始", "第二章 继续"), "太短了"]

    with tempfile.TemporaryDirectory() as tmp:
        paths = []
        for i, text in enumerate(texts):
            path = Path(tmp) / f"{i}.txt"
            path.write_text(text, encoding="utf-8")
            paths.append(str(path))

        items = BatchRunner(max_workers=3).run(paths)

    for item, text in zip(items, texts):
        assert item.ok
        assert item.chapters == detect_chapters(text)
    assert items[2].chapters == []


def test_invalid_mode():
    try:
        BatchRunner(mode="hybrid")
        assert False, "ValueError expected"
    except ValueError:
        pass


if __name__ == "__main__":
    test_content_hash()
    test_batch_run()
    test_batch_matches_single_detection()
    test_invalid_mode()
    print("✅ All batch tests passed!")
