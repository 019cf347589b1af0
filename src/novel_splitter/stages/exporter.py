"""챕터 내보내기

챕터별 Markdown 문서 생성, ZIP 일괄 묶음, 단일 챕터 저장
"""

import re
import zipfile
from pathlib import Path
from typing import List, Sequence, Tuple
from novel_splitter.stages.chapter import Chapter
from novel_splitter.utils.text_cleaner import sanitize_filename
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

MARKDOWN_TEMPLATE = "# {title}\n\n字数：{word_count}\n\n---\n\n{content}\n"

# 머리말(제목/글자 수)과 본문 구분선
BODY_SEPARATOR = "\n\n---\n\n"

HEADER_RE = re.compile(r'^# (?P<title>[^\n]*)\n\n字数：(?P<word_count>\d+)$')


def render_markdown(chapter: Chapter) -> str:
    """챕터 → Markdown 문서"""
    return MARKDOWN_TEMPLATE.format(
        title=chapter.title,
        word_count=chapter.word_count,
        content=chapter.content
    )


def parse_markdown(document: str) -> Tuple[str, int, str]:
    """render_markdown 결과를 다시 (title, word_count, content)로 읽기

    본문은 구분선 뒤부터 파일 끝까지이며, 템플릿이 붙인 마지막 개행 하나만 제거한다.

    Raises:
        ValueError: 형식이 맞지 않을 때
    """
    header, sep, body = document.partition(BODY_SEPARATOR)
    match = HEADER_RE.match(header)
    if not sep or not match:
        raise ValueError("Not a chapter Markdown document")

    if body.endswith("\n"):
        body = body[:-1]
    return match.group('title'), int(match.group('word_count')), body


def chapter_filename(chapter: Chapter, include_index: bool = True) -> str:
    """챕터 파일명 ({index}-{title}.md 또는 {title}.md)"""
    safe_title = sanitize_filename(chapter.title)
    if include_index:
        return f"{chapter.index}-{safe_title}.md"
    return f"{safe_title}.md"


def _unique_filenames(chapters: Sequence[Chapter], include_index: bool) -> List[str]:
    """같은 이름이 생기면 _2, _3 ... 접미사"""
    names = []
    seen = {}
    for chapter in chapters:
        name = chapter_filename(chapter, include_index)
        count = seen.get(name, 0) + 1
        seen[name] = count
        if count > 1:
            stem = name[:-len(".md")]
            name = f"{stem}_{count}.md"
        names.append(name)
    return names


def write_chapter(chapter: Chapter, output_dir: str, include_index: bool = True) -> Path:
    """단일 챕터를 Markdown 파일로 저장

    Returns:
        저장된 파일 경로
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    path = out / chapter_filename(chapter, include_index)
    path.write_text(render_markdown(chapter), encoding="utf-8")
    logger.debug(f"Chapter saved: {path}")
    return path


def write_directory(chapters: Sequence[Chapter], output_dir: str, include_index: bool = True) -> List[Path]:
    """모든 챕터를 디렉토리에 개별 Markdown 파일로 저장"""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    paths = []
    for chapter, name in zip(chapters, _unique_filenames(chapters, include_index)):
        path = out / name
        path.write_text(render_markdown(chapter), encoding="utf-8")
        paths.append(path)

    logger.info(f"✅ {len(paths)} chapters saved: {out}")
    return paths


def write_archive(chapters: Sequence[Chapter], archive_path: str, include_index: bool = True) -> Path:
    """모든 챕터를 하나의 ZIP 파일로 묶기

    Args:
        chapters: 챕터 목록
        archive_path: 생성할 ZIP 경로
        include_index: 파일명에 순번 포함 여부

    Returns:
        ZIP 파일 경로

    Raises:
        ValueError: 챕터가 없을 때
    """
    if not chapters:
        raise ValueError("No chapters to archive")

    path = Path(archive_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with zipfile.ZipFile(path, 'w', zipfile.ZIP_DEFLATED) as zf:
        for chapter, name in zip(chapters, _unique_filenames(chapters, include_index)):
            zf.writestr(name, render_markdown(chapter).encode("utf-8"))

    logger.info(f"📦 Archive created: {path} ({len(chapters)} chapters)")
    return path
