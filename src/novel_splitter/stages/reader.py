"""TXT 파일 읽기

크기 제한 확인, chardet 인코딩 감지, 디코딩
"""

import codecs
import chardet
from pathlib import Path
from typing import Optional
from dataclasses import dataclass
from novel_splitter.config.loader import InputConfig
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

# 허용 확장자
ALLOWED_EXTENSIONS = {".txt"}


@dataclass
class NovelText:
    """읽어 들인 소설 텍스트"""
    path: str
    name: str
    size: int
    encoding: str
    text: str


def is_utf8(raw: bytes) -> bool:
    """파일 전체가 UTF-8로 엄격하게 디코딩되면 True (ASCII 포함)"""
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def detect_encoding(raw: bytes, sample_size: int = 10000) -> Optional[str]:
    """인코딩 감지

    Args:
        raw: 파일 바이트
        sample_size: 샘플 크기 (바이트)

    Returns:
        인코딩 이름 (예: 'utf-8', 'GB2312'), 신뢰도 0.7 이하이면 None
    """
    result = chardet.detect(raw[:sample_size])
    # 앞부분이 ASCII뿐이면 샘플로는 판단할 수 없으므로 전체로 다시 감지
    if (result.get("encoding") or "").lower() == "ascii" and len(raw) > sample_size:
        result = chardet.detect(raw)
    encoding = result.get("encoding")
    confidence = result.get("confidence") or 0

    if encoding and confidence > 0.7:
        logger.debug(f"Encoding detected: {encoding} ({confidence:.2f})")
        return encoding

    logger.debug(f"Low confidence encoding: {encoding} ({confidence:.2f})")
    return None


def read_novel_file(file_path: str, input_config: Optional[InputConfig] = None) -> NovelText:
    """소설 TXT 파일 읽기

    Args:
        file_path: 파일 경로
        input_config: 입력 설정 (None이면 기본값: 10MB, utf-8)

    Returns:
        NovelText

    Raises:
        FileNotFoundError: 파일이 없을 때
        ValueError: 확장자/크기/인코딩 문제
    """
    cfg = input_config or InputConfig()
    path = Path(file_path)

    if not path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")

    if path.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise ValueError(f"Only TXT files are supported: {path.name}")

    size = path.stat().st_size
    if size > cfg.max_file_size:
        raise ValueError(
            f"File too large: {path.name} ({size / 1024 / 1024:.2f} MB > "
            f"{cfg.max_file_size / 1024 / 1024:.0f} MB)"
        )

    raw = path.read_bytes()

    encoding = None
    if cfg.auto_detect_encoding:
        encoding = "utf-8" if is_utf8(raw) else detect_encoding(raw, cfg.sample_size)
    encoding = encoding or cfg.default_encoding

    try:
        codecs.lookup(encoding)
    except LookupError:
        raise ValueError(f"Unknown encoding '{encoding}' for {path.name}")

    # GB2312로 감지돼도 GBK 확장 문자가 섞인 파일이 많다
    if encoding.lower() in ("gb2312", "gb18030"):
        encoding = "gb18030"

    text = raw.decode(encoding, errors="replace")
    logger.info(f"📖 Read {path.name}: {size} bytes, encoding={encoding}, {len(text)} chars")

    return NovelText(
        path=str(path.absolute()),
        name=path.name,
        size=size,
        encoding=encoding,
        text=text
    )
