"""광고/홍보 문구 필터

TXT 소설 파일에 섞여 들어오는 다운로드 사이트 광고 줄을 걸러낸다.
제목 탐색과 본문 조립 양쪽에서 같은 판정을 사용한다.
"""

from typing import Iterable, List, Optional, Sequence
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

# 기본 광고 키워드 (부분 문자열, 대소문자 무시)
DEFAULT_AD_KEYWORDS = (
    "打包下载",
    "免费下载",
    "全集电子书",
    "网盘链接",
    "提取码",
    "联系微信",
    "联系qq",
    "加微信",
    "加qq群",
    "关注公众号",
    "微信公众号",
    "txt下载",
    "txt全集",
    "电子书下载",
    "百度网盘",
    "更多精彩小说",
    "最新章节请到",
    "本书由",
    "整理制作",
    "手机阅读请",
    "www.",
    "http://",
    "https://",
)


class NoiseFilter:
    """광고 줄 판정기

    키워드는 소문자로 정규화해 두고, 각 줄도 소문자로 바꿔 부분 문자열 비교한다.
    """

    def __init__(self, keywords: Optional[Sequence[str]] = None):
        source = DEFAULT_AD_KEYWORDS if keywords is None else keywords
        self.keywords = tuple(k.lower() for k in source if k and k.strip())

    def is_ad_line(self, line: str) -> bool:
        lowered = line.lower()
        return any(keyword in lowered for keyword in self.keywords)

    def filter_lines(self, lines: Iterable[str]) -> List[str]:
        """광고 줄을 제거한 줄 목록 반환 (빈 줄은 유지)"""
        kept = []
        dropped = 0
        for line in lines:
            if self.is_ad_line(line):
                dropped += 1
                continue
            kept.append(line)

        if dropped:
            logger.debug(f"Noise filter dropped {dropped} ad lines")
        return kept

    def filter_text(self, text: str) -> str:
        """광고 줄을 제거한 전체 텍스트 (앞뒤 공백 제거)"""
        return "\n".join(self.filter_lines(text.splitlines())).strip()
