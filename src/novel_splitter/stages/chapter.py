"""챕터 데이터 구조

소설의 챕터를 나타내는 데이터 클래스
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Chapter:
    """소설의 한 챕터

    Attributes:
        index: 챕터 순서 (1부터 연속)
        title: 챕터 제목 (예: "第一章 开始")
        content: 챕터 본문 내용 (제목 줄 제외)
        word_count: 본문 글자 수 (CJK는 한 글자 단위, 공백/개행 포함)
    """
    index: int
    title: str
    content: str
    word_count: int

    def __repr__(self):
        return f"<Chapter {self.index}: {self.title} ({self.word_count} chars)>"
