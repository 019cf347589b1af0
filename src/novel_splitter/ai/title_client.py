"""AI 챕터 제목 제안 클라이언트 (OpenAI 호환 Chat Completions API)

검출 결과에 의존하지 않는 선택 기능. 키가 없거나 호출이 실패하면 원래 제목을 그대로 둔다.
"""

import os
import time
import requests
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type
from novel_splitter.config.loader import AIConfig
from novel_splitter.stages.chapter import Chapter
from novel_splitter.utils.text_cleaner import clip, collapse_whitespace
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

MAX_TITLE_LENGTH = 30


@dataclass(frozen=True)
class AIProvider:
    """프리셋 제공자"""
    id: str
    name: str
    api_base_url: str
    default_model: str


PROVIDERS: Dict[str, AIProvider] = {
    "siliconflow": AIProvider("siliconflow", "硅基流动", "https://api.siliconflow.cn/v1", "Qwen/Qwen2-7B-Instruct"),
    "kimi": AIProvider("kimi", "Kimi", "https://api.moonshot.cn/v1", "moonshot-v1-8k"),
    "deepseek": AIProvider("deepseek", "DeepSeek", "https://api.deepseek.com/v1", "deepseek-chat"),
    "openai": AIProvider("openai", "OpenAI", "https://api.openai.com/v1", "gpt-3.5-turbo"),
}


class TitleClient:
    """챕터 본문 앞부분으로 짧은 제목을 제안받는 클라이언트"""

    def __init__(self, ai_config: Optional[AIConfig] = None, api_key: Optional[str] = None):
        """
        Args:
            ai_config: AI 설정 (None이면 기본값)
            api_key: API 키 (None이면 ai_config.api_key_env 환경변수)

        Raises:
            ValueError: 알 수 없는 provider
        """
        self.config = ai_config or AIConfig()
        if self.config.provider not in PROVIDERS:
            raise ValueError(f"Unknown AI provider: {self.config.provider} (choose from {', '.join(PROVIDERS)})")

        self.provider = PROVIDERS[self.config.provider]
        self.model = self.config.model or self.provider.default_model
        self.endpoint = f"{self.provider.api_base_url}/chat/completions"

        self.api_key = api_key or os.getenv(self.config.api_key_env)
        if not self.api_key:
            logger.warning(f"{self.config.api_key_env} not set - AI titles disabled")
            self.enabled = False
            return

        self.enabled = True
        logger.info(f"TitleClient initialized: provider={self.provider.id}, model={self.model}")

    def _post(self, messages: List[Dict[str, str]]) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.3,
            "max_tokens": 64,
        }
        response = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.config.timeout)
        response.raise_for_status()

        data = response.json()
        return data["choices"][0]["message"]["content"]

    def _call_api(self, messages: List[Dict[str, str]]) -> str:
        """API 호출 (네트워크/HTTP 오류는 지수 백오프 재시도)"""
        retrying = Retrying(
            stop=stop_after_attempt(max(1, self.config.max_retries)),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(requests.RequestException),
            reraise=True
        )
        return retrying(self._post, messages)

    def _build_messages(self, chapter: Chapter) -> List[Dict[str, str]]:
        sample = chapter.content[:self.config.sample_chars]
        return [
            {
                "role": "system",
                "content": "你是小说编辑。根据章节正文拟一个不超过12个字的章节标题，只输出标题本身，不要标点和解释。"
            },
            {
                "role": "user",
                "content": f"原标题：{chapter.title}\n\n正文：\n{sample}"
            },
        ]

    @staticmethod
    def clean_title(answer: Optional[str]) -> Optional[str]:
        """응답 첫 줄에서 따옴표/공백 정리, 2글자 미만이면 None"""
        if not answer:
            return None
        first_line = next((line for line in answer.splitlines() if line.strip()), "")
        title = collapse_whitespace(first_line.strip().strip('"\'“”「」《》#*'))
        title = clip(title, MAX_TITLE_LENGTH)
        return title if len(title) >= 2 else None

    def suggest_title(self, chapter: Chapter) -> Optional[str]:
        """제목 제안 (비활성/실패 시 None)"""
        if not self.enabled:
            return None

        try:
            answer = self._call_api(self._build_messages(chapter))
        except (requests.RequestException, KeyError, IndexError, ValueError) as e:
            logger.error(f"AI title failed for chapter {chapter.index}: {e}")
            return None

        return self.clean_title(answer)

    def retitle(self, chapters: Sequence[Chapter], min_interval: float = 0.0) -> List[Chapter]:
        """각 챕터 제목을 AI 제안으로 교체한 새 목록 (실패한 챕터는 원래 제목 유지)

        Args:
            chapters: 검출된 챕터
            min_interval: 호출 간 최소 간격 (초)
        """
        if not self.enabled:
            return list(chapters)

        result = []
        for chapter in chapters:
            suggested = self.suggest_title(chapter)
            if suggested:
                logger.debug(f"AI title: '{chapter.title}' → '{suggested}'")
                chapter = replace(chapter, title=suggested)
            result.append(chapter)
            if min_interval:
                time.sleep(min_interval)

        logger.info(f"✅ AI titles applied to {sum(1 for a, b in zip(chapters, result) if a.title != b.title)} chapters")
        return result
