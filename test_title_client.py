"""AI 제목 제안 클라이언트 테스트 (API 호출은 mock)"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import unittest.mock as mock
import requests
from tenacity import wait_none

from novel_splitter.ai.title_client import PROVIDERS, TitleClient
from novel_splitter.config.loader import AIConfig
from novel_splitter.stages.chapter import Chapter

UNSET_ENV = "NOVEL_SPLITTER_TEST_UNSET_KEY"


def make_chapters():
    content = "他走进院子，看了看天色。远处传来几声狗叫。" * 20
    return [
        Chapter(index=1, title="第一章 开始", content=content, word_count=len(content)),
        Chapter(index=2, title="第二章 继续", content=content, word_count=len(content)),
    ]


def fake_response(answer: str) -> mock.MagicMock:
    response = mock.MagicMock()
    response.json.return_value = {"choices": [{"message": {"content": answer}}]}
    response.raise_for_status.return_value = None
    return response


def test_disabled_without_key():
    client = TitleClient(AIConfig(api_key_env=UNSET_ENV))
    chapters = make_chapters()

    assert client.enabled is False
    assert client.suggest_title(chapters[0]) is None
    assert client.retitle(chapters) == chapters


def test_unknown_provider():
    try:
        TitleClient(AIConfig(provider="nobody"), api_key="test")
        assert False, "ValueError expected"
    except ValueError as e:
        assert "nobody" in str(e)


def test_provider_defaults():
    client = TitleClient(AIConfig(provider="kimi"), api_key="test")

    assert client.model == PROVIDERS["kimi"].default_model
    assert client.endpoint == "https://api.moonshot.cn/v1/chat/completions"

    custom = TitleClient(AIConfig(provider="openai", model="gpt-4o-mini"), api_key="test")
    assert custom.model == "gpt-4o-mini"


def test_retitle():
    client = TitleClient(AIConfig(max_retries=1), api_key="test")
    chapters = make_chapters()

    with mock.patch("novel_splitter.ai.title_client.requests.post") as post:
        post.side_effect = [fake_response("「院中夜色」"), fake_response("犬吠声声\n因为正文写了狗叫")]
        result = client.retitle(chapters)

    assert [c.title for c in result] == ["院中夜色", "犬吠声声"]
    assert [c.content for c in result] == [c.content for c in chapters]
    assert [c.title for c in chapters] == ["第一章 开始", "第二章 继续"]

    url = post.call_args_list[0][0][0]
    payload = post.call_args_list[0][1]["json"]
    headers = post.call_args_list[0][1]["headers"]
    assert url == "https://api.deepseek.com/v1/chat/completions"
    assert payload["model"] == "deepseek-chat"
    assert "第一章 开始" in payload["messages"][1]["content"]
    assert headers["Authorization"] == "Bearer test"


def test_failure_keeps_original_title():
    client = TitleClient(AIConfig(max_retries=1), api_key="test")
    chapters = make_chapters()

    with mock.patch("novel_splitter.ai.title_client.requests.post") as post:
        post.side_effect = [requests.ConnectionError("offline"), fake_response("新标题")]
        result = client.retitle(chapters)

    assert [c.title for c in result] == ["第一章 开始", "新标题"]


def test_retry_after_connection_error():
    """네트워크 오류는 max_retries 안에서 다시 시도한다"""
    client = TitleClient(AIConfig(max_retries=2), api_key="test")
    chapter = make_chapters()[0]

    with mock.patch("novel_splitter.ai.title_client.wait_exponential", return_value=wait_none()), \
            mock.patch("novel_splitter.ai.title_client.requests.post") as post:
        post.side_effect = [requests.ConnectionError("reset"), fake_response("院中夜色")]
        title = client.suggest_title(chapter)

    assert title == "院中夜色"
    assert post.call_count == 2


def test_retries_exhausted():
    client = TitleClient(AIConfig(max_retries=2), api_key="test")

    with mock.patch("novel_splitter.ai.title_client.wait_exponential", return_value=wait_none()), \
            mock.patch("novel_splitter.ai.title_client.requests.post") as post:
        post.side_effect = requests.Timeout("slow")
        result = client.retitle(make_chapters())

    assert [c.title for c in result] == ["第一章 开始", "第二章 继续"]
    assert post.call_count == 4


def test_malformed_response():
    client = TitleClient(AIConfig(max_retries=1), api_key="test")
    response = mock.MagicMock()
    response.json.return_value = {"choices": []}

    with mock.patch("novel_splitter.ai.title_client.requests.post", return_value=response):
        assert client.suggest_title(make_chapters()[0]) is None


def test_clean_title():
    assert TitleClient.clean_title('"风起云涌"') == "风起云涌"
    assert TitleClient.clean_title("\n\n《雪夜》\n解释") == "雪夜"
    assert TitleClient.clean_title("  两个   空格  ") == "两个 空格"
    assert TitleClient.clean_title("长" * 40) == "长" * 30
    assert TitleClient.clean_title("a") is None
    assert TitleClient.clean_title("") is None
    assert TitleClient.clean_title(None) is None


if __name__ == "__main__":
    test_disabled_without_key()
    test_unknown_provider()
    test_provider_defaults()
    test_retitle()
    test_failure_keeps_original_title()
    test_retry_after_connection_error()
    test_retries_exhausted()
    test_malformed_response()
    test_clean_title()
    print("✅ All title client tests passed!")
