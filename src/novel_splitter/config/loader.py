"""설정 파일 로더 (YAML)

config.yml을 읽어서 Python 객체로 변환하고, 사용자 설정을 다시 저장한다.
챕터 분할기 자체는 SplitterConfig만 받으므로 디스크를 읽지 않는다.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple
from dataclasses import dataclass, field, asdict, replace
from novel_splitter.stages.noise_filter import DEFAULT_AD_KEYWORDS
from novel_splitter.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yml"

# 변형별 임계값 (strict: 줄 단위 엄격 검출기 / loose: 단순 검출기)
PRESETS: Dict[str, Dict[str, int]] = {
    "strict": {
        "min_chapter_length": 800,
        "fallback_min_length": 2000,
        "min_sentence_count": 5,
    },
    "loose": {
        "min_chapter_length": 500,
        "fallback_min_length": 1000,
        "min_sentence_count": 3,
    },
}


@dataclass(frozen=True)
class SplitterConfig:
    """챕터 분할 임계값

    Attributes:
        min_chapter_length: 챕터 본문 최소 글자 수 (미달 시 버림)
        fallback_min_length: 후보가 없을 때 전체 문서를 한 챕터로 낼 최소 글자 수
        min_sentence_count: 본문 최소 문장 조각 수
        short_title_length: 이 길이 이하 제목은 본문 첫 줄 발췌를 덧붙임
        title_excerpt_length: 덧붙이는 발췌 최대 길이
        max_title_length: 최종 제목 최대 길이
        ad_keywords: 광고 줄 판정 키워드
    """
    min_chapter_length: int = 800
    fallback_min_length: int = 2000
    min_sentence_count: int = 5
    short_title_length: int = 5
    title_excerpt_length: int = 10
    max_title_length: int = 30
    ad_keywords: Tuple[str, ...] = DEFAULT_AD_KEYWORDS

    @classmethod
    def from_preset(cls, name: str = "strict", **overrides) -> "SplitterConfig":
        """이름 있는 프리셋으로 생성

        Raises:
            ValueError: 알 수 없는 프리셋
        """
        if name not in PRESETS:
            raise ValueError(f"Unknown preset: {name} (choose from {', '.join(PRESETS)})")
        values = dict(PRESETS[name])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class PathsConfig:
    """경로 설정"""
    output_folder: str = "data/output"
    logs: str = "data/logs"


@dataclass
class SplitterSettings:
    """분할 설정 (config.yml의 splitter 섹션)"""
    preset: str = "strict"
    mode: str = "per-line"
    presets: Dict[str, Dict[str, int]] = field(default_factory=lambda: {k: dict(v) for k, v in PRESETS.items()})
    short_title_length: int = 5
    title_excerpt_length: int = 10
    max_title_length: int = 30
    ad_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_AD_KEYWORDS))

    def to_splitter_config(self, preset: Optional[str] = None) -> SplitterConfig:
        """현재 설정으로 SplitterConfig 생성 (preset 인자가 있으면 우선)"""
        name = preset or self.preset
        if name not in self.presets:
            raise ValueError(f"Unknown preset: {name} (choose from {', '.join(self.presets)})")
        return SplitterConfig(
            short_title_length=self.short_title_length,
            title_excerpt_length=self.title_excerpt_length,
            max_title_length=self.max_title_length,
            ad_keywords=tuple(self.ad_keywords),
            **self.presets[name]
        )


@dataclass
class InputConfig:
    """입력 파일 설정"""
    max_file_size: int = 10 * 1024 * 1024
    auto_detect_encoding: bool = True
    default_encoding: str = "utf-8"
    sample_size: int = 10000


@dataclass
class ExportConfig:
    """Markdown/ZIP 내보내기 설정"""
    archive_name: str = "小说章节打包.zip"
    include_index: bool = True


@dataclass
class ProcessingConfig:
    """배치 처리 옵션"""
    max_workers: int = 4


@dataclass
class AIConfig:
    """AI 제목 제안 설정 (OpenAI 호환 API)"""
    provider: str = "deepseek"
    model: Optional[str] = None
    api_key_env: str = "NOVEL_SPLITTER_API_KEY"
    timeout: int = 30
    max_retries: int = 3
    sample_chars: int = 1500


@dataclass
class LoggingConfig:
    """로깅 설정"""
    file_level: str = "DEBUG"
    console_level: str = "INFO"


@dataclass
class Config:
    """전체 설정"""
    paths: PathsConfig = field(default_factory=PathsConfig)
    splitter: SplitterSettings = field(default_factory=SplitterSettings)
    input: InputConfig = field(default_factory=InputConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """config.yml 로드

    빠진 섹션/키는 기본값으로 채운다.

    Args:
        config_path: 설정 파일 경로

    Returns:
        Config 객체

    Raises:
        FileNotFoundError: 설정 파일이 없을 때
        yaml.YAMLError: YAML 파싱 에러
    """
    path = Path(config_path)
    if not path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading config from: {config_path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    config = Config(
        paths=PathsConfig(**data.get("paths", {})),
        splitter=SplitterSettings(**data.get("splitter", {})),
        input=InputConfig(**data.get("input", {})),
        export=ExportConfig(**data.get("export", {})),
        processing=ProcessingConfig(**data.get("processing", {})),
        ai=AIConfig(**data.get("ai", {})),
        logging=LoggingConfig(**data.get("logging", {}))
    )

    logger.debug(f"Config loaded: preset={config.splitter.preset}, mode={config.splitter.mode}")
    return config


# 전역 설정 인스턴스 (싱글톤)
_config: Optional[Config] = None


def get_config() -> Config:
    """전역 설정 인스턴스 반환 (싱글톤)

    Example:
        >>> from novel_splitter.config.loader import get_config
        >>> config = get_config()
        >>> print(config.splitter.preset)
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def save_config(config: Config, config_path: str = DEFAULT_CONFIG_PATH) -> None:
    """config.yml 저장 (사용자 설정 영속화)

    Args:
        config: Config 객체
        config_path: 설정 파일 경로
    """
    global _config
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(asdict(config), f, allow_unicode=True, default_flow_style=False, sort_keys=False)

    if config_path == DEFAULT_CONFIG_PATH:
        _config = config
    logger.info(f"✅ Config saved: {config_path}")


def update_preset(config: Config, preset: str, **thresholds: Any) -> Config:
    """프리셋 선택/임계값 변경을 반영한 새 Config 반환

    Raises:
        ValueError: 알 수 없는 프리셋
    """
    if preset not in config.splitter.presets:
        raise ValueError(f"Unknown preset: {preset} (choose from {', '.join(config.splitter.presets)})")

    presets = {k: dict(v) for k, v in config.splitter.presets.items()}
    presets[preset].update({k: v for k, v in thresholds.items() if v is not None})
    splitter = replace(config.splitter, preset=preset, presets=presets)
    return replace(config, splitter=splitter)
