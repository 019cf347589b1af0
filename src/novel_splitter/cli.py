"""CLI 인터페이스

Typer 기반 명령줄 인터페이스, Rich 기반 출력
"""

import typer
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.panel import Panel
from novel_splitter.config.loader import (
    Config, DEFAULT_CONFIG_PATH, load_config, save_config, update_preset
)
from novel_splitter.stages.chapter import Chapter
from novel_splitter.stages.detector import MODES, create_detector
from novel_splitter.stages.reader import read_novel_file
from novel_splitter.stages.exporter import write_archive, write_chapter, write_directory
from novel_splitter.stages.batch import BatchRunner
from novel_splitter.ai.title_client import TitleClient
from novel_splitter.utils.logger import get_logger, set_levels

logger = get_logger(__name__)
console = Console()
app = typer.Typer(help="Novel Splitter - 小说章节拆分工具 (TXT → Markdown)")

EXCERPT_LENGTH = 40


def _load(config_path: str) -> Config:
    """설정 로드 (파일이 없으면 기본값) + 로깅 레벨 반영"""
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        logger.warning(f"Config file not found: {config_path}, using defaults")
        config = Config()
    set_levels(config.logging.file_level, config.logging.console_level)
    return config


def _fail(message: str) -> None:
    console.print(f"[bold red]❌ {message}[/bold red]")
    raise typer.Exit(code=1)


def _detect(config: Config, file: str, preset: Optional[str], mode: Optional[str]) -> List[Chapter]:
    novel = read_novel_file(file, config.input)
    detector = create_detector(mode or config.splitter.mode, config.splitter.to_splitter_config(preset))

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(f"[cyan]章节识别中... {novel.name}", total=None)
        return detector.detect_chapters(novel.text)


def _result_table(chapters: List[Chapter], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("标题", style="green")
    table.add_column("字数", style="yellow", justify="right")
    table.add_column("开头", style="dim")
    for chapter in chapters:
        excerpt = chapter.content[:EXCERPT_LENGTH].replace("\n", " ")
        table.add_row(str(chapter.index), chapter.title, f"{chapter.word_count:,}", excerpt)
    return table


@app.command()
def split(
    file: str = typer.Argument(..., help="TXT 소설 파일"),
    out: Optional[str] = typer.Option(None, "--out", "-o", help="출력 폴더 (기본: paths.output_folder)"),
    as_zip: bool = typer.Option(True, "--zip/--no-zip", help="ZIP 하나로 묶기 / 개별 Markdown 파일"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="strict / loose"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="per-line / global"),
    ai_titles: bool = typer.Option(False, "--ai-titles", help="AI로 챕터 제목 다시 짓기"),
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="설정 파일")
):
    """TXT 파일을 챕터별 Markdown으로 분할"""
    console.print(Panel.fit("📚 章节拆分", style="bold blue"))
    config = _load(config_path)

    try:
        chapters = _detect(config, file, preset, mode)
    except (OSError, ValueError) as e:
        _fail(str(e))

    if not chapters:
        _fail("未识别到章节 (0 chapters found)")

    if ai_titles:
        try:
            client = TitleClient(config.ai)
        except ValueError as e:
            _fail(str(e))
        chapters = client.retitle(chapters)

    output_dir = Path(out or config.paths.output_folder) / Path(file).stem
    include_index = config.export.include_index
    try:
        if as_zip:
            target = write_archive(chapters, str(output_dir / config.export.archive_name), include_index)
        else:
            write_directory(chapters, str(output_dir), include_index)
            target = output_dir
    except OSError as e:
        _fail(f"打包文件时出错: {e}")

    console.print(_result_table(chapters, f"共识别到 {len(chapters)} 个章节"))
    console.print(f"\n✅ 输出: [green]{target}[/green]")


@app.command()
def preview(
    file: str = typer.Argument(..., help="TXT 소설 파일"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="strict / loose"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="per-line / global"),
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="설정 파일")
):
    """파일을 저장하지 않고 챕터 검출 결과만 표시"""
    config = _load(config_path)
    try:
        chapters = _detect(config, file, preset, mode)
    except (OSError, ValueError) as e:
        _fail(str(e))

    if not chapters:
        console.print("[yellow]⚠️ 未识别到章节 (0 chapters found)[/yellow]")
        return
    console.print(_result_table(chapters, f"共识别到 {len(chapters)} 个章节"))


@app.command()
def export(
    file: str = typer.Argument(..., help="TXT 소설 파일"),
    index: int = typer.Argument(..., help="챕터 번호 (1부터)"),
    out: Optional[str] = typer.Option(None, "--out", "-o", help="출력 폴더"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="strict / loose"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="per-line / global"),
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="설정 파일")
):
    """챕터 하나만 Markdown 파일로 저장"""
    config = _load(config_path)
    try:
        chapters = _detect(config, file, preset, mode)
    except (OSError, ValueError) as e:
        _fail(str(e))

    if not 1 <= index <= len(chapters):
        _fail(f"Chapter {index} not found ({len(chapters)} chapters)")

    output_dir = Path(out or config.paths.output_folder) / Path(file).stem
    try:
        path = write_chapter(chapters[index - 1], str(output_dir), config.export.include_index)
    except OSError as e:
        _fail(f"保存文件时出错: {e}")

    console.print(f"✅ 已保存: [green]{path}[/green]")


@app.command()
def batch(
    files: List[str] = typer.Argument(..., help="TXT 소설 파일 목록"),
    out: Optional[str] = typer.Option(None, "--out", "-o", help="출력 폴더"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="strict / loose"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="per-line / global"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="동시 처리 수"),
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="설정 파일")
):
    """여러 파일을 병렬로 분할해 파일별 ZIP 생성"""
    console.print(Panel.fit("📦 批量拆分", style="bold blue"))
    config = _load(config_path)

    try:
        runner = BatchRunner(
            config=config.splitter.to_splitter_config(preset),
            mode=mode or config.splitter.mode,
            input_config=config.input,
            max_workers=workers or config.processing.max_workers
        )
    except ValueError as e:
        _fail(str(e))

    items = runner.run(files)

    table = Table(title="批量拆分结果")
    table.add_column("文件", style="cyan")
    table.add_column("章节", style="green", justify="right")
    table.add_column("状态", style="yellow")

    output_root = Path(out or config.paths.output_folder)
    failed = 0
    for item in items:
        status = "✅"
        if not item.ok:
            status = f"❌ {item.error}"
        elif not item.chapters:
            status = "⚠️ 0 chapters"
        else:
            try:
                write_archive(
                    item.chapters,
                    str(output_root / Path(item.path).stem / config.export.archive_name),
                    config.export.include_index
                )
            except OSError as e:
                status = f"❌ {e}"
        if item.duplicate_of and item.ok:
            status += f" (= {Path(item.duplicate_of).name})"
        if status.startswith("❌"):
            failed += 1
        table.add_row(Path(item.path).name, str(len(item.chapters)), status)

    console.print(table)
    if failed:
        raise typer.Exit(code=1)


@app.command()
def configure(
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="기본 프리셋 (strict / loose)"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="기본 검출 방식 (per-line / global)"),
    min_length: Optional[int] = typer.Option(None, "--min-length", help="최소 챕터 길이"),
    fallback_length: Optional[int] = typer.Option(None, "--fallback-length", help="전체 문서 챕터 최소 길이"),
    min_sentences: Optional[int] = typer.Option(None, "--min-sentences", help="최소 문장 조각 수"),
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="설정 파일")
):
    """분할 설정 확인/저장 (옵션 없이 실행하면 현재 값만 표시)"""
    config = _load(config_path)
    changed = any(v is not None for v in (preset, mode, min_length, fallback_length, min_sentences))

    if changed:
        if mode is not None and mode not in MODES:
            _fail(f"Unknown detection mode: {mode} (choose from {', '.join(MODES)})")
        try:
            config = update_preset(
                config,
                preset or config.splitter.preset,
                min_chapter_length=min_length,
                fallback_min_length=fallback_length,
                min_sentence_count=min_sentences
            )
        except ValueError as e:
            _fail(str(e))
        if mode is not None:
            config.splitter.mode = mode
        save_config(config, config_path)

    table = Table(title="拆分设置")
    table.add_column("preset", style="cyan")
    table.add_column("min_chapter_length", justify="right")
    table.add_column("fallback_min_length", justify="right")
    table.add_column("min_sentence_count", justify="right")
    for name, values in config.splitter.presets.items():
        marker = " ✔" if name == config.splitter.preset else ""
        table.add_row(
            f"{name}{marker}",
            str(values["min_chapter_length"]),
            str(values["fallback_min_length"]),
            str(values["min_sentence_count"])
        )
    console.print(table)
    console.print(f"mode: [green]{config.splitter.mode}[/green]")


if __name__ == "__main__":
    app()
