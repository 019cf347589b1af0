"""CLI 테스트 스크립트"""

import sys
import tempfile
import zipfile
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from typer.testing import CliRunner

from novel_splitter.cli import app
from novel_splitter.config.loader import load_config

runner = CliRunner()

CONFIG_FILE = str(Path(__file__).parent / "config" / "config.yml")
SAMPLE = "他走进院子，看了看天色。远处传来几声狗叫。"
NOVEL = "\n".join([
    "全集电子书免费下载",
    "第一章 开始", "\n".join([SAMPLE] * 50),
    "第二章 继续", "\n".join([SAMPLE] * 50),
])


def write_novel(directory: str, name: str = "novel.txt", text: str = NOVEL) -> str:
    path = Path(directory) / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_help():
    """도움말 테스트"""
    result = runner.invoke(app, ["--help"])
    print(result.stdout)
    assert result.exit_code == 0
    for command in ["split", "preview", "export", "batch", "configure"]:
        assert command in result.stdout


def test_preview():
    with tempfile.TemporaryDirectory() as tmp:
        result = runner.invoke(app, ["preview", write_novel(tmp), "--config", CONFIG_FILE])
        print(result.stdout)
        assert result.exit_code == 0
        assert "共识别到 2 个章节" in result.stdout


def test_split_to_directory():
    with tempfile.TemporaryDirectory() as tmp:
        novel = write_novel(tmp)
        out = Path(tmp) / "out"
        result = runner.invoke(app, ["split", novel, "--out", str(out), "--no-zip", "--config", CONFIG_FILE])
        print(result.stdout)

        assert result.exit_code == 0
        files = sorted(p.name for p in (out / "novel").iterdir())
        assert files == ["1-第一章_开始.md", "2-第二章_继续.md"]
        document = (out / "novel" / "1-第一章_开始.md").read_text(encoding="utf-8")
        assert document.startswith("# 第一章 开始\n\n字数：")
        assert "免费下载" not in document


def test_split_to_archive():
    with tempfile.TemporaryDirectory() as tmp:
        novel = write_novel(tmp)
        result = runner.invoke(app, ["split", novel, "--out", tmp, "--config", CONFIG_FILE])
        print(result.stdout)

        assert result.exit_code == 0
        archive = Path(tmp) / "novel" / "小说章节打包.zip"
        with zipfile.ZipFile(archive) as zf:
            assert zf.namelist() == ["1-第一章_开始.md", "2-第二章_继续.md"]


def test_split_without_chapters():
    with tempfile.TemporaryDirectory() as tmp:
        novel = write_novel(tmp, text="太短了。")
        result = runner.invoke(app, ["split", novel, "--out", tmp, "--config", CONFIG_FILE])
        assert result.exit_code == 1


def test_split_missing_file():
    result = runner.invoke(app, ["split", "/nonexistent/novel.txt", "--config", CONFIG_FILE])
    assert result.exit_code == 1


def test_split_unknown_mode():
    with tempfile.TemporaryDirectory() as tmp:
        result = runner.invoke(app, ["preview", write_novel(tmp), "--mode", "hybrid", "--config", CONFIG_FILE])
        assert result.exit_code == 1


def test_split_unknown_ai_provider():
    """알 수 없는 AI 제공자는 traceback 없이 종료 코드 1"""
    with tempfile.TemporaryDirectory() as tmp:
        novel = write_novel(tmp)
        config_path = Path(tmp) / "config.yml"
        config_path.write_text("ai:\n  provider: nobody\n", encoding="utf-8")

        result = runner.invoke(app, ["split", novel, "--out", tmp, "--ai-titles", "--config", str(config_path)])

        assert result.exit_code == 1
        assert "nobody" in result.stdout
        assert not isinstance(result.exception, ValueError)


def test_export_single_chapter():
    with tempfile.TemporaryDirectory() as tmp:
        novel = write_novel(tmp)
        out = Path(tmp) / "out"

        result = runner.invoke(app, ["export", novel, "2", "--out", str(out), "--config", CONFIG_FILE])
        assert result.exit_code == 0
        assert (out / "novel" / "2-第二章_继续.md").exists()

        result = runner.invoke(app, ["export", novel, "5", "--out", str(out), "--config", CONFIG_FILE])
        assert result.exit_code == 1


def test_batch():
    with tempfile.TemporaryDirectory() as tmp:
        first = write_novel(tmp, "a.txt")
        second = write_novel(tmp, "b.txt")
        out = Path(tmp) / "out"

        result = runner.invoke(app, ["batch", first, second, "--out", str(out), "--config", CONFIG_FILE])
        print(result.stdout)
        assert result.exit_code == 0
        assert (out / "a" / "小说章节打包.zip").exists()
        assert (out / "b" / "小说章节打包.zip").exists()

        result = runner.invoke(
            app, ["batch", first, str(Path(tmp) / "missing.txt"), "--out", str(out), "--config", CONFIG_FILE]
        )
        assert result.exit_code == 1


def test_configure():
    with tempfile.TemporaryDirectory() as tmp:
        config_path = str(Path(tmp) / "config.yml")

        result = runner.invoke(app, [
            "configure", "--preset", "loose", "--min-length", "600", "--mode", "global", "--config", config_path
        ])
        print(result.stdout)
        assert result.exit_code == 0

        config = load_config(config_path)
        assert config.splitter.preset == "loose"
        assert config.splitter.mode == "global"
        assert config.splitter.presets["loose"]["min_chapter_length"] == 600
        assert config.splitter.presets["strict"]["min_chapter_length"] == 800

        result = runner.invoke(app, ["configure", "--preset", "medium", "--config", config_path])
        assert result.exit_code == 1

        result = runner.invoke(app, ["configure", "--mode", "hybrid", "--config", config_path])
        assert result.exit_code == 1


if __name__ == "__main__":
    print("Testing CLI...")
    test_help()
    test_preview()
    test_split_to_directory()
    test_split_to_archive()
    test_split_without_chapters()
    test_split_missing_file()
    test_split_unknown_mode()
    test_split_unknown_ai_provider()
    test_export_single_chapter()
    test_batch()
    test_configure()
    print("\n✅ CLI tests passed!")
