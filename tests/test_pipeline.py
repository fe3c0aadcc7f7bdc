"""End-to-end tests for search mode, with fake atuin and fzf executables."""

from __future__ import annotations

import asyncio

import pytest

from atuin_fzf.errors import LaunchError, MalformedRecordError, SelectorError, WaitError
from atuin_fzf.records import DELIMITER
from atuin_fzf.services.adapter import StreamAdapter
from atuin_fzf.services.pipeline import Pipeline, PipelineState

RAW_LINES = [
    "git pull:::0:::/src:::1s:::3m ago",
    "make test:::2:::/src:::40s:::2m ago",
    "ls:::0:::/tmp:::2ms:::1m ago",
]


def backend_body(lines: list[str], exit_code: int = 0) -> str:
    return f"sys.stdout.write({''.join(line + chr(10) for line in lines)!r})\nsys.exit({exit_code})\n"


def selector_body(out_path, exit_code: int = 0, read_lines: int | None = None) -> str:
    if read_lines is None:
        read = "data = sys.stdin.buffer.read()"
    else:
        read = f"data = b''.join(sys.stdin.buffer.readline() for _ in range({read_lines}))"
    return f"{read}\nopen({str(out_path)!r}, 'wb').write(data)\nsys.exit({exit_code})\n"


@pytest.fixture
def pipeline_factory(app_config, make_script, tmp_path):
    def _make(backend: str, selector: str, query: str = "") -> Pipeline:
        app_config.backend.executable = make_script("atuin", backend)
        app_config.selector.executable = make_script("fzf", selector)
        return Pipeline(app_config, query, adapter=StreamAdapter(current_dir="/src"), preview="true")

    return _make


class TestPipeline:
    @pytest.mark.asyncio
    async def test_rows_reach_selector_in_order(self, pipeline_factory, tmp_path):
        out = tmp_path / "fzf-stdin"
        pipeline = pipeline_factory(backend_body(RAW_LINES), selector_body(out))

        outcome = await asyncio.wait_for(pipeline.run(), timeout=30)

        assert outcome.exit_code == 0
        assert not outcome.aborted
        assert pipeline.state is PipelineState.DONE
        rows = out.read_text().splitlines()
        assert len(rows) == 3
        assert [row.split(DELIMITER)[:5] for row in rows] == [line.split(DELIMITER) for line in RAW_LINES]
        assert rows[0].split(DELIMITER)[5].strip() == ""
        assert "exit 2" in rows[1].split(DELIMITER)[5]
        assert "current dir" in rows[0].split(DELIMITER)[6]
        assert rows[2].split(DELIMITER)[6] == ""

    @pytest.mark.asyncio
    async def test_no_history(self, pipeline_factory, tmp_path):
        out = tmp_path / "fzf-stdin"
        pipeline = pipeline_factory(backend_body([]), selector_body(out, exit_code=1))

        outcome = await asyncio.wait_for(pipeline.run(), timeout=30)

        assert outcome.aborted
        assert out.read_bytes() == b""

    @pytest.mark.asyncio
    async def test_selector_exits_early(self, pipeline_factory, tmp_path):
        out = tmp_path / "fzf-stdin"
        lines = [f"echo {i}:::0:::/src:::1ms:::{i}s ago" for i in range(20000)]
        pipeline = pipeline_factory(backend_body(lines), selector_body(out, read_lines=1))

        outcome = await asyncio.wait_for(pipeline.run(), timeout=60)

        assert outcome.exit_code == 0
        assert pipeline.state is PipelineState.DONE
        assert out.read_text().startswith("echo 0:::")

    @pytest.mark.asyncio
    async def test_user_abort(self, pipeline_factory, tmp_path):
        pipeline = pipeline_factory(backend_body(RAW_LINES), selector_body(tmp_path / "out", exit_code=130))

        outcome = await asyncio.wait_for(pipeline.run(), timeout=30)

        assert outcome.aborted
        assert outcome.exit_code == 130
        assert pipeline.state is PipelineState.DONE

    @pytest.mark.asyncio
    async def test_backend_missing(self, app_config, tmp_path):
        app_config.backend.executable = str(tmp_path / "missing-atuin")
        pipeline = Pipeline(app_config)

        with pytest.raises(LaunchError):
            await pipeline.run()
        assert pipeline.state is PipelineState.FAILED
        assert isinstance(pipeline.error, LaunchError)

    @pytest.mark.asyncio
    async def test_selector_missing(self, app_config, make_script, tmp_path):
        app_config.backend.executable = make_script("atuin", backend_body(RAW_LINES))
        app_config.selector.executable = str(tmp_path / "missing-fzf")
        pipeline = Pipeline(app_config, preview="true")

        with pytest.raises(LaunchError):
            await asyncio.wait_for(pipeline.run(), timeout=30)
        assert pipeline.state is PipelineState.FAILED

    @pytest.mark.asyncio
    async def test_selector_error(self, pipeline_factory, tmp_path):
        pipeline = pipeline_factory(backend_body(RAW_LINES), selector_body(tmp_path / "out", exit_code=2))

        with pytest.raises(SelectorError):
            await asyncio.wait_for(pipeline.run(), timeout=30)
        assert pipeline.state is PipelineState.FAILED

    @pytest.mark.asyncio
    async def test_backend_fails(self, pipeline_factory, tmp_path):
        pipeline = pipeline_factory(backend_body(RAW_LINES, exit_code=1), selector_body(tmp_path / "out"))

        with pytest.raises(WaitError) as exc_info:
            await asyncio.wait_for(pipeline.run(), timeout=30)
        assert exc_info.value.returncode == 1
        assert pipeline.state is PipelineState.FAILED

    @pytest.mark.asyncio
    async def test_malformed_backend_line(self, pipeline_factory, tmp_path):
        out = tmp_path / "fzf-stdin"
        pipeline = pipeline_factory(backend_body([RAW_LINES[0], "broken:::line"]), selector_body(out))

        with pytest.raises(MalformedRecordError):
            await asyncio.wait_for(pipeline.run(), timeout=30)
        assert pipeline.state is PipelineState.FAILED
        assert len(out.read_text().splitlines()) == 1

    def test_search_args(self, app_config):
        app_config.backend.search_limit = 250
        args = Pipeline(app_config).search_args()
        assert args == [
            "search", "--limit", "250",
            "--format", "{command}:::{exit}:::{directory}:::{duration}:::{time}",
        ]  # fmt: skip
