"""Unit tests for the rendition builder."""

import pytest

from src.application.services.rendition_builder import RenditionBuilder
from src.domain.exceptions import TranscodeError
from src.domain.value_objects.rendition_ladder import DEFAULT_LADDER


class TestRenditionBuilder:
    """Tests for RenditionBuilder."""

    async def test_build_invokes_transcoder_once(self, transcoder, job):
        result = await RenditionBuilder(transcoder).build(job, timeout=300)

        assert result.success is True
        assert len(transcoder.calls) == 1
        call = transcoder.calls[0]
        assert call["source_path"] == job.local_source_path
        assert call["output_dir"] == job.local_output_dir
        assert call["ladder"] == DEFAULT_LADDER
        assert call["timeout"] == 300

    async def test_non_zero_exit_raises_with_diagnostics(self, make_transcoder, job):
        transcoder = make_transcoder(return_code=1, diagnostics="moov atom not found")

        with pytest.raises(TranscodeError) as exc_info:
            await RenditionBuilder(transcoder).build(job)

        assert exc_info.value.return_code == 1
        assert exc_info.value.diagnostics == "moov atom not found"
        assert "exited with code 1" in exc_info.value.reason

    async def test_diagnostics_keep_only_the_tail(self, make_transcoder, job):
        output = "\n".join(f"frame {i}" for i in range(100)) + "\nConversion failed!"
        transcoder = make_transcoder(return_code=1, diagnostics=output)

        with pytest.raises(TranscodeError) as exc_info:
            await RenditionBuilder(transcoder).build(job)

        lines = exc_info.value.diagnostics.splitlines()
        assert len(lines) == 20
        assert lines[-1] == "Conversion failed!"
        assert lines[0] == "frame 81"

    async def test_timeout_raises(self, make_transcoder, job):
        transcoder = make_transcoder(timed_out=True)

        with pytest.raises(TranscodeError, match="timed out"):
            await RenditionBuilder(transcoder).build(job, timeout=5)
