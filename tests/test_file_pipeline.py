import os

import pytest

from conftest import RecordingCompressor, RecordingImporter
from services.download_clients.path_translator import PathTranslator
from services.file_pipeline import (
    ContentUnavailable,
    FileMoveError,
    FileOperations,
    FilePipeline,
    NoEligibleFiles,
)


def _write(path, content: bytes = b"audio") -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as handle:
        handle.write(content)
    return str(path)


@pytest.fixture
def pipeline_parts(incoming_dir, intake_dir):
    compressor = RecordingCompressor()
    importer = RecordingImporter()
    pipeline = FilePipeline(
        intake_dir=intake_dir,
        compressor=compressor,
        importer=importer,
        path_translator=PathTranslator("/downloads", incoming_dir),
    )
    return pipeline, compressor, importer


def test_directory_is_walked_recursively_in_sorted_order(pipeline_parts, incoming_dir, intake_dir) -> None:
    pipeline, compressor, importer = pipeline_parts
    album = os.path.join(incoming_dir, "AlbumA")
    _write(os.path.join(album, "02 - Second.FLAC"))
    _write(os.path.join(album, "01 - First.mp3"))
    _write(os.path.join(album, "cover.jpg"))
    _write(os.path.join(album, "CD2", "01 - Bonus.wav"))

    result = pipeline.process("/downloads/AlbumA")

    assert result.imported_count == 3
    assert [f.stored_name for f in result.files] == ["01 - First.mp3", "02 - Second.FLAC", "01 - Bonus.wav"]
    assert compressor.calls == importer.calls == ["01 - First.mp3", "02 - Second.FLAC", "01 - Bonus.wav"]
    assert sorted(os.listdir(intake_dir)) == ["01 - Bonus.wav", "01 - First.mp3", "02 - Second.FLAC"]
    assert os.path.exists(os.path.join(album, "cover.jpg"))


def test_single_file_content_path(pipeline_parts, incoming_dir, intake_dir) -> None:
    pipeline, _, importer = pipeline_parts
    _write(os.path.join(incoming_dir, "single.mp3"))

    result = pipeline.process("/downloads/single.mp3")

    assert [f.final_name for f in result.files] == ["single.mp3"]
    assert importer.calls == ["single.mp3"]


def test_name_collisions_get_numeric_suffixes(pipeline_parts, incoming_dir, intake_dir) -> None:
    pipeline, _, importer = pipeline_parts
    _write(os.path.join(intake_dir, "track.mp3"), b"existing")
    _write(os.path.join(intake_dir, "track_1.mp3"), b"existing")
    _write(os.path.join(incoming_dir, "Album", "a", "track.mp3"))
    _write(os.path.join(incoming_dir, "Album", "b", "track.mp3"))

    pipeline.process("/downloads/Album")

    assert importer.calls == ["track_2.mp3", "track_3.mp3"]
    with open(os.path.join(intake_dir, "track.mp3"), "rb") as handle:
        assert handle.read() == b"existing"


def test_compressor_output_name_is_imported(incoming_dir, intake_dir) -> None:
    compressor = RecordingCompressor(rename={"song.wav": "song.mp3"})
    importer = RecordingImporter()
    pipeline = FilePipeline(intake_dir, compressor, importer, PathTranslator("/downloads", incoming_dir))
    _write(os.path.join(incoming_dir, "song.wav"))

    result = pipeline.process("/downloads/song.wav")

    assert importer.calls == ["song.mp3"]
    assert result.files[0].stored_name == "song.wav"
    assert result.files[0].final_name == "song.mp3"


@pytest.mark.parametrize("content_path", ["", "   "])
def test_blank_content_path_is_unavailable(pipeline_parts, content_path) -> None:
    pipeline, _, _ = pipeline_parts
    with pytest.raises(ContentUnavailable, match="content path was unavailable"):
        pipeline.process(content_path)


def test_missing_or_empty_content_has_no_eligible_files(pipeline_parts, incoming_dir) -> None:
    pipeline, _, importer = pipeline_parts
    _write(os.path.join(incoming_dir, "Docs", "readme.txt"))

    with pytest.raises(NoEligibleFiles, match="No supported audio files"):
        pipeline.process("/downloads/Docs")
    with pytest.raises(NoEligibleFiles):
        pipeline.process("/downloads/does-not-exist")
    assert importer.calls == []


def test_failure_aborts_remaining_files(incoming_dir, intake_dir) -> None:
    compressor = RecordingCompressor()
    importer = RecordingImporter(fail_on="b.mp3")
    pipeline = FilePipeline(intake_dir, compressor, importer, PathTranslator("/downloads", incoming_dir))
    for name in ("a.mp3", "b.mp3", "c.mp3"):
        _write(os.path.join(incoming_dir, "Album", name))

    with pytest.raises(RuntimeError, match="catalog rejected b.mp3"):
        pipeline.process("/downloads/Album")

    assert importer.calls == ["a.mp3"]
    assert compressor.calls == ["a.mp3", "b.mp3"]
    assert os.path.exists(os.path.join(incoming_dir, "Album", "c.mp3"))


def test_move_unique_rejects_missing_source(tmp_path) -> None:
    with pytest.raises(FileMoveError):
        FileOperations().move_unique(str(tmp_path / "gone.mp3"), str(tmp_path / "intake"))


def test_move_unique_creates_destination(tmp_path) -> None:
    source = _write(os.path.join(tmp_path, "src", "x.flac"))
    stored, destination = FileOperations().move_unique(source, str(tmp_path / "new" / "intake"))

    assert stored == "x.flac"
    assert os.path.isfile(destination)
    assert not os.path.exists(source)
