from rapflow.library.beats import list_beats, read_duration


def test_lists_audio_files_sorted(tmp_path):
    for name in ["b-side.MP3", "Anthem.wav", "notes.txt", "cover.jpg"]:
        (tmp_path / name).write_bytes(b"not really audio")
    (tmp_path / "stems.mp3").mkdir()

    beats = list_beats(tmp_path)

    assert [b.name for b in beats] == ["Anthem.wav", "b-side.MP3"]


def test_unreadable_audio_has_unknown_duration(tmp_path):
    path = tmp_path / "broken.mp3"
    path.write_bytes(b"\x00" * 64)
    assert read_duration(path) is None
    assert list_beats(tmp_path)[0].duration_s is None


def test_missing_directory(tmp_path):
    assert list_beats(tmp_path / "nope") == []
    assert list_beats(None) == []
