"""Integration tests for the local filesystem media store."""

from ordering.channel.local_media import LocalMediaStore
from ordering.channel.media_port import MediaFile


class TestLocalMediaStore:
    def test_save_writes_files_and_returns_relative_refs(self, tmp_path):
        store = LocalMediaStore(tmp_path)

        refs = store.save([MediaFile("Photo.PNG", b"one"), MediaFile("clip.mp4", b"two")])

        assert len(refs) == 2
        assert all(ref.startswith("uploads/returns/return_") for ref in refs)
        assert refs[0].endswith(".png")
        assert (tmp_path / refs[1]).read_bytes() == b"two"

    def test_refs_are_unique(self, tmp_path):
        store = LocalMediaStore(tmp_path)

        refs = store.save([MediaFile("a.jpg", b"1"), MediaFile("a.jpg", b"2")])

        assert len(set(refs)) == 2

    def test_discard_removes_files(self, tmp_path):
        store = LocalMediaStore(tmp_path)
        refs = store.save([MediaFile("a.jpg", b"1")])

        store.discard(refs)

        assert not (tmp_path / refs[0]).exists()

    def test_discard_ignores_missing_and_outside_refs(self, tmp_path):
        outside = tmp_path.parent / "keep.txt"
        outside.write_text("keep")
        store = LocalMediaStore(tmp_path)

        store.discard(["uploads/returns/nope.jpg", "../keep.txt"])

        assert outside.exists()
