"""Local filesystem media store for return-request attachments."""

import time
from pathlib import Path
from uuid import uuid4

import structlog

from ordering.channel.media_port import MediaFile, MediaStore

logger = structlog.get_logger(__name__)

RETURNS_DIR = Path("uploads") / "returns"


class LocalMediaStore(MediaStore):
    """Writes attachments under ``<root>/uploads/returns/``.

    References are POSIX paths relative to ``root``, e.g.
    ``uploads/returns/return_1718000000000_1a2b3c4d.jpg``.
    """

    def __init__(self, root):
        self.root = Path(root)

    def _ref_for(self, file: MediaFile) -> str:
        ext = Path(file.filename or "").suffix.lower()
        name = f"return_{int(time.time() * 1000)}_{uuid4().hex[:8]}{ext}"
        return (RETURNS_DIR / name).as_posix()

    def save(self, files: list[MediaFile]) -> list[str]:
        target_dir = self.root / RETURNS_DIR
        target_dir.mkdir(parents=True, exist_ok=True)

        refs = []
        try:
            for file in files:
                ref = self._ref_for(file)
                (self.root / ref).write_bytes(file.content)
                refs.append(ref)
        except OSError:
            self.discard(refs)
            raise

        logger.info("Return media saved", count=len(refs))
        return refs

    def discard(self, refs: list[str]) -> None:
        root = self.root.resolve()
        for ref in refs:
            path = (self.root / ref).resolve()
            if not path.is_relative_to(root):
                logger.warning("Refusing to discard media outside the media root", ref=ref)
                continue
            path.unlink(missing_ok=True)
        if refs:
            logger.info("Return media discarded", count=len(refs))
