#!/usr/bin/env python3
"""Failure attachments — text snapshots and simulator screenshots.

Attachments pile up in memory during a test and are written out together when
the session finishes, one file per attachment.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image

THUMBNAIL_SIZE = (600, 1300)


@dataclass
class Attachment:
    name: str
    body: str = ""
    image_path: Optional[Path] = None
    keep_always: bool = True


def _safe_name(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "-", name).strip("-") or "attachment"


def make_thumbnail(source: Path, dest: Path, size: tuple = THUMBNAIL_SIZE) -> Path:
    """Shrink a full-resolution simulator screenshot to something reviewable."""
    img = Image.open(source)
    img.thumbnail(size, Image.LANCZOS)
    dest.parent.mkdir(parents=True, exist_ok=True)
    img.save(str(dest), "PNG")
    return dest


class DiagnosticsRecorder:
    """Collects attachments for one test session."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.attachments: list[Attachment] = []

    def debug(self, msg: str):
        if self.verbose:
            print(f"  [debug] {msg}")

    def add(self, attachment: Attachment) -> Attachment:
        self.attachments.append(attachment)
        self.debug(f"attached '{attachment.name}'")
        return attachment

    def attach_text(self, name: str, body: str, keep_always: bool = True) -> Attachment:
        return self.add(Attachment(name=name, body=body, keep_always=keep_always))

    def attach_screenshot(self, name: str, screenshot: Path) -> Attachment:
        return self.add(Attachment(name=name, image_path=Path(screenshot)))

    def named(self, name: str) -> list[Attachment]:
        return [a for a in self.attachments if a.name == name]

    def write(self, directory: str, failed: bool = True) -> list[Path]:
        """Write attachments to `directory`; non-keep_always ones only on failure."""
        out = Path(directory)
        written = []
        for i, attachment in enumerate(self.attachments, start=1):
            if not attachment.keep_always and not failed:
                continue
            out.mkdir(parents=True, exist_ok=True)
            stem = f"{i:02d}-{_safe_name(attachment.name)}"
            if attachment.image_path is not None:
                try:
                    written.append(make_thumbnail(attachment.image_path, out / f"{stem}.png"))
                except OSError as e:
                    # unreadable or missing image; the text attachments still get written
                    print(f"  ⚠️  Could not write '{attachment.name}': {e}")
            else:
                path = out / f"{stem}.txt"
                path.write_text(attachment.body + "\n")
                written.append(path)
        return written
