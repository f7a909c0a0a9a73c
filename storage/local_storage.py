"""Local filesystem storage implementation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, BinaryIO

from werkzeug.utils import secure_filename

from config import Config

from .abstract_storage import AbstractStorage


class LocalStorage(AbstractStorage):
    """Persist files to the local filesystem under the configured upload directory."""

    def __init__(self, upload_dir: str | None = None):
        self.base_directory = Path(upload_dir or Config.UPLOAD_DIR).resolve()
        os.makedirs(self.base_directory, exist_ok=True)

    def _destination(self, filename: str, folder: str) -> Path:
        safe_name = secure_filename(filename)
        if not safe_name:
            raise ValueError("Filename must contain at least one valid character.")

        directory = self.base_directory
        if folder:
            directory = directory / secure_filename(folder)
            os.makedirs(directory, exist_ok=True)
        return directory / safe_name

    def save(self, file_obj: IO[bytes], filename: str, folder: str = "") -> str:
        """Save a file and return the relative path within the upload directory."""

        destination = self._destination(filename, folder)
        if hasattr(file_obj, "save"):
            file_obj.save(destination)  # type: ignore[arg-type]
        else:
            with open(destination, "wb") as output:
                output.write(file_obj.read())

        return destination.relative_to(self.base_directory).as_posix()

    def write_text(self, content: str, filename: str, folder: str = "") -> str:
        """Write a text file and return its relative path."""

        destination = self._destination(filename, folder)
        destination.write_text(content, encoding="utf-8")
        return destination.relative_to(self.base_directory).as_posix()

    def resolve(self, path: str) -> Path:
        """Return the absolute path for ``path``, refusing escapes from the base directory."""

        candidate = (self.base_directory / path).resolve()
        if candidate != self.base_directory and self.base_directory not in candidate.parents:
            raise ValueError("Path escapes the upload directory.")
        return candidate

    def exists(self, path: str) -> bool:
        """Return True if the given relative path exists within the upload directory."""

        try:
            return self.resolve(path).is_file()
        except ValueError:
            return False

    def open(self, path: str, mode: str = "rb") -> BinaryIO:
        """Open a stored file using the provided mode."""

        return open(self.resolve(path), mode)

    def delete(self, path: str) -> bool:
        """Remove a stored file if present."""

        try:
            target = self.resolve(path)
        except ValueError:
            return False
        if not target.is_file():
            return False
        target.unlink()
        return True
