"""
Host boundary: where documents come from and where renderings go.

The engine only talks to a DocumentStore and a Surface. FileSystemStore and
MemorySurface are the implementations used by the command line and tests.
"""
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

from components.errors import HostError
from components.runtime import render_to_string
from components.snippets import parse_front_matter

MARKDOWN_EXTENSION = ".md"


def is_markdown(doc_id):
    return PurePosixPath(doc_id).suffix == MARKDOWN_EXTENSION


def basename(doc_id):
    return PurePosixPath(doc_id).stem


class DocumentStore(ABC):
    """Read access to documents addressed by '/'-separated ids."""

    @abstractmethod
    def read(self, doc_id):
        pass

    @abstractmethod
    def properties(self, doc_id):
        """Key-value properties of a document (its front matter)."""
        pass

    @abstractmethod
    def list_documents(self, folder=""):
        """Ids of every markdown document under `folder`, recursively."""
        pass

    @abstractmethod
    def is_folder(self, path):
        pass

    @abstractmethod
    def exists(self, path):
        pass


class FileSystemStore(DocumentStore):
    """Markdown files under a root directory."""

    def __init__(self, root="."):
        self.root = Path(root)

    def _path(self, doc_id):
        return self.root / PurePosixPath(doc_id)

    def read(self, doc_id):
        path = self._path(doc_id)
        if not path.is_file():
            raise HostError(f"Document not found: {doc_id}")
        return path.read_text(encoding="utf-8")

    def properties(self, doc_id):
        return parse_front_matter(self.read(doc_id))

    def list_documents(self, folder=""):
        path = self._path(folder) if folder else self.root
        if not path.exists():
            raise HostError(f"Folder not found: {folder}")
        if not path.is_dir():
            raise HostError(f"{folder} is a file, not a folder")
        documents = [
            file.relative_to(self.root).as_posix()
            for file in path.rglob(f"*{MARKDOWN_EXTENSION}")
            if file.is_file()
        ]
        return sorted(documents, key=lambda doc_id: (basename(doc_id), doc_id))

    def is_folder(self, path):
        return self._path(path).is_dir()

    def exists(self, path):
        return self._path(path).exists()


class Surface(ABC):
    """Where renderings are displayed. Handles are opaque and hashable."""

    @abstractmethod
    def render(self, handle, value):
        pass

    @abstractmethod
    def unmount(self, handle):
        """Remove whatever is rendered at `handle`. No-op when nothing is."""
        pass

    @abstractmethod
    def is_attached(self, handle):
        """Whether `handle` is still part of the visible surface."""
        pass


class MemorySurface(Surface):
    """Keeps renderings in a dict; handles become detached through detach()."""

    def __init__(self):
        self.attached = set()
        self.rendered = {}
        self.render_counts = {}

    def open(self, handle):
        """Make `handle` part of the surface and return it."""
        self.attached.add(handle)
        return handle

    def detach(self, handle):
        self.attached.discard(handle)

    def render(self, handle, value):
        self.rendered[handle] = value
        self.render_counts[handle] = self.render_counts.get(handle, 0) + 1

    def unmount(self, handle):
        self.rendered.pop(handle, None)

    def is_attached(self, handle):
        return handle in self.attached

    def html(self, handle):
        return render_to_string(self.rendered.get(handle))
