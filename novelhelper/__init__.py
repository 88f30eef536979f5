"""NovelHelper content store: documents, branches, versions and sections."""

__version__ = "1.0.0"
