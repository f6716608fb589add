"""Document source implementations."""
from .text_loader import TextLoader
from .filesystem_source import FileSystemSource

__all__ = ["TextLoader", "FileSystemSource"]
