"""codeprobe: answer questions about a project with read-only inspection tools."""

__version__ = "0.1.0"
