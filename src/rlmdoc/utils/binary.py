"""Binary file detection and text decoding."""

from pathlib import Path

# Extensions that never hold loadable text
BINARY_EXTENSIONS = {
    # Images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp", ".tiff",
    # Office formats (.pdf and .docx are converted by their own loaders before this check)
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".ods",
    # Archives (.zip is handled by ZipLoader before this check)
    ".tar", ".gz", ".rar", ".7z", ".bz2", ".xz",
    # Executables
    ".exe", ".dll", ".so", ".dylib", ".bin",
    # Media
    ".mp3", ".mp4", ".avi", ".mov", ".wav", ".flac", ".mkv", ".webm",
    # Compiled
    ".pyc", ".pyo", ".class", ".o", ".obj", ".wasm",
    # Fonts
    ".ttf", ".otf", ".woff", ".woff2", ".eot",
    # Other
    ".db", ".sqlite", ".sqlite3",
}

UTF8_BOM = b"\xef\xbb\xbf"


def is_binary_extension(path: str | Path) -> bool:
    """Check if file extension indicates binary content."""
    return Path(path).suffix.lower() in BINARY_EXTENSIONS


def is_binary_content(content: bytes, sample_size: int = 8192) -> bool:
    """Detect if content is binary by checking for null bytes and control characters.

    Bytes >= 0x80 count as text so UTF-8 documents in any language pass.

    Args:
        content: Raw file content
        sample_size: Number of bytes to sample from the start

    Returns:
        True if content appears to be binary
    """
    if not content:
        return False

    sample = content[:sample_size]

    if b"\x00" in sample:
        return True

    # Control characters other than tab, LF, FF, CR
    control = sum(1 for byte in sample if byte < 32 and byte not in (9, 10, 12, 13))
    return (control / len(sample)) > 0.10


def detect_binary(path: str | Path, content: bytes) -> bool:
    """Detect if a file is binary using both extension and content analysis."""
    if is_binary_extension(path):
        return True
    return is_binary_content(content)


def decode_text(content: bytes) -> str:
    """Decode UTF-8 (with or without BOM), normalizing line endings to ``\\n``.

    Undecodable bytes become U+FFFD; the validators report them.
    """
    if content.startswith(UTF8_BOM):
        content = content[len(UTF8_BOM):]
    text = content.decode("utf-8", errors="replace")
    return text.replace("\r\n", "\n").replace("\r", "\n")
