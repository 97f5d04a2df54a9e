# trial_core/assets.py
"""Resolve media asset paths into bucket URLs.

Assets live in a storage bucket laid out by language and device, for example
``{bucket}/en/desktop/pic.jpg`` or ``{bucket}/shared/click.mp3``. The helpers
here are pure: language and device are passed in by the caller.
"""
from __future__ import annotations
import mimetypes
import re
from pathlib import PurePosixPath
from typing import Dict, Iterable, Optional
from urllib.parse import parse_qs

_SEPARATOR_RX = re.compile(r"^([A-Z])|[\s\-_](\w)")

ASSET_KINDS = ("images", "audio", "video")
DEFAULT_LANGUAGE = "en"


# Media extensions registered on top of the interpreter's built-in table so
# the answer does not depend on the host's mime.types files.
_MEDIA_EXTENSIONS: Dict[str, tuple] = {
    "image/png": (".png",),
    "image/jpeg": (".jpg", ".jpeg"),
    "image/gif": (".gif",),
    "image/svg+xml": (".svg",),
    "image/webp": (".webp",),
    "image/bmp": (".bmp",),
    "image/x-icon": (".ico",),
    "image/tiff": (".tif", ".tiff"),
    "image/avif": (".avif",),
    "audio/mpeg": (".mp3",),
    "audio/wav": (".wav",),
    "audio/ogg": (".ogg", ".oga", ".opus"),
    "audio/mp4": (".m4a",),
    "audio/flac": (".flac",),
    "audio/aac": (".aac",),
    "audio/webm": (".weba",),
    "audio/midi": (".mid", ".midi"),
    "video/mp4": (".mp4", ".m4v"),
    "video/webm": (".webm",),
    "video/ogg": (".ogv",),
    "video/quicktime": (".mov",),
    "video/x-msvideo": (".avi",),
    "video/x-matroska": (".mkv",),
    "video/mpeg": (".mpeg", ".mpg"),
}


def _media_types() -> mimetypes.MimeTypes:
    table = mimetypes.MimeTypes(filenames=())
    for mime_type, extensions in _MEDIA_EXTENSIONS.items():
        for ext in extensions:
            table.add_type(mime_type, ext)
    return table


_MIME_TABLE = _media_types()


class AssetTypeError(ValueError):
    """Raised when a file is not an image, audio or video asset."""


def camelize(name: str) -> str:
    def _sub(m: re.Match) -> str:
        if m.group(2):
            return m.group(2).upper()
        return m.group(1).lower()

    return _SEPARATOR_RX.sub(_sub, name)


def camelize_files(paths: Iterable[str]) -> Dict[str, str]:
    return {camelize(PurePosixPath(p).stem): p for p in paths}


def get_formatted_url(
    bucket_uri: str,
    file_path: str,
    lng: str,
    device: str,
    type: str,
    nested: bool = False,
    is_default: bool = False,
) -> str:
    """Return the bucket URL of ``file_path`` for its asset category.

    ``type`` is one of ``device``, ``shared``, ``shared/device``,
    ``languageSpecific`` or ``default``; ``nested`` marks assets listed under
    a ``languageSpecific`` mapping, which sit below the language folder.
    ``is_default`` is accepted for call-site symmetry and does not change the
    layout.
    """

    if nested and type == "device":
        return f"{bucket_uri}/{lng}/{device}/{file_path}"
    if nested and type == "shared":
        return f"{bucket_uri}/{lng}/shared/{file_path}"
    if type == "device":
        return f"{bucket_uri}/{device}/{file_path}"
    if type == "shared/device":
        return f"{bucket_uri}/shared/{device}/{file_path}"
    if type == "languageSpecific":
        return f"{bucket_uri}/{lng}/{file_path}"
    if type == "default":
        return f"{bucket_uri}/{file_path}"
    return f"{bucket_uri}/shared/{file_path}"


def get_asset_type(asset: str) -> str:
    mime_type, _ = _MIME_TABLE.guess_type(asset, strict=False)
    if not mime_type:
        raise AssetTypeError(f"Unrecognized file extension in path: {asset}")
    if mime_type.startswith("image/"): return "images"
    if mime_type.startswith("audio/"): return "audio"
    if mime_type.startswith("video/"): return "video"
    raise AssetTypeError(
        f"Unsupported MIME type for file: {asset}. Only image, audio, and video files are supported."
    )


def get_language(set_language: Optional[str] = None, query_string: str = "") -> str:
    """Explicit language, else the ``lng`` query parameter, else English."""
    if set_language:
        return set_language
    values = parse_qs(query_string.lstrip("?")).get("lng")
    return values[0] if values else DEFAULT_LANGUAGE
