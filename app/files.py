"""Helpers for document attachments (passport scans, contracts)."""

from __future__ import annotations

import base64
from typing import Dict, Optional


def encode_upload(uploaded) -> Optional[Dict]:
    """Convert a Streamlit ``UploadedFile`` into the API's file object."""
    if uploaded is None:
        return None
    raw = uploaded.getvalue()
    return {
        "name": uploaded.name,
        "type": getattr(uploaded, "type", "") or "",
        "size": getattr(uploaded, "size", None) or len(raw),
        "data": base64.b64encode(raw).decode("ascii"),
    }


def format_file_size(size) -> Optional[str]:
    if isinstance(size, bool) or not isinstance(size, (int, float)) or size != size:
        return None
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    if size >= 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size:g} B"


def decode_file(file: Optional[Dict]) -> Optional[bytes]:
    if not file or not file.get("data"):
        return None
    return base64.b64decode(file["data"])
