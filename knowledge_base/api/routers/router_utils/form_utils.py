"""
Multipart form helpers.

Form fields for list values arrive either as repeated fields, a JSON array
string, or a comma-separated string.
"""

import json

from fastapi import UploadFile

from knowledge_base.core.exceptions import ValidationError
from knowledge_base.models.ingestion import FileItem


def parse_list_field(values: list[str] | str | None) -> list[str]:
    """
    Normalize a form list field.

    Args:
        values: Repeated values, a JSON array string or a comma-separated string

    Returns:
        list[str]: Stripped, non-empty values in order
    """
    if values is None:
        return []
    raw = [values] if isinstance(values, str) else list(values)

    parsed: list[str] = []
    for value in raw:
        value = value.strip()
        if not value:
            continue
        if value.startswith("["):
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Malformed JSON list: {e.msg}") from e
            parsed.extend(str(v).strip() for v in decoded if str(v).strip())
        else:
            parsed.extend(part.strip() for part in value.split(",") if part.strip())
    return parsed


def parse_positional_field(values: list[str] | str | None) -> list[str]:
    """
    Normalize a per-file form field, keeping empty positions.

    A JSON array string is decoded; repeated fields are taken as is.
    """
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    if len(values) == 1 and values[0].strip().startswith("["):
        try:
            return [str(v) for v in json.loads(values[0])]
        except json.JSONDecodeError as e:
            raise ValidationError(f"Malformed JSON list: {e.msg}") from e
    return list(values)


async def read_upload_files(files: list[UploadFile] | None) -> list[FileItem]:
    """Read uploaded files into FileItems."""
    items = []
    for upload in files or []:
        if not upload.filename:
            continue
        items.append(
            FileItem(
                file_name=upload.filename,
                data=await upload.read(),
                mime_type=upload.content_type or "application/octet-stream",
            )
        )
    return items
