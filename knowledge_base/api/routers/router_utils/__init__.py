"""Router utilities: error mapping and form parsing."""

from .error_handling import handle_service_errors
from .form_utils import parse_list_field, parse_positional_field, read_upload_files

__all__ = [
    "handle_service_errors",
    "parse_list_field",
    "parse_positional_field",
    "read_upload_files",
]
