"""Utility functions for WD Bridge (wdbridge)."""

import os
from typing import NamedTuple


class LocalEntry(NamedTuple):
    name: str
    is_dir: bool


def truncate_path(path, max_length=40):
    """Truncate a file path with ellipses if it's too long."""
    if len(path) <= max_length:
        return path

    filename = os.path.basename(path)
    if len(filename) >= max_length - 3:
        return f"...{filename[-(max_length - 3):]}"

    remaining_space = max_length - len(filename) - 4  # "..." and "/"
    dir_part = os.path.dirname(path)[:remaining_space]
    return f"...{dir_part}/{filename}"


def format_path(input_path, working_dir):
    """Unescape spaces and resolve a path against the local working directory."""
    input_path = input_path.replace("\\ ", " ")
    if os.path.isabs(input_path):
        return input_path
    return os.path.normpath(os.path.join(working_dir, input_path))


def validate_path_exists(path):
    """Check if a path exists and return its type."""
    if not os.path.exists(path):
        return None
    elif os.path.isfile(path):
        return "file"
    elif os.path.isdir(path):
        return "directory"
    else:
        return "other"


def list_local_entries(path):
    """List a local folder, sorted case-insensitively ignoring the first dot."""
    names = sorted(os.listdir(path), key=lambda name: name.lower().replace(".", "", 1))
    return [LocalEntry(name, os.path.isdir(os.path.join(path, name))) for name in names]
