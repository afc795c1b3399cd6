"""Workflow runner helpers shared by the cache routines."""

from .core import (
    InputError,
    clear_state,
    exit_code,
    get_input,
    get_multiline_input,
    get_state,
    input_env_name,
    is_debug,
    reset,
    save_state,
    set_failed,
    set_output,
)
from .globber import iter_directories

__all__ = [
    "InputError",
    "clear_state",
    "exit_code",
    "get_input",
    "get_multiline_input",
    "get_state",
    "input_env_name",
    "is_debug",
    "iter_directories",
    "reset",
    "save_state",
    "set_failed",
    "set_output",
]
