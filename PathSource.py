import os
import inspect
from pathlib import Path

OUT = "OUT"
DOT_FILE_EXTENSION = ".dot"


def get_out_directory_path() -> str:
    return os.path.join(relative_path(), OUT)


def get_call_tree_dot_path(graph_name: str) -> str:
    return os.path.join(get_out_directory_path(), graph_name + DOT_FILE_EXTENSION)


def relative_path() -> str:
    return str(Path(os.path.abspath(inspect.getfile(relative_path))).parent.absolute())
