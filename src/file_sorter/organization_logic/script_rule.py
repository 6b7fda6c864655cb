"""
Load a user sorting script and expose it as a script rule.

A script is a Python file defining a function that takes a file path and
returns the name of the folder to move it to, or None to leave it alone::

    def sort_file(path):
        if path.endswith(".log"):
            return "Logs"
        return None
"""

import importlib.util
import logging
from pathlib import Path
from typing import Optional

from .rules import Rule, ScriptHook

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_FUNCTION = "sort_file"


def load_script_hook(
    script_path: Path, function_name: str = DEFAULT_SCRIPT_FUNCTION
) -> Optional[ScriptHook]:
    """Import a script file and return its sorting function.

    Args:
        script_path: Path to the Python script
        function_name: Name of the callable to use from the script

    Returns:
        The callable, or None if the script is missing or unusable
    """
    script_path = Path(script_path)
    if not script_path.is_file():
        logger.debug(f"No sorting script at {script_path}")
        return None

    module_name = f"file_sorter_script_{script_path.stem}"
    try:
        spec = importlib.util.spec_from_file_location(module_name, script_path)
        if spec is None or spec.loader is None:
            logger.error(f"Could not load sorting script {script_path}")
            return None

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
    except Exception as e:
        logger.error(f"Failed to load sorting script {script_path}: {e}")
        return None

    hook = getattr(module, function_name, None)
    if not callable(hook):
        logger.error(f"Sorting script {script_path} does not define {function_name}()")
        return None

    logger.info(f"Loaded sorting script {script_path} ({function_name})")
    return hook


def load_script_rule(
    script_path: Path, function_name: str = DEFAULT_SCRIPT_FUNCTION
) -> Optional[Rule]:
    """Build a script rule from a script file, or None if there is none."""
    hook = load_script_hook(script_path, function_name)
    if hook is None:
        return None
    return Rule.for_script(hook, name=Path(script_path).name)
