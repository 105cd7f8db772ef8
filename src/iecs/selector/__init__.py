"""Interactive selection of ECS resources."""

from iecs.selector.form import run_exec_form, run_logs_form
from iecs.selector.picker import Option, Picker
from iecs.selector.stages import Selectors, select_exec_target, select_log_targets
from iecs.selector.themes import theme_by_name, theme_names

__all__ = [
    "Option",
    "Picker",
    "Selectors",
    "run_exec_form",
    "run_logs_form",
    "select_exec_target",
    "select_log_targets",
    "theme_by_name",
    "theme_names",
]
