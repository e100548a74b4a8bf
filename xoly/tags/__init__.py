"""
Built-in tag handlers.
"""

from __future__ import annotations

from typing import List

from ..base import TagHandler
from .conditional import ElseHandler, ElseIfHandler, IfHandler
from .control import AbortHandler
from .include import IncludeHandler
from .loop import BreakHandler, LoopHandler
from .output import DumpHandler, OutputHandler
from .switch import CaseHandler, DefaultCaseHandler, SwitchHandler
from .variables import ParamHandler, SaveContentHandler, SetHandler


def builtin_handlers() -> List[TagHandler]:
    """Returns fresh instances of all built-in handlers."""
    return [
        OutputHandler(),
        IfHandler(),
        ElseIfHandler(),
        ElseHandler(),
        LoopHandler(),
        BreakHandler(),
        SwitchHandler(),
        CaseHandler(),
        DefaultCaseHandler(),
        ParamHandler(),
        SetHandler(),
        SaveContentHandler(),
        IncludeHandler(),
        AbortHandler(),
        DumpHandler(),
    ]


__all__ = [
    "builtin_handlers",
    "OutputHandler",
    "IfHandler",
    "ElseIfHandler",
    "ElseHandler",
    "LoopHandler",
    "BreakHandler",
    "SwitchHandler",
    "CaseHandler",
    "DefaultCaseHandler",
    "ParamHandler",
    "SetHandler",
    "SaveContentHandler",
    "IncludeHandler",
    "AbortHandler",
    "DumpHandler",
]
