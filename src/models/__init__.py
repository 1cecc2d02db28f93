"""
Models package for runmd

Contains data structures and type definitions for the render pipeline.
"""

from .state import ProgramState, pipeline
from .directives import BlockDirective, flag_isTrue
from .render import AssemblerPhase, RenderPassState

__all__ = [
    "ProgramState",
    "pipeline",
    "BlockDirective",
    "flag_isTrue",
    "AssemblerPhase",
    "RenderPassState",
]
