"""Readers for graph descriptions."""

from .base import Parser
from .program import Program, ProgramParser

__all__ = ["Parser", "Program", "ProgramParser"]
