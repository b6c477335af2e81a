"""
Diagnostic context for one generation run.

A GenContext is passed explicitly to every resolver, synthesizer and
generator call. It carries the logger to write to and collects the
warnings and errors raised for the unit being generated, so that the
engine can report them per unit without any module-level state.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .gen_logging import get_logger


@dataclass(frozen=True)
class Diagnostic:
    level: str
    message: str
    generator: Optional[str] = None
    unit: Optional[str] = None

    def __str__(self) -> str:
        where = "/".join(p for p in (self.generator, self.unit) if p)
        return f"{self.level.upper()} {where}: {self.message}" if where else f"{self.level.upper()}: {self.message}"


@dataclass
class GenContext:
    logger: logging.Logger
    generator: Optional[str] = None
    unit: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @classmethod
    def root(cls) -> "GenContext":
        return cls(logger=get_logger())

    def child(self, generator: Optional[str] = None, unit: Optional[str] = None) -> "GenContext":
        """Scope a fresh context to one (generator, unit) call."""
        name = generator or self.generator
        return GenContext(
            logger=get_logger(name) if name else self.logger,
            generator=name,
            unit=unit or self.unit,
        )

    def _format(self, message: str, tag: str = "") -> str:
        where = f"[{self.unit}] " if self.unit else ""
        return f"  {tag}{where}{message}"

    def debug(self, message: str, *args) -> None:
        self.logger.debug(self._format(message), *args)

    def info(self, message: str, *args) -> None:
        self.logger.info(self._format(message), *args)

    def warning(self, message: str, *args) -> None:
        text = message % args if args else message
        self.diagnostics.append(Diagnostic("warning", text, self.generator, self.unit))
        self.logger.warning(self._format(text, "[WARN] "))

    def error(self, message: str, *args) -> None:
        text = message % args if args else message
        self.diagnostics.append(Diagnostic("error", text, self.generator, self.unit))
        self.logger.error(self._format(text, "[FAIL] "))
