"""
PESL Interpreter Settings

Runtime configuration, read from the environment by the command line.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional


PROMPT = ">>> "
SOURCE_SUFFIX = ".pesl"


@dataclass
class Settings:
    """
    Interpreter configuration.

    Attributes:
        log_level: Level name for the ``pesl`` loggers
        encoding: Text encoding used to read source files
        prompt: REPL prompt
        source_suffix: Required suffix of batch source files
    """

    log_level: str = "WARNING"
    encoding: str = "utf-8"
    prompt: str = PROMPT
    source_suffix: str = SOURCE_SUFFIX

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from environment variables.

        Recognized variables: PESL_LOG_LEVEL, PESL_DEBUG, PESL_ENCODING.
        """
        if environ is None:
            environ = os.environ

        log_level = environ.get("PESL_LOG_LEVEL", cls.log_level).upper()
        if environ.get("PESL_DEBUG", "").lower() in ("1", "true", "yes"):
            log_level = "DEBUG"

        return cls(
            log_level=log_level,
            encoding=environ.get("PESL_ENCODING", cls.encoding),
        )
