"""
Configuration read from the environment at the command line edge
"""

import logging
import os

from vamsa_gedcom.shared.models import GeneratorConfig


class Config:
    """Configuration class with optional environment variable overrides"""

    def __init__(self):
        defaults = GeneratorConfig()

        # Export header configuration
        self.source_program = self._optional_env('VAMSA_GEDCOM_SOURCE_PROGRAM', defaults.source_program)
        self.submitter_name = self._optional_env('VAMSA_GEDCOM_SUBMITTER_NAME', defaults.submitter_name)

        # Logging configuration
        self.log_level = self._optional_env('VAMSA_GEDCOM_LOG_LEVEL', 'INFO').upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise RuntimeError(f"Invalid VAMSA_GEDCOM_LOG_LEVEL: {self.log_level}")

    def _optional_env(self, var_name: str, default: str) -> str:
        """Environment variable value, or the default when unset or empty"""
        value = os.environ.get(var_name)
        if not value:
            return default
        return value.strip()

    def generator_config(self, source_program: str = None, submitter_name: str = None) -> GeneratorConfig:
        """Build a GeneratorConfig, explicit arguments winning over the environment"""
        return GeneratorConfig(
            source_program=source_program or self.source_program,
            submitter_name=submitter_name or self.submitter_name
        )
