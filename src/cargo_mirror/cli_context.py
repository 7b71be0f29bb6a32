"""
CLI Context for managing application dependencies.

Settings are read from the environment once per process and handed to every
command through this context instead of living in module globals.
"""
from __future__ import annotations

from dataclasses import dataclass

from .operations import Operations, OpsConfig
from .settings import Settings, create_settings_from_env


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Holds the settings for one CLI invocation and builds the Operations
    facade from them.
    """
    settings: Settings
    verbose: bool = False

    @classmethod
    def from_env(cls, verbose: bool = False) -> CLIContext:
        """
        Create CLI context from environment variables.

        Raises:
            ConfigurationError: If no home directory can be resolved
            ValueError: If a setting is invalid
        """
        return cls(settings=create_settings_from_env(), verbose=verbose)

    def operations(self, update_index: bool = True) -> Operations:
        config = OpsConfig(update_index=update_index, verbose=self.verbose)
        return Operations(config=config, settings=self.settings)
