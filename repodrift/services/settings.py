"""
Application settings management.
"""

from __future__ import annotations

import codecs
import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from repodrift.core.diff.line_diff import LineDiffOptions, WhitespaceMode
from repodrift.core.errors import ConfigurationError
from repodrift.core.folder.comparer import DEFAULT_SIMILARITY_THRESHOLD, CompareOptions


@dataclass
class CompareSettings:
    """Settings for repository comparison."""
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    ignore_patterns: list[str] = field(default_factory=list)
    parallel_workers: int = 8
    encoding: str = 'utf-8'

    # Line matching
    ignore_line_endings: bool = True
    ignore_case: bool = False
    whitespace: str = 'exact'  # 'exact', 'trailing' or 'all'

    def to_options(self, parallel_workers: Optional[int] = None) -> CompareOptions:
        """
        Build engine options from these settings.

        Args:
            parallel_workers: Overrides the configured worker count
        """
        try:
            whitespace_mode = WhitespaceMode.from_string(self.whitespace)
        except KeyError:
            raise ConfigurationError(f"Unknown whitespace mode: {self.whitespace}") from None

        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ConfigurationError(f"Unknown encoding: {self.encoding}") from None

        return CompareOptions(
            parallel_workers=parallel_workers if parallel_workers is not None else self.parallel_workers,
            encoding=self.encoding,
            diff_options=LineDiffOptions(
                ignore_line_endings=self.ignore_line_endings,
                whitespace_mode=whitespace_mode,
                ignore_case=self.ignore_case,
            ),
        )


@dataclass
class OutputSettings:
    """Report and logging settings."""
    use_colors: bool = True
    log_level: str = "WARNING"


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    comparison: CompareSettings = field(default_factory=CompareSettings)
    output: OutputSettings = field(default_factory=OutputSettings)


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self._explicit = settings_path is not None
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'repodrift' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'repodrift' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """
        Load settings from disk.

        A missing default file yields defaults; a missing or malformed
        file that was asked for explicitly is a ConfigurationError.
        """
        if not self.settings_path.exists():
            if self._explicit:
                raise ConfigurationError(f"Settings file does not exist: {self.settings_path}")
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Could not read settings file {self.settings_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file must hold a JSON object: {self.settings_path}")

        return self._from_dict(data)

    def save(self, settings: Optional[ApplicationSettings] = None) -> None:
        """Save settings to disk."""
        settings = settings or self.settings

        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_path, 'w', encoding='utf-8') as f:
            json.dump(asdict(settings), f, indent=2)

        self._settings = settings

    def _from_dict(self, data: dict[str, Any]) -> ApplicationSettings:
        """
        Convert dictionary back to settings objects.

        Raises:
            ConfigurationError: A section or value has the wrong JSON type
        """
        comparison_data = self._section(data, 'comparison')
        output_data = self._section(data, 'output')
        defaults = CompareSettings()
        output_defaults = OutputSettings()

        ignore_patterns = self._value(comparison_data, 'ignore_patterns', [], list)
        if not all(isinstance(pattern, str) for pattern in ignore_patterns):
            raise ConfigurationError(
                f"Setting comparison.ignore_patterns must be a list of strings: {self.settings_path}"
            )

        comparison = CompareSettings(
            similarity_threshold=self._value(
                comparison_data, 'similarity_threshold', defaults.similarity_threshold, (int, float)
            ),
            ignore_patterns=list(ignore_patterns),
            parallel_workers=self._value(comparison_data, 'parallel_workers', defaults.parallel_workers, int),
            encoding=self._value(comparison_data, 'encoding', defaults.encoding, str),
            ignore_line_endings=self._value(
                comparison_data, 'ignore_line_endings', defaults.ignore_line_endings, bool
            ),
            ignore_case=self._value(comparison_data, 'ignore_case', defaults.ignore_case, bool),
            whitespace=self._value(comparison_data, 'whitespace', defaults.whitespace, str),
        )

        output = OutputSettings(
            use_colors=self._value(output_data, 'use_colors', output_defaults.use_colors, bool),
            log_level=self._value(output_data, 'log_level', output_defaults.log_level, str),
        )

        return ApplicationSettings(comparison=comparison, output=output)

    def _section(self, data: dict[str, Any], name: str) -> dict[str, Any]:
        """Get a settings section, which must be a JSON object."""
        section = data.get(name, {})
        if not isinstance(section, dict):
            raise ConfigurationError(f"Settings section '{name}' must be a JSON object: {self.settings_path}")
        return section

    def _value(self, section: dict[str, Any], key: str, default: Any, types: type | tuple[type, ...]) -> Any:
        """Get a setting, checking its JSON type. Booleans only pass as bool."""
        value = section.get(key, default)
        expected = types if isinstance(types, tuple) else (types,)

        if isinstance(value, bool) and bool not in expected:
            valid = False
        else:
            valid = isinstance(value, expected)

        if not valid:
            names = ' or '.join(t.__name__ for t in expected)
            raise ConfigurationError(
                f"Setting {key} must be {names}, got {type(value).__name__}: {self.settings_path}"
            )
        return value
