"""Configuration model and loaders for chaptermarker.

Responsibilities:
- Define runtime configuration for one recording as a typed dataclass.
- Derive normalization and misplaced-chapter options from configuration values.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `ChaptersConfig`: normalized runtime settings for a pipeline run.
- `ConfigLoader`: static construction helpers for `ChaptersConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .audio.silence import DEFAULT_SILENCE_MIN_LENGTH_MS, DEFAULT_SILENCE_NOISE_DB
from .chapters.diagnostics import DEFAULT_MISPLACED_TOLERANCE_MS
from .chapters.normalizer import (
    DEFAULT_CHAPTER_PATTERN,
    DEFAULT_CHAPTER_REMOVE_CHARS,
    DEFAULT_CHAPTER_REPLACEMENT,
    NormalizeOptions,
    compile_chapter_pattern,
)
from .errors import ConfigurationError
from .io.chapters_txt import default_chapters_path
from .parsing import (
    normalize_optional_string,
    parse_index_list,
    parse_permissive_boolean,
)

_DEFAULT_MISPLACED_OFFSET_SECONDS = 120


@dataclass(slots=True)
class ChaptersConfig:
    """Runtime configuration for one chapter run.

    Attributes:
        input_audio: Path to the audio file to chapterize.
        output_file: Target `chapters.txt` path; defaults to `<stem>.chapters.txt`.
        force: Overwrite an existing chapters file.
        hints_file: Optional chapter hints file (`HH:MM:SS.mmm name` or bare names).
        adjust_by_silence: Re-snap chapters already stored in the file instead of
            building new ones; normalization and diagnostics are skipped.
        no_chapter_import: Only write the chapters file, leave the audio file untouched.
        merge_similar: Merge consecutive chapters with equal names.
        no_chapter_numbering: Do not append ` (n)` to chapter names.
        chapter_pattern: Rename pattern; empty disables renaming.
        chapter_replacement: Replacement for `chapter_pattern` matches.
        chapter_remove_chars: Characters removed from every chapter name.
        first_chapter_offset_ms: Signed shift of the first chapter start.
        last_chapter_offset_ms: Signed shift of the last chapter start.
        find_misplaced_chapters: Comma-separated 0-based chapter indices to annotate.
        find_misplaced_offset_s: Search radius in seconds around annotated chapters.
        find_misplaced_tolerance_ms: Signed shift of tolerance markers.
        strict_misplaced_chapters: Reject non-numeric `find_misplaced_chapters` tokens
            instead of dropping them.
        silence_min_length_ms: Minimum detected silence length.
        silence_noise_db: Noise floor for silence detection.
    """

    input_audio: Path
    output_file: Path | None = None
    force: bool = False
    hints_file: Path | None = None
    adjust_by_silence: bool = False
    no_chapter_import: bool = False
    merge_similar: bool = False
    no_chapter_numbering: bool = False
    chapter_pattern: str = DEFAULT_CHAPTER_PATTERN
    chapter_replacement: str = DEFAULT_CHAPTER_REPLACEMENT
    chapter_remove_chars: str = DEFAULT_CHAPTER_REMOVE_CHARS
    first_chapter_offset_ms: int = 0
    last_chapter_offset_ms: int = 0
    find_misplaced_chapters: str | None = None
    find_misplaced_offset_s: int = _DEFAULT_MISPLACED_OFFSET_SECONDS
    find_misplaced_tolerance_ms: int = DEFAULT_MISPLACED_TOLERANCE_MS
    strict_misplaced_chapters: bool = False
    silence_min_length_ms: int = DEFAULT_SILENCE_MIN_LENGTH_MS
    silence_noise_db: float = DEFAULT_SILENCE_NOISE_DB

    def validate(self) -> None:
        """Validate configuration values before pipeline execution.

        Raises:
            ConfigurationError: For a non-positive silence length or an invalid pattern.
            InvalidArgumentError: For a malformed index list in strict mode.
        """

        if self.silence_min_length_ms < 1:
            raise ConfigurationError(
                stage="config",
                detail="`silence_min_length_ms` must be a positive integer value.",
                hint="Pass `--silence-min-length` with a value of at least 1.",
            )
        if self.find_misplaced_offset_s < 0:
            raise ConfigurationError(
                stage="config",
                detail="`find_misplaced_offset_s` must not be negative.",
                hint="Use `0` to disable the search radius.",
            )
        compile_chapter_pattern(self.chapter_pattern)
        self.misplaced_indices()

    def normalize_options(self) -> NormalizeOptions:
        """Return normalizer options derived from this configuration."""

        return NormalizeOptions(
            first_chapter_offset_ms=self.first_chapter_offset_ms,
            last_chapter_offset_ms=self.last_chapter_offset_ms,
            merge_similar=self.merge_similar,
            no_chapter_numbering=self.no_chapter_numbering,
            chapter_pattern=self.chapter_pattern or None,
            chapter_replacement=self.chapter_replacement,
            chapter_remove_chars=self.chapter_remove_chars,
        )

    def misplaced_indices(self) -> list[int]:
        """Return requested misplaced-chapter indices.

        Raises:
            InvalidArgumentError: For a non-numeric token when `strict_misplaced_chapters`
                is set; otherwise such tokens are dropped.
        """

        return parse_index_list(
            self.find_misplaced_chapters, strict=self.strict_misplaced_chapters
        )

    def misplaced_offset_ms(self) -> int:
        return self.find_misplaced_offset_s * 1000

    def chapters_output_path(self) -> Path:
        return self.output_file or default_chapters_path(self.input_audio)


class ConfigLoader:
    """Factory methods for creating `ChaptersConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"input_audio"})
    _BOOLEAN_KEYS = (
        "force",
        "adjust_by_silence",
        "no_chapter_import",
        "merge_similar",
        "no_chapter_numbering",
        "strict_misplaced_chapters",
    )
    _SIGNED_INT_KEYS = (
        "first_chapter_offset_ms",
        "last_chapter_offset_ms",
        "find_misplaced_offset_s",
        "find_misplaced_tolerance_ms",
        "silence_min_length_ms",
    )
    _RAW_STRING_KEYS = ("chapter_pattern", "chapter_replacement", "chapter_remove_chars")
    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "input_audio",
            "output_file",
            "hints_file",
            "find_misplaced_chapters",
            "silence_noise_db",
            *_BOOLEAN_KEYS,
            *_SIGNED_INT_KEYS,
            *_RAW_STRING_KEYS,
        }
    )
    _ENV_PREFIX = "CHAPTERMARKER_"

    @staticmethod
    def from_yaml(path: Path) -> ChaptersConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        ConfigLoader._validate_yaml_keys(payload, f"YAML `{path}`")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> ChaptersConfig:
        """Create a validated config from `CHAPTERMARKER_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload = {
            key[len(ConfigLoader._ENV_PREFIX) :].lower(): value
            for key, value in env_map.items()
            if key.startswith(ConfigLoader._ENV_PREFIX)
            and key[len(ConfigLoader._ENV_PREFIX) :].lower() in ConfigLoader._SUPPORTED_YAML_KEYS
        }
        if normalize_optional_string(payload.get("input_audio")) is None:
            raise ValueError("Environment variable `CHAPTERMARKER_INPUT_AUDIO` is required.")
        return ConfigLoader.from_mapping(payload, source_label="environment")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> ChaptersConfig:
        """Build a validated config from a normalized mapping payload."""

        input_audio = normalize_optional_string(payload.get("input_audio"))
        if input_audio is None:
            raise ValueError(f"{source_label} requires non-empty `input_audio`.")

        values: dict[str, Any] = {"input_audio": Path(input_audio)}
        for key in ("output_file", "hints_file"):
            path_value = normalize_optional_string(payload.get(key))
            if path_value is not None:
                values[key] = Path(path_value)
        values["find_misplaced_chapters"] = normalize_optional_string(
            payload.get("find_misplaced_chapters")
        )
        for key in ConfigLoader._BOOLEAN_KEYS:
            if key in payload:
                values[key] = ConfigLoader._boolean(payload[key], key, source_label)
        for key in ConfigLoader._SIGNED_INT_KEYS:
            if key in payload:
                values[key] = ConfigLoader._signed_int(payload[key], key, source_label)
        for key in ConfigLoader._RAW_STRING_KEYS:
            if key in payload:
                values[key] = "" if payload[key] is None else str(payload[key])
        if "silence_noise_db" in payload:
            values["silence_noise_db"] = ConfigLoader._float(
                payload["silence_noise_db"], "silence_noise_db", source_label
            )

        config = ChaptersConfig(**values)
        config.validate()
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required YAML keys."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        missing = sorted(
            key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload
        )
        if missing:
            key_list = ", ".join(missing)
            raise ValueError(f"{source_label} is missing required key(s): {key_list}.")

    @staticmethod
    def _boolean(raw_value: Any, key: str, source_label: str) -> bool:
        parsed = parse_permissive_boolean(raw_value)
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

    @staticmethod
    def _signed_int(raw_value: Any, key: str, source_label: str) -> int:
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be an integer.")
        if isinstance(raw_value, int):
            return raw_value
        normalized = normalize_optional_string(raw_value)
        try:
            return int(normalized or "")
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be an integer.") from exc

    @staticmethod
    def _float(raw_value: Any, key: str, source_label: str) -> float:
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a number.")
        try:
            return float(raw_value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{source_label} field `{key}` must be a number.") from exc
