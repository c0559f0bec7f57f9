"""Run configuration -- defaults plus optional JSON overrides."""

import json
from dataclasses import dataclass, field, fields
from typing import Set

DEFAULT_EXTENSIONS = {'.jpg', '.jpeg', '.jpe', '.jfif'}


@dataclass
class StripConfig:
    """Settings shared by the CLI and the batch processor.

    JSON format::

        {
          "keep_orientation": true,
          "extensions": [".jpg", ".jpeg"],
          "workers": 4,
          "verify": true
        }

    All keys are optional; omitted keys keep their defaults.
    """

    keep_orientation: bool = True
    extensions: Set[str] = field(default_factory=lambda: set(DEFAULT_EXTENSIONS))
    workers: int = 1
    verify: bool = True

    @classmethod
    def default(cls) -> 'StripConfig':
        return cls()

    @classmethod
    def from_json(cls, path) -> 'StripConfig':
        """Load settings from a JSON file on top of the defaults."""
        with open(str(path), 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f'{path}: expected a JSON object')

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f'{path}: unknown config key(s): {", ".join(sorted(unknown))}')

        config = cls.default()
        if 'keep_orientation' in data:
            config.keep_orientation = bool(data['keep_orientation'])
        if 'verify' in data:
            config.verify = bool(data['verify'])
        if 'workers' in data:
            workers = int(data['workers'])
            if workers < 1:
                raise ValueError(f'{path}: workers must be >= 1')
            config.workers = workers
        if 'extensions' in data:
            config.extensions = {_normalize_ext(e) for e in data['extensions']}
        return config


def _normalize_ext(ext: str) -> str:
    ext = ext.lower()
    return ext if ext.startswith('.') else '.' + ext
