import yaml
from pathlib import Path
from typing import Any, Dict

from swbrowser.utils.logger import LoggerManager


class ConfigLoader:
    """
    YAML settings file with dot-notation access and in-memory overrides.

    A missing file is an error only when ``required`` is set; otherwise the
    loader starts empty so defaults elsewhere apply. Overrides (typically from
    environment variables) are layered on top with ``set()``.
    """

    def __init__(self, path: str | Path, required: bool = True):
        self.path = Path(path)
        self.required = required
        self.config: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        log = LoggerManager.get_logger(__name__)
        if not self.path.exists():
            if self.required:
                log.error("config.missing", extra={"extra_data": {"path": str(self.path)}})
                raise FileNotFoundError(f"Config file not found: {self.path}")
            log.info("config.defaults", extra={"extra_data": {"path": str(self.path)}})
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            log.error(
                "config.load.fail",
                extra={"extra_data": {"path": str(self.path), "error": str(e)}},
                exc_info=True,
            )
            raise

        if not isinstance(data, dict):
            log.error("config.invalid_type", extra={"extra_data": {"path": str(self.path)}})
            raise ValueError(f"Invalid config (expected mapping) at {self.path}")
        log.info("config.loaded", extra={"extra_data": {"path": str(self.path), "sections": list(data)}})
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Look up ``"swapi.timeout"``-style keys; missing paths give ``default``."""
        node: Any = self.config
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key, creating intermediate sections as needed."""
        *sections, leaf = key.split(".")
        node = self.config
        for part in sections:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[leaf] = value

    def as_dict(self) -> Dict[str, Any]:
        return self.config
