"""In-memory registry of module configurations keyed by stable module key."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

from app.errors import ConfigurationError, UnknownModuleError
from module_config import ModuleConfig, config_to_dict, derive_config
from sitecrud.config_hash import config_hash


logger = logging.getLogger("sitecrud.registry")


class ModuleRegistry:
    def __init__(self, configs: Iterable[ModuleConfig] | None = None) -> None:
        self._modules: Dict[str, ModuleConfig] = {}
        for config in configs or ():
            self.register(config)

    def __contains__(self, key: object) -> bool:
        return key in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def get(self, key: str) -> ModuleConfig:
        config = self._modules.get(key)
        if config is None:
            raise UnknownModuleError(f"module not declared: {key}", path="key", detail={"key": key})
        return config

    def list(self) -> list[ModuleConfig]:
        return [self._modules[key] for key in sorted(self._modules.keys())]

    def keys(self) -> list[str]:
        return sorted(self._modules.keys())

    def register(self, config: ModuleConfig) -> ModuleConfig:
        if not isinstance(config, ModuleConfig):
            raise ConfigurationError("registry only accepts ModuleConfig values", path="config")
        if config.key in self._modules:
            raise ConfigurationError(f"module already registered: {config.key}", path="key")
        self._modules[config.key] = config
        logger.debug("module_registered key=%s table=%s", config.key, config.table)
        return config

    def derive(self, key: str, overrides: Dict[str, Any] | None = None) -> ModuleConfig:
        return derive_config(self.get(key), overrides)

    def fingerprint(self, key_or_config: str | ModuleConfig) -> str:
        config = self.get(key_or_config) if isinstance(key_or_config, str) else key_or_config
        return config_hash(config_to_dict(config))

    def describe(self, key_or_config: str | ModuleConfig) -> dict:
        config = self.get(key_or_config) if isinstance(key_or_config, str) else key_or_config
        data = config_to_dict(config)
        data["config_hash"] = config_hash(data)
        return data
