import json
import os
from pathlib import Path

from core.errors import InvalidConfigurationError
from idgen import DEFAULT_EPOCH, BitLayout

_DEFAULT_CONFIG = Path(__file__).parent / "config.json"

# Node identity is provisioned per host, so the environment wins over the file.
_ENV_OVERRIDES = {
    "IDGEN_DATACENTER_ID": "datacenter_id",
    "IDGEN_WORKER_ID": "worker_id",
}


class GeneratorConfig:
    __slots__ = ("epoch", "datacenter_id", "worker_id",
                 "timestamp_bits", "datacenter_bits", "worker_bits", "sequence_bits")

    def __init__(self, epoch=DEFAULT_EPOCH, datacenter_id=0, worker_id=0,
                 timestamp_bits=41, datacenter_bits=5, worker_bits=5, sequence_bits=12):
        self.epoch = epoch
        self.datacenter_id = datacenter_id
        self.worker_id = worker_id
        self.timestamp_bits = timestamp_bits
        self.datacenter_bits = datacenter_bits
        self.worker_bits = worker_bits
        self.sequence_bits = sequence_bits

    def layout(self):
        return BitLayout(self.timestamp_bits, self.datacenter_bits, self.worker_bits, self.sequence_bits)


class ServerConfig:
    __slots__ = ("host", "port")
    
    def __init__(self, host="127.0.0.1", port=8080):
        self.host = host
        self.port = port


class LoggingConfig:
    __slots__ = ("level", "crash_file")
    
    def __init__(self, level="INFO", crash_file="logs/crash.log"):
        self.level = level
        self.crash_file = crash_file


class Config:
    __slots__ = ("generator", "server", "logging")
    
    def __init__(self, generator=None, server=None, logging=None):
        self.generator = generator or GeneratorConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()

    @classmethod
    def from_dict(cls, d):
        return cls(
            GeneratorConfig(**d.get("generator", {})),
            ServerConfig(**d.get("server", {})),
            LoggingConfig(**d.get("logging", {})),
        )


def apply_env(config, environ=None):
    environ = os.environ if environ is None else environ
    for var, attr in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if value is None or not value.strip():
            continue
        try:
            setattr(config.generator, attr, int(value))
        except ValueError as exc:
            raise InvalidConfigurationError(f"{var} must be an integer, got {value!r}",
                                            field=attr, cause=exc) from exc
    return config


def load_config(path=None, environ=None):
    config_path = Path(path) if path else _DEFAULT_CONFIG
    
    if not config_path.exists():
        return apply_env(Config(), environ)
    
    with open(config_path) as file:
        return apply_env(Config.from_dict(json.load(file)), environ)
