"""
Board Defence Logging

Module loggers for the simulation, plus an event trace: every event the
bus publishes can be written as one JSON line, stamped with the battle
tick and simulation time it happened in.

Usage:
    from boarddefence.logging import get_logger

    log = get_logger('waves')
    log.debug("Spawning enemy")
    log.info("Level loaded")

Configuration:
    Environment variables:
        BD_LOG_LEVEL=DEBUG              # Default level for every module
        BD_LOG_WAVES=TRACE              # Level for one module
        BD_LOG_DIR=/tmp/bd-logs         # Where trace files are written
        BD_LOGGING_EVENTS_ENABLED=true  # Record the event trace

    Or programmatically:
        from boarddefence.logging import configure_logging
        configure_logging(level='DEBUG', modules={'enemy': 'INFO'})

Event trace:
    register_sink('events', create_sink_for_environment('events'))
    ...
    close_all_sinks()

    The game marks each battle tick with mark_tick(); emit_record() adds
    the current tick and sim_time to every record it routes.
"""

import json
import os
import time
from abc import ABC, abstractmethod
from enum import IntEnum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""
    TRACE = 5      # Per-tick detail
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    OFF = 100


_LEVEL_NAMES = {
    'TRACE': LogLevel.TRACE,
    'DEBUG': LogLevel.DEBUG,
    'INFO': LogLevel.INFO,
    'WARNING': LogLevel.WARNING,
    'WARN': LogLevel.WARNING,
    'ERROR': LogLevel.ERROR,
    'OFF': LogLevel.OFF,
}

_config: Dict[str, Any] = {
    'default_level': LogLevel.INFO,
    'module_levels': {},
    'log_dir': None,
    'traced': set(),         # Modules whose trace is enabled from the environment
}

# Simulation clock stamped onto trace records
_clock: Dict[str, Any] = {'tick': 0, 'sim_time': 0.0}


def _level_from_string(level_str: str) -> LogLevel:
    return _LEVEL_NAMES.get(level_str.upper(), LogLevel.INFO)


def _load_env_config() -> None:
    """Read BD_LOG_* levels and BD_LOGGING_<MODULE>_ENABLED switches."""
    reserved = ('BD_LOG_LEVEL', 'BD_LOG_DIR')
    for key, value in os.environ.items():
        if key == 'BD_LOG_LEVEL':
            _config['default_level'] = _level_from_string(value)
        elif key == 'BD_LOG_DIR':
            _config['log_dir'] = value
        elif key.startswith('BD_LOG_') and key not in reserved:
            _config['module_levels'][key[7:].lower()] = _level_from_string(value)
        elif key.startswith('BD_LOGGING_') and key.endswith('_ENABLED'):
            module = key[11:-8].lower()
            if value.lower() in ('true', '1', 'yes', 'on'):
                _config['traced'].add(module)
            else:
                _config['traced'].discard(module)


_load_env_config()


def configure_logging(
    level: str = 'INFO',
    modules: Optional[Dict[str, str]] = None,
    log_dir: Optional[str] = None,
) -> None:
    """
    Configure the logging system.

    Args:
        level: Default log level for all modules
        modules: Dict of module_name -> level for per-module configuration
        log_dir: Directory for event trace files
    """
    _config['default_level'] = _level_from_string(level)
    for mod, mod_level in (modules or {}).items():
        _config['module_levels'][mod] = _level_from_string(mod_level)
    if log_dir is not None:
        _config['log_dir'] = log_dir


def disable_logging() -> None:
    """Silence every module logger."""
    _config['default_level'] = LogLevel.OFF
    _config['module_levels'].clear()


def get_log_dir() -> Path:
    """Trace directory: configured, then BD_LOG_DIR, then ./logs."""
    configured = _config.get('log_dir') or os.environ.get('BD_LOG_DIR')
    if configured:
        return Path(configured).expanduser()
    return Path.cwd() / 'logs'


# =============================================================================
# Module loggers
# =============================================================================

class BoardDefenceLogger:
    """
    Logger for one simulation module.

    Prints `[module] LEVEL: message` lines. TRACE is for per-tick detail
    such as attacks that found no target.
    """

    def __init__(self, module: str):
        self.module = module

    @property
    def level(self) -> LogLevel:
        """Effective level: the module's own, else the default."""
        return _config['module_levels'].get(self.module.lower(), _config['default_level'])

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def _log(self, level: LogLevel, level_name: str, msg: str, *args) -> None:
        if not self.is_enabled_for(level):
            return
        if args:
            try:
                msg = msg % args
            except (TypeError, ValueError):
                msg = f"{msg} {args}"
        print(f"[{self.module}] {level_name}: {msg}")

    def trace(self, msg: str, *args) -> None:
        self._log(LogLevel.TRACE, 'TRACE', msg, *args)

    def debug(self, msg: str, *args) -> None:
        self._log(LogLevel.DEBUG, 'DEBUG', msg, *args)

    def info(self, msg: str, *args) -> None:
        self._log(LogLevel.INFO, 'INFO', msg, *args)

    def warning(self, msg: str, *args) -> None:
        self._log(LogLevel.WARNING, 'WARN', msg, *args)

    def error(self, msg: str, *args) -> None:
        self._log(LogLevel.ERROR, 'ERROR', msg, *args)


@lru_cache(maxsize=64)
def get_logger(module: str) -> BoardDefenceLogger:
    """
    Get the (cached) logger for a module.

    Args:
        module: Module name (e.g., 'grid', 'waves', 'game')
    """
    return BoardDefenceLogger(module)


# =============================================================================
# Event trace
# =============================================================================

def mark_tick(tick: int, sim_time: float) -> None:
    """Set the battle tick and simulation time stamped onto trace records."""
    _clock['tick'] = tick
    _clock['sim_time'] = sim_time


class TraceSink(ABC):
    """Destination for trace records (JSON-serializable dicts)."""

    @abstractmethod
    def emit(self, module: str, record: Dict[str, Any]) -> None:
        """Write one record for `module`."""

    @abstractmethod
    def close(self) -> None:
        """Finish writing and release resources."""


class JsonlTraceSink(TraceSink):
    """
    Writes each module's trace to `<session>_<module>.jsonl`.

    The file opens with a header line and ends with a footer giving the
    record count and the last tick seen.

    Args:
        log_dir: Directory for trace files (default: get_log_dir())
        session_name: File name prefix (default: timestamp)
    """

    def __init__(self, log_dir: Optional[str] = None, session_name: Optional[str] = None):
        self._log_dir = Path(log_dir) if log_dir else None
        self._session_name = session_name or time.strftime("%Y%m%d_%H%M%S")
        self._files: Dict[str, Any] = {}
        self._counts: Dict[str, int] = {}

    def path_for(self, module: str) -> Path:
        if self._log_dir is None:
            self._log_dir = get_log_dir()
        return self._log_dir / f"{self._session_name}_{module}.jsonl"

    def _file(self, module: str):
        if module not in self._files:
            path = self.path_for(module)
            path.parent.mkdir(parents=True, exist_ok=True)
            f = open(path, 'a')
            f.write(json.dumps({
                'type': 'header',
                'module': module,
                'session_name': self._session_name,
                'start_time': time.time(),
            }) + "\n")
            self._files[module] = f
            self._counts[module] = 0
        return self._files[module]

    def emit(self, module: str, record: Dict[str, Any]) -> None:
        self._file(module).write(json.dumps(record) + "\n")
        self._counts[module] += 1

    def close(self) -> None:
        for module, f in self._files.items():
            f.write(json.dumps({
                'type': 'footer',
                'module': module,
                'records': self._counts[module],
                'last_tick': _clock['tick'],
            }) + "\n")
            f.close()
        self._files.clear()


class NullSink(TraceSink):
    """Discards records; used when the trace is disabled."""

    def emit(self, module: str, record: Dict[str, Any]) -> None:
        pass

    def close(self) -> None:
        pass


_sinks: Dict[str, TraceSink] = {}


def register_sink(module: str, sink: TraceSink) -> None:
    """Route `module`'s records to `sink`."""
    _sinks[module] = sink


def get_sink(module: str) -> Optional[TraceSink]:
    return _sinks.get(module)


def emit_record(module: str, record: Dict[str, Any]) -> bool:
    """
    Stamp a record with the current tick and sim_time and route it.

    Returns:
        True if a sink received the record
    """
    sink = _sinks.get(module)
    if sink is None:
        return False
    sink.emit(module, {'tick': _clock['tick'], 'sim_time': _clock['sim_time'], **record})
    return True


def close_all_sinks() -> None:
    """Close and unregister every sink."""
    for sink in _sinks.values():
        sink.close()
    _sinks.clear()


def create_sink_for_environment(module: str, session_name: Optional[str] = None) -> TraceSink:
    """JsonlTraceSink when BD_LOGGING_<MODULE>_ENABLED is set, else NullSink."""
    if module.lower() in _config['traced']:
        return JsonlTraceSink(session_name=session_name)
    return NullSink()
