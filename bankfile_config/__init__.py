"""
bankfile_config -- single public entrypoint for the bank registry.

Responsibility:
    Provides ``get_bank_registry()``, the one way services obtain the
    catalogue of supported banks, their cutoff times, working days and
    export column layouts.  The catalogue is a versioned YAML dataset so
    that adding a bank is a data change, not a code change.

Architecture position:
    Configuration -- sits above ``bankfile_kernel`` and below
    ``bankfile_engines`` / ``bankfile_services``.  The kernel never imports
    from this package.

Failure modes:
    - ``FileNotFoundError`` -- the registry file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``RegistryConfigError`` -- the document fails structural validation.

Audit relevance:
    Every successful load emits a ``BANKFILE_REGISTRY_TRACE`` log entry with
    the dataset version, SHA-256 checksum and bank count, tying each
    generated file back to the exact registry content that shaped it.
"""

from __future__ import annotations

from pathlib import Path

from bankfile_config.loader import build_registry, load_registry
from bankfile_config.registry import BankRegistry, normalize_bank_code
from bankfile_config.validator import RegistryValidationResult, validate_registry_data
from bankfile_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_REGISTRY_PATH = Path(__file__).parent / "data" / "banks.yaml"

__all__ = [
    "DEFAULT_REGISTRY_PATH",
    "BankRegistry",
    "RegistryValidationResult",
    "build_registry",
    "get_bank_registry",
    "load_registry",
    "normalize_bank_code",
    "validate_registry_data",
]


def get_bank_registry(path: Path | None = None) -> BankRegistry:
    """
    Load the bank registry.

    Non-goals:
        Does NOT cache; callers load once at start-up and share the
        returned registry read-only.

    Args:
        path: Override path to a registry YAML file.  Defaults to the
            dataset shipped with the package.
    """
    registry = load_registry(path or DEFAULT_REGISTRY_PATH)
    _logger.info(
        "BANKFILE_REGISTRY_TRACE",
        extra={
            "trace_type": "BANKFILE_REGISTRY_TRACE",
            "registry_version": registry.version,
            "registry_checksum": registry.checksum,
            "bank_count": len(registry),
            "source": registry.source,
        },
    )
    return registry
