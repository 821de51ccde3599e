"""
bankfile_services -- Package init and public API.

Responsibility:
    Orchestration over the pure engines: the only layer that reads the
    clock, binds log context and decides whether a batch may be exported.

Architecture position:
    Services -- imperative shell over engines + kernel.

        bankfile_services/ -> bankfile_engines/  (allowed)
        bankfile_services/ -> bankfile_kernel/   (allowed)
        bankfile_engines/  -> bankfile_services/ (FORBIDDEN)
        bankfile_kernel/   -> bankfile_services/ (FORBIDDEN)
"""

from bankfile_kernel.logging_config import get_logger

logger = get_logger("services")

from bankfile_services.bank_file_service import BankFileExport, BankFileService

__all__ = [
    "BankFileExport",
    "BankFileService",
]
