"""
bankfile_kernel -- domain types, exceptions, logging and clock.

The kernel has no dependency on the config, engine or service packages.
"""
