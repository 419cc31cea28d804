"""Service layer for packctl.

- packctl.lib.core: Paths and global configuration
- packctl.lib.plugins: URL resolution, submodule backend, registrar
- packctl.lib.facade: Entry points used by the CLI
- packctl.lib._util: Internal helpers (logging)
"""
