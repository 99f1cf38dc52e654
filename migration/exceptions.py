"""
Exceptions raised by the migration pipeline.

Only the run-aborting tier is expressed as exceptions; endpoint and file
level failures travel as result objects (see migration.models).
"""


class MigrationError(Exception):
    """Base class for fatal migration errors"""


class ConfigurationError(MigrationError):
    """Configuration is missing or inconsistent"""


class InventoryNotFoundError(MigrationError):
    """Inventory spreadsheet does not exist"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Inventory file not found: {path}")


class InventorySchemaError(MigrationError):
    """Inventory is missing required columns or required values"""

    def __init__(self, message: str, missing_columns=None):
        self.missing_columns = list(missing_columns or [])
        super().__init__(message)


class InventoryLockedError(MigrationError):
    """Inventory could not be read because another process holds it open"""


class EmptyInventoryError(MigrationError):
    """Inventory contains no records and empty runs are configured as fatal"""


class InventoryReadError(MigrationError):
    """Inventory exists but could not be parsed as a spreadsheet"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Inventory could not be read ({reason}): {path}")
