"""Exception types for disk channel naming"""


class NamingError(Exception):
    """Base class for all errors raised by this package"""


class ConfigError(NamingError):
    """Fatal configuration problem, reported before any output is written"""


class UUIDQueryError(NamingError):
    """The low-level SCSI identification query produced no UUID"""
