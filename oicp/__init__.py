from oicp.shared.logging import _init_logger

__version__ = "0.1.0"

_init_logger()
