"""ShatterScan: chromothripsis and chromoplexy region detection."""

from shatterscan.__version__ import __version__

__all__ = ["__version__"]
