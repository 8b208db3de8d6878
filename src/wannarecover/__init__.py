"""
WannaRecover - restores files left behind as *.WNCRYT temporaries.

The CLI lives in ``wannarecover.ui`` and is not imported here.
"""

__version__ = "1.0.0"
