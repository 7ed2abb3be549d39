"""
Makernote (proprietary) tag definitions.
"""

from . import canon, nikon
