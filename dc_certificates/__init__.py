# dc_certificates/__init__.py
"""SMPTE 430-2 digital cinema certificate chain generator"""

__version__ = "1.0.0"
