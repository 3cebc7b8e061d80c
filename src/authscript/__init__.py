"""
authscript — Compiler driver for authentication script templates.

Turns a named script template into the bytecode an authentication
virtual machine executes, applying P2SH wrapping and locktime-type
enforcement on the way out.
"""

__version__ = "0.1.0"
