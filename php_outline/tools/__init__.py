from __future__ import annotations

"""Agent tool package.

Only includes specific submodules when imported directly. No global
registration is performed here to keep import side-effects minimal.
"""
