"""
Common building blocks for the stateful counter frame.

Modules:
- actions: Action resolution from the pressed button, and the state transition
- frame: HTML frame document rendering (meta tags, buttons, image/post URLs)
"""

__all__ = [
    "actions",
    "frame",
]
