"""
Utility modules.
"""

from .security import secure_file_create
from .ui import Icons, UIHelper, console, ui

__all__ = [
    "console",
    "ui",
    "Icons",
    "UIHelper",
    "secure_file_create",
]
