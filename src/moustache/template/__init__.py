"""Moustache Template package — compiled template objects ready for rendering."""

from moustache.template.core import Template
from moustache.template.helpers import LambdaHelper

__all__ = [
    "LambdaHelper",
    "Template",
]
