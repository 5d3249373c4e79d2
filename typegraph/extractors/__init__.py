"""Per-language extractors.

Importing this package registers every extractor in
:data:`extractor_registry`.
"""

from .base import Extractor, extractor_registry
from .csharp import CSharpExtractor
from .java import JavaExtractor
from .python import PythonExtractor
from .typescript import TypeScriptExtractor

__all__ = [
    "Extractor",
    "extractor_registry",
    "CSharpExtractor",
    "JavaExtractor",
    "PythonExtractor",
    "TypeScriptExtractor",
]
