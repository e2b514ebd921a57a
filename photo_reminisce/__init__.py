"""
Photo-Reminisce - vintage timestamp overlay for photos
"""

__version__ = "1.0"

from .core import (
    ConfigManager,
    StyleManager,
    setup_logging
)
from .editor import TimestampEditor
from .export import BatchExporter, DirectorySink, ExportProgress, ExportSummary
from .formatting import format_date
from .library import PhotoLibrary, intake_photo
from .metadata import MetadataResolver, read_tags
from .models import Photo, Position, StyleSettings, TextGeometry, export_filename
from .positioner import DisplayRect, PointerEvent, TimestampPositioner
from .renderer import RasterSurface, TimestampRenderer

__all__ = [
    'ConfigManager',
    'StyleManager',
    'setup_logging',
    'TimestampEditor',
    'BatchExporter',
    'DirectorySink',
    'ExportProgress',
    'ExportSummary',
    'format_date',
    'PhotoLibrary',
    'intake_photo',
    'MetadataResolver',
    'read_tags',
    'Photo',
    'Position',
    'StyleSettings',
    'TextGeometry',
    'export_filename',
    'DisplayRect',
    'PointerEvent',
    'TimestampPositioner',
    'RasterSurface',
    'TimestampRenderer',
]
