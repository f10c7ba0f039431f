"""
Photo derivative pipeline.

For every uploaded original:
    1. Resolve the photo record that claims the object path
    2. Generate a tiled pyramid TIFF, a thumbnail, a medium JPEG and a WebP copy
    3. Upload them under variants/{id}/ with immutable cache headers
    4. Record the outcome (done or error) on the photo record

A companion deletion flow removes the original, all variants and the record.
"""

__version__ = "1.0.0"

from .s3_config import S3Config
from .s3_client import S3Client
from .db_config import DbConfig
from .pipeline_config import PipelineConfig
from .photo_db import PhotoDb
from .photo_record import PhotoRecord, PhotoStatus
from .events import ObjectFinalizedEvent
from .staging import StagingArea, ScratchDir
from .resolver import OriginalResolver
from .derivative_generator import DerivativeGenerator, DerivativeSet
from .variant_writer import VariantWriter
from .state_updater import StateUpdater
from .processor import PhotoProcessor, ProcessResult
from .deletion import DeletionCoordinator, Principal
from .errors import (
    PhotoprocError,
    Unauthenticated,
    InvalidArgument,
    NotFound,
    PermissionDenied,
    InternalError,
    DerivativeError,
)

__all__ = [
    "S3Config",
    "S3Client",
    "DbConfig",
    "PipelineConfig",
    "PhotoDb",
    "PhotoRecord",
    "PhotoStatus",
    "ObjectFinalizedEvent",
    "StagingArea",
    "ScratchDir",
    "OriginalResolver",
    "DerivativeGenerator",
    "DerivativeSet",
    "VariantWriter",
    "StateUpdater",
    "PhotoProcessor",
    "ProcessResult",
    "DeletionCoordinator",
    "Principal",
    "PhotoprocError",
    "Unauthenticated",
    "InvalidArgument",
    "NotFound",
    "PermissionDenied",
    "InternalError",
    "DerivativeError",
]
