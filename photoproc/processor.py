"""
PhotoProcessor - Runs the derivative pipeline for one uploaded original.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from .derivative_generator import DerivativeGenerator
from .events import ObjectFinalizedEvent
from .resolver import OriginalResolver
from .staging import StagingArea
from .state_updater import StateUpdater
from .variant_writer import VariantWriter


SKIPPED = 'skipped'
DONE = 'done'


@dataclass
class ProcessResult:
    """
    Outcome of one invocation.

    Attributes:
        object_path: Storage path from the trigger
        outcome: 'skipped' or 'done'
        photo_id: Owning record (None when skipped before resolution)
        variants: Uploaded variant paths
        width: Original width in pixels
        height: Original height in pixels
        bytes_generated: Total size of uploaded variants
        elapsed_seconds: Wall time of the invocation
    """
    object_path: str
    outcome: str
    photo_id: Optional[str] = None
    variants: Dict[str, str] = field(default_factory=dict)
    width: int = 0
    height: int = 0
    bytes_generated: int = 0
    elapsed_seconds: float = 0.0

    @property
    def skipped(self) -> bool:
        return self.outcome == SKIPPED


class PhotoProcessor:
    """
    Coordinates resolve -> stage -> generate -> upload -> record.

    All collaborators are injected; nothing is shared at module level.
    """

    def __init__(
        self,
        storage,
        photo_db,
        generator: Optional[DerivativeGenerator] = None,
        staging: Optional[StagingArea] = None,
        resolver: Optional[OriginalResolver] = None,
        writer: Optional[VariantWriter] = None,
        updater: Optional[StateUpdater] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize processor.

        Args:
            storage: Object storage client (S3Client or compatible)
            photo_db: Metadata store (PhotoDb or compatible)
            generator: Derivative generator (default settings if omitted)
            staging: Scratch directory provider
            resolver: Original resolver (built on photo_db if omitted)
            writer: Variant writer (built on storage if omitted)
            updater: State updater (built on photo_db if omitted)
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.storage = storage
        self.photo_db = photo_db
        self.generator = generator or DerivativeGenerator(logger=self.logger)
        self.staging = staging or StagingArea(logger=self.logger)
        self.resolver = resolver or OriginalResolver(photo_db, logger=self.logger)
        self.writer = writer or VariantWriter(storage, logger=self.logger)
        self.updater = updater or StateUpdater(photo_db, logger=self.logger)

    def handle_event(self, event: ObjectFinalizedEvent) -> ProcessResult:
        """Process one object-finalized message."""
        if event.bucket and event.bucket != self.storage.bucket:
            self.logger.warning(
                f"Event for bucket {event.bucket} received by processor for {self.storage.bucket}"
            )
        return self.process(event.key)

    def process(self, object_path: str) -> ProcessResult:
        """
        Run the pipeline for an uploaded object.

        Skip conditions return a 'skipped' result. Any failure after the
        record is resolved is written to the record and re-raised.
        """
        start = time.time()

        record = self.resolver.resolve(object_path)
        if record is None:
            return ProcessResult(object_path=object_path, outcome=SKIPPED)

        self.logger.info(f"Processing uploaded original: {object_path} (photo {record.id})")

        try:
            with self.staging.acquire() as scratch:
                original = scratch.file('orig')
                self.storage.download_file(object_path, original)

                derivatives = self.generator.generate(original, scratch)
                variants = self.writer.write(record.id, derivatives)
                self.updater.mark_done(record.id, variants, derivatives.width, derivatives.height)
        except Exception as e:
            self.logger.error(f"Processing error for {record.id}: {e}")
            try:
                self.updater.mark_error(record.id, e)
            except Exception as update_error:
                self.logger.exception(f"Could not record error status for {record.id}: {update_error}")
            raise

        return ProcessResult(
            object_path=object_path,
            outcome=DONE,
            photo_id=record.id,
            variants=variants,
            width=derivatives.width,
            height=derivatives.height,
            bytes_generated=derivatives.total_bytes,
            elapsed_seconds=time.time() - start,
        )
