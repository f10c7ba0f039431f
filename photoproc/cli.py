"""
Command Line Interface for the photo derivative pipeline.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import urllib3

from .db_config import DbConfig
from .deletion import DeletionCoordinator, Principal
from .derivative_generator import DerivativeGenerator
from .errors import PhotoprocError
from .events import ObjectFinalizedEvent
from .photo_db import PhotoDb
from .photo_record import CACHE_CONTROL, VARIANT_NAMES
from .pipeline_config import PipelineConfig
from .processor import PhotoProcessor
from .s3_client import S3Client
from .s3_config import S3Config
from .staging import StagingArea


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('sh').setLevel(logging.WARNING)

    return logging.getLogger('photoproc')


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration from environment and CLI overrides."""
    config = S3Config.from_env()

    if getattr(args, 's3_endpoint', None):
        config.endpoint = args.s3_endpoint
    if getattr(args, 's3_bucket', None):
        config.bucket = args.s3_bucket
    if getattr(args, 's3_access_key', None):
        config.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.secret_key = args.s3_secret_key

    return config


def get_db_config(args: argparse.Namespace) -> DbConfig:
    """Get database configuration from environment and CLI overrides."""
    config = DbConfig.from_env()

    if getattr(args, 'sql_host', None):
        config.host = args.sql_host
    if getattr(args, 'sql_port', None):
        config.port = args.sql_port
    if getattr(args, 'sql_database', None):
        config.database = args.sql_database

    return config


def get_pipeline_config(args: argparse.Namespace) -> PipelineConfig:
    config = PipelineConfig.from_env()

    if getattr(args, 'tmp_root', None):
        config.tmp_root = args.tmp_root
    if getattr(args, 'convert_command', None):
        config.convert_command = args.convert_command

    return config


def _report_errors(logger: logging.Logger, errors: List[str], what: str) -> None:
    for error in errors:
        logger.error(error)
    raise ValueError(f"{what} configuration invalid")


def get_storage_client(args: argparse.Namespace, logger: logging.Logger) -> S3Client:
    config = get_s3_config(args)
    errors = config.validate()
    if errors:
        _report_errors(logger, errors, "S3")
    if not config.verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return S3Client(config, logger)


def get_photo_db(args: argparse.Namespace, logger: logging.Logger) -> PhotoDb:
    config = get_db_config(args)
    errors = config.validate()
    if errors:
        _report_errors(logger, errors, "Database")
    return PhotoDb(config, logger)


def build_processor(args: argparse.Namespace, logger: logging.Logger) -> PhotoProcessor:
    """Wire a PhotoProcessor from configuration."""
    pipeline = get_pipeline_config(args)
    errors = pipeline.validate()
    if errors:
        _report_errors(logger, errors, "Pipeline")

    generator = DerivativeGenerator(
        convert_command=pipeline.convert_command,
        convert_timeout=pipeline.convert_timeout,
        max_pixels=pipeline.max_pixels,
        logger=logger,
    )
    return PhotoProcessor(
        storage=get_storage_client(args, logger),
        photo_db=get_photo_db(args, logger),
        generator=generator,
        staging=StagingArea(root=pipeline.tmp_root, logger=logger),
        logger=logger,
    )


def add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    """Add storage and database configuration arguments to a parser."""
    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-bucket', help='Override S3_BUCKET')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')

    db_group = parser.add_argument_group('Database')
    db_group.add_argument('--sql-host', help='Override SQL_HOST')
    db_group.add_argument('--sql-port', type=int, help='Override SQL_PORT')
    db_group.add_argument('--sql-database', help='Override SQL_DATABASE')


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create the photos table."""
    logger = setup_logging(args.verbose)

    try:
        photo_db = get_photo_db(args, logger)
        photo_db.create_tables()
        logger.info("photos table ready")
        return 0
    except ValueError:
        return 1
    except Exception as e:
        logger.exception(f"init-db failed: {e}")
        return 1


def _run_events(processor: PhotoProcessor, events: List[ObjectFinalizedEvent], logger: logging.Logger) -> int:
    failures = 0
    for event in events:
        try:
            result = processor.handle_event(event)
        except Exception as e:
            logger.error(f"Failed: {event.key}: {e}")
            failures += 1
            continue

        if result.skipped:
            logger.info(f"Skipped: {event.key}")
        else:
            logger.info(
                f"Done: {event.key} -> photo {result.photo_id} "
                f"({result.width}x{result.height}, {result.bytes_generated} bytes, "
                f"{result.elapsed_seconds:.1f}s)"
            )
    return 0 if failures == 0 else 1


def cmd_process(args: argparse.Namespace) -> int:
    """Run the pipeline for object keys (manual retrigger)."""
    logger = setup_logging(args.verbose)

    try:
        processor = build_processor(args, logger)
    except ValueError:
        return 1

    events = [ObjectFinalizedEvent(key=key) for key in args.keys]
    return _run_events(processor, events, logger)


def cmd_handle_event(args: argparse.Namespace) -> int:
    """Process an S3 event notification or finalized message read from JSON."""
    logger = setup_logging(args.verbose)

    try:
        if args.file and args.file != '-':
            with open(args.file) as f:
                payload = json.load(f)
        else:
            payload = json.load(sys.stdin)
    except FileNotFoundError:
        logger.error(f"Event file not found: {args.file}")
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"Invalid event JSON: {e}")
        return 1

    try:
        events = ObjectFinalizedEvent.parse(payload)
    except ValueError as e:
        logger.error(f"Invalid event: {e}")
        return 1
    if not events:
        logger.info("No object-created records in event")
        return 0

    try:
        processor = build_processor(args, logger)
    except ValueError:
        return 1

    return _run_events(processor, events, logger)


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete a photo, its original and all variants."""
    logger = setup_logging(args.verbose)

    try:
        coordinator = DeletionCoordinator(
            storage=get_storage_client(args, logger),
            photo_db=get_photo_db(args, logger),
            logger=logger,
        )
    except ValueError:
        return 1

    principal = None
    if args.uid:
        principal = Principal(uid=args.uid, claims={'admin': True} if args.admin else {})

    try:
        result = coordinator.delete({'photoId': args.photo_id}, principal)
    except PhotoprocError as e:
        print(json.dumps(e.to_dict()))
        return 1

    print(json.dumps(result))
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show a photo record and check its variant objects."""
    logger = setup_logging(args.verbose)

    try:
        storage = get_storage_client(args, logger)
        photo_db = get_photo_db(args, logger)
    except ValueError:
        return 1

    record = photo_db.get_photo(args.photo_id)
    if record is None:
        logger.error(f"Photo not found: {args.photo_id}")
        return 1

    print(json.dumps(record.to_dict(), indent=2))

    if not record.is_done:
        return 0

    problems = 0
    for name in VARIANT_NAMES:
        key = record.variants.get(name)
        meta = storage.get_object_metadata(key) if key else None
        if meta is None:
            print(f"  {name}: MISSING ({key})")
            problems += 1
        elif meta.get('cache_control') != CACHE_CONTROL:
            print(f"  {name}: {key} ({meta['size']} bytes) cache-control={meta.get('cache_control')!r}")
            problems += 1
        else:
            print(f"  {name}: {key} ({meta['size']} bytes)")

    return 0 if problems == 0 else 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='photoproc',
        description='Derivative generation and deletion for uploaded photos',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  photoproc init-db
  photoproc process originals/p1.jpg
  photoproc handle-event --file event.json
  photoproc delete --photo-id p1 --uid u1
  photoproc status --photo-id p1

Configuration comes from S3_*, SQL_* and PHOTOPROC_* environment variables.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    init_parser = subparsers.add_parser('init-db', help='Create the photos table')
    init_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(init_parser)

    process_parser = subparsers.add_parser('process', help='Generate variants for uploaded originals')
    process_parser.add_argument('keys', nargs='+', metavar='KEY', help='Object key(s) of originals')
    process_parser.add_argument('--tmp-root', metavar='PATH', help='Override PHOTOPROC_TMP_ROOT')
    process_parser.add_argument('--convert-command', help='Override PHOTOPROC_CONVERT_COMMAND')
    process_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(process_parser)

    event_parser = subparsers.add_parser('handle-event', help='Process a storage event notification')
    event_parser.add_argument('-f', '--file', default='-', help='Event JSON file (default: stdin)')
    event_parser.add_argument('--tmp-root', metavar='PATH', help='Override PHOTOPROC_TMP_ROOT')
    event_parser.add_argument('--convert-command', help='Override PHOTOPROC_CONVERT_COMMAND')
    event_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(event_parser)

    delete_parser = subparsers.add_parser('delete', help='Delete a photo and its stored objects')
    delete_parser.add_argument('--photo-id', help='Photo record id')
    delete_parser.add_argument('--uid', help='Requesting user id')
    delete_parser.add_argument('--admin', action='store_true', help='Request with admin claim')
    delete_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(delete_parser)

    status_parser = subparsers.add_parser('status', help='Show a photo record and verify its variants')
    status_parser.add_argument('--photo-id', required=True, help='Photo record id')
    status_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(status_parser)

    return parser


COMMANDS = {
    'init-db': cmd_init_db,
    'process': cmd_process,
    'handle-event': cmd_handle_event,
    'delete': cmd_delete,
    'status': cmd_status,
}


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    return COMMANDS[parsed_args.command](parsed_args)
