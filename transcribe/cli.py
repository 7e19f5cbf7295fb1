"""
Command line entry point: upload an audio file to otter.ai for transcription
"""

import argparse
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from .config.credentials import default_config_file, resolve_credentials
from .config.settings import Settings
from .core.exceptions import AuthenticationError, ServiceError
from .core.logging import configure_logging
from .pipeline.service import TranscriptionPipeline

logger = logging.getLogger("transcribe")


class UsageExitParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = UsageExitParser(
        prog="transcribe",
        description="Upload an audio file to otter.ai and print the transcript URL",
    )
    parser.add_argument("-u", dest="username", default="", help="Username for otter.ai.")
    parser.add_argument("-p", dest="password", default="", help="Password for otter.ai.")
    parser.add_argument(
        "-c",
        dest="config_path",
        default="",
        help=f"Path to a custom config file. If not specified, defaults to: {default_config_file()}",
    )
    parser.add_argument(
        "-w",
        dest="write_config",
        action="store_true",
        help="Write a config file to the default location.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("file", nargs="?", help="Audio file to transcribe.")
    return parser


def main(argv: Optional[list] = None, pipeline: Optional[TranscriptionPipeline] = None) -> int:
    """
    Run the command line tool

    Args:
        argv: Arguments without the program name, sys.argv[1:] if None
        pipeline: Pipeline to use, built from the environment if None

    Returns:
        Process exit code
    """
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1

    load_dotenv()
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 1

    configure_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        format_type=settings.log_format,
        service_name=settings.service_name,
    )

    try:
        config = resolve_credentials(args.username, args.password, args.config_path)
    except ServiceError as e:
        logger.error(f"Error getting config: {e}")
        return 1

    if pipeline is None:
        pipeline = TranscriptionPipeline(settings=settings)

    with pipeline:
        try:
            config.session_id = pipeline.login(config.credentials)
        except AuthenticationError as e:
            logger.error(f"Unable to login with provided credentials: {e}")
            logger.error(f'Edit "{config.path}" or see -h for usage.')
            return 1
        except ServiceError as e:
            logger.error(f"Unable to login: {e}")
            return 1

        if args.write_config:
            try:
                config.to_file()
            except ServiceError as e:
                logger.error(f"Unable to write config file: {e}")
                return 1

        if not args.file:
            print("No file provided. See -h for usage.", file=sys.stderr)
            return 1

        try:
            audio_file = open(args.file, "rb")
        except OSError as e:
            logger.error(f"Unable to open file: {e}")
            return 1

        with audio_file:
            logger.info(f"Found file: {audio_file.name}")
            logger.info("Uploading...")
            try:
                transcript_url = pipeline.upload(config.session_id, audio_file)
            except ServiceError as e:
                logger.error(f"Upload failed: {e}")
                return 1

    logger.info("Transcript URL:")
    print(transcript_url)
    return 0


def run() -> None:
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()
