import argparse
import asyncio
import sys
from pathlib import Path
from sentrydigest.config import settings
from sentrydigest.workflows.pipeline import pipeline
from sentrydigest.services.logger import logger, setup_logging

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Build the SentryDigest security news page.")
    parser.add_argument("--config", type=Path, default=None, help=f"Run configuration JSON (default: {settings.CONFIG_PATH})")
    parser.add_argument("--output-dir", type=Path, default=None, help=f"Where index.html and news-data.json go (default: {settings.OUTPUT_DIR})")
    return parser.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    settings.ensure_dirs()
    setup_logging(settings)
    try:
        asyncio.run(pipeline.run_pipeline(config_path=args.config, output_dir=args.output_dir))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
