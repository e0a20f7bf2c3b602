"""
Main entry point for dashmath.

This module provides the command line interface: running the API
server, listing datasets and running an analysis from the terminal.
"""

import argparse
import json
import logging
import signal
import sys
from typing import List, Optional

from dashmath.system import SystemManager
from dashmath.components.config import ConfigManager, load_config_file
from dashmath.dataset import DatasetManager
from dashmath.utils.general import to_jsonable
from dashmath.utils.errors import DashmathError


def setup_logging(level: str = 'INFO') -> None:
    """
    Set up logging.

    Args:
        level: Logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description='Dashmath analysis engine')

    parser.add_argument(
        '--config',
        help='Path to configuration file'
    )

    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level'
    )

    subparsers = parser.add_subparsers(dest='command')

    serve = subparsers.add_parser('serve', help='Run the API server')
    serve.add_argument('--port', type=int, help='Server port')
    serve.add_argument('--host', help='Server host')

    subparsers.add_parser('datasets', help='List the built-in datasets')

    analyze = subparsers.add_parser('analyze', help='Analyze a built-in dataset')
    analyze.add_argument('dataset', help='Dataset name')
    analyze.add_argument('--features', nargs='+', help='Selected features')
    analyze.add_argument('--target', help='Target column')
    analyze.add_argument('--model', choices=['bayes', 'mindist'], help='Classifier')
    analyze.add_argument('--no-normalize', action='store_true',
                         help='Run PCA on raw instead of standardized features')

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = 'serve'
        args.port = None
        args.host = None

    return args


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Process exit code
    """
    args = parse_args(argv)

    setup_logging(args.log_level)

    overrides = {}

    if args.config:
        overrides.update(load_config_file(args.config))

    if args.command == 'serve':
        if args.port:
            overrides.setdefault('server', {})['port'] = args.port
        if args.host:
            overrides.setdefault('server', {})['host'] = args.host

    config = ConfigManager.get_config(overrides)

    if args.command == 'datasets':
        manager = DatasetManager(config)
        print(json.dumps(to_jsonable(manager.get_summary()), indent=2))
        return 0

    if args.command == 'analyze':
        manager = DatasetManager(config)
        try:
            result = manager.analyze(
                args.dataset,
                features=args.features,
                target=args.target,
                model=args.model,
                normalize=False if args.no_normalize else None
            )
        except DashmathError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(to_jsonable(result), indent=2))
        return 0

    system = SystemManager.start(config)
    signal.signal(signal.SIGTERM, lambda signum, frame: SystemManager.stop())

    try:
        system.wait_for_shutdown()
    except KeyboardInterrupt:
        pass
    finally:
        SystemManager.stop()

    return 0


if __name__ == '__main__':
    sys.exit(main())
