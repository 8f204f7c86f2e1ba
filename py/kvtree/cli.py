"""Command-line entry point for inspecting a kvtree file."""
import argparse
import json
import sys

from .config import StoreConfig, configure_logging
from .db import MemoryDb
from .errors import KvTreeError


def build_parser(config: StoreConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='kvtree', description='Inspect a kvtree storage file')
    parser.add_argument('--file', type=str, default=config.file_path,
                        help='Storage file (default: $KVTREE_FILE)')
    parser.add_argument('--log-level', type=str, default=config.log_level,
                        help='Log level (default: $KVTREE_LOG_LEVEL or WARNING)')

    sub = parser.add_subparsers(dest='command', required=True)

    list_cmd = sub.add_parser('list', help='Load the file and print its keys and values')
    list_cmd.add_argument('--dir', dest='prefix', type=str, default=None,
                          help='Only print this directory key and its subtree')

    sub.add_parser('records', help='Print the raw persisted records')

    purge_cmd = sub.add_parser('purge', help='Remove one key from the file')
    purge_cmd.add_argument('key', type=str)

    return parser


def main(argv=None):
    """Main entry point.

    Returns:
        int: Process exit code
    """
    config = StoreConfig.from_env()
    args = build_parser(config).parse_args(argv)
    configure_logging(args.log_level)

    db = MemoryDb(args.file)

    if args.command == 'list':
        ok, message = db.load_all(False)
        if not ok:
            print(message, file=sys.stderr)
            return 1
        listing = db.list_all() if args.prefix is None else db.list_dir(args.prefix)
        if listing is None:
            print("Key is not specified", file=sys.stderr)
            return 1
        print(json.dumps(listing, indent=2, ensure_ascii=False))
        return 0

    if args.command == 'records':
        try:
            records = db.read_records()
        except (KvTreeError, OSError) as exc:
            print(str(exc), file=sys.stderr)
            return 1
        print(json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False))
        return 0

    ok, message = db.purge(args.key)
    print(message, file=sys.stdout if ok else sys.stderr)
    return 0 if ok else 1


if __name__ == '__main__':
    sys.exit(main())
