#!/usr/bin/env python3
"""
etcd Client Command Line Entry Point

Usage:
    etcd-client get /foo                           # Read a key
    etcd-client get /dir --recursive --sorted      # List a directory
    etcd-client put /foo bar --ttl 60              # Set a key
    etcd-client put /foo baz --prev-value bar      # Compare-and-swap
    etcd-client post /queue job1                   # In-order key
    etcd-client delete /dir --recursive            # Delete a tree
    etcd-client watch /foo --wait-index 7          # Wait for a change
    etcd-client --peers http://a:4001,http://b:4001 get /foo

Environment Variables:
    ETCD_CLIENT_PEERS       - Comma separated member URLs
    ETCD_CLIENT_TIMEOUT     - Transport timeout in seconds
    ETCD_CLIENT_DEBUG       - Enable debug mode (true/false)
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .client import EtcdClient
from .config.settings import settings
from .errors import EtcdClientError, EtcdError
from .protocol.messages import Response

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="etcd-client",
        description="etcd v2 key-value client",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--peers",
        type=str,
        default=",".join(settings.PEERS),
        help="Comma separated cluster member URLs",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.TIMEOUT,
        help="Transport timeout in seconds",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    get = commands.add_parser("get", help="Read a key")
    get.add_argument("key")
    get.add_argument("--recursive", action="store_true", help="Include the whole subtree")
    get.add_argument("--sorted", action="store_true", help="Sort directory listings")
    get.add_argument("--consistent", action="store_true", help="Read from the leader")

    put = commands.add_parser("put", help="Set a key")
    put.add_argument("key")
    put.add_argument("value", nargs="?", default="")
    put.add_argument("--ttl", type=int, default=0, help="Time-to-live in seconds")
    put.add_argument("--prev-value", help="Only set if the current value matches")
    put.add_argument("--prev-index", type=int, help="Only set if the current index matches")
    put.add_argument(
        "--prev-exist",
        choices=("true", "false"),
        help="Only set if the key does (true) or does not (false) exist",
    )

    post = commands.add_parser("post", help="Create an in-order key")
    post.add_argument("key")
    post.add_argument("value", nargs="?", default="")
    post.add_argument("--ttl", type=int, default=0, help="Time-to-live in seconds")

    delete = commands.add_parser("delete", help="Delete a key")
    delete.add_argument("key")
    delete.add_argument("--recursive", action="store_true", help="Delete the whole subtree")

    watch = commands.add_parser("watch", help="Wait for the next change of a key")
    watch.add_argument("key")
    watch.add_argument("--wait-index", type=int, help="First index to report")
    watch.add_argument("--recursive", action="store_true", help="Watch the whole subtree")

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def _flag_options(args: argparse.Namespace, *names: str) -> dict:
    """Collect store_true flags that were set, keyed by their option names."""
    return {name: True for name in names if getattr(args, name)}


async def run_command(client: EtcdClient, args: argparse.Namespace) -> Response:
    """Execute the parsed command against the cluster."""
    if args.command == "get":
        return await client.get(args.key, _flag_options(args, "recursive", "sorted", "consistent"))

    if args.command == "put":
        options = {}
        if args.prev_value is not None:
            options["prevValue"] = args.prev_value
        if args.prev_index is not None:
            options["prevIndex"] = args.prev_index
        if args.prev_exist is not None:
            options["prevExist"] = args.prev_exist == "true"
        return await client.put(args.key, args.value, args.ttl, options)

    if args.command == "post":
        return await client.post(args.key, args.value, args.ttl)

    if args.command == "delete":
        return await client.delete(args.key, _flag_options(args, "recursive"))

    if args.command == "watch":
        return await client.watch(args.key, wait_index=args.wait_index, recursive=args.recursive)

    raise ValueError(f"Unknown command: {args.command}")


async def _main(args: argparse.Namespace) -> Response:
    peers = [peer for peer in args.peers.split(",") if peer.strip()]
    client_settings = replace(settings, PEERS=peers, TIMEOUT=args.timeout)
    async with EtcdClient(settings=client_settings) as client:
        return await run_command(client, args)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line client."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    try:
        response = asyncio.run(_main(args))
    except EtcdError as e:
        logger.error(f"Request rejected: [{e.error_code}] {e.message} ({e.cause})")
        return 1
    except (EtcdClientError, ValueError) as e:
        logger.error(f"Request failed: {e}")
        return 1

    print(json.dumps(response.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
