import argparse
import json
import logging
import sys

from tapo_cam import CameraClient, config
from tapo_cam.protocol.errors import TapoError

logger = logging.getLogger("TapoClient")


def setup_logging(verbose=False):
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def build_parser():
    parser = argparse.ArgumentParser(description="Send control commands to a Tapo camera")
    parser.add_argument("--host", default=config.CAM_HOST, help="Camera IP or hostname (TAPO_HOST)")
    parser.add_argument("--username", default=config.DEFAULT_USERNAME,
                        help="Camera account (TAPO_DEFAULT_USERNAME)")
    parser.add_argument("--password", default=config.DEFAULT_PASSWORD,
                        help="Camera password (TAPO_DEFAULT_PASSWORD)")
    parser.add_argument("--timeout", type=float, default=config.REQUEST_TIMEOUT,
                        help="Per-request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("method", nargs="?", help="Method name, e.g. getDeviceInfo")
    parser.add_argument("--params", help="JSON object passed as the method params")
    parser.add_argument("--direct", help="Raw JSON payload sent without the multipleRequest wrapper")
    parser.add_argument("--auth-only", action="store_true", help="Only log in and report the mode")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.host or not args.username:
        parser.error("--host and --username are required (or set TAPO_HOST / TAPO_DEFAULT_USERNAME)")
    if not args.auth_only and not args.method and not args.direct:
        parser.error("give a method, --direct or --auth-only")

    try:
        params = json.loads(args.params) if args.params else None
        payload = json.loads(args.direct) if args.direct else None
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON argument: {e}")
        return 1

    client = CameraClient(args.host, args.username, args.password, timeout=args.timeout)

    try:
        if args.auth_only:
            client.authenticate()
            mode = "secure" if client.is_secure else "legacy"
            print(json.dumps({"authenticated": client.is_authenticated(), "mode": mode}))
            return 0

        if payload is not None:
            result = client.execute_direct(payload)
        else:
            result = client.execute(args.method, params)
    except TapoError as e:
        logger.error(f"Command failed: {e}")
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
