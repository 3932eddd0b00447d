import argparse
import logging
import sys

from cgihttpd.config import Config
from cgihttpd.server import HTTPServer as Server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="A minimal HTTP/1.0 server with CGI support")
    parser.add_argument("port", type=int, nargs="?", help="port to listen on")
    parser.add_argument("--host", "-H", type=str, default="0.0.0.0", help="host to listen on")
    parser.add_argument("--root", "-r", type=str, default=".", help="document root")
    parser.add_argument("--workers", "-w", type=int, default=0,
                        help="worker threads (0 serves one connection at a time)")
    parser.add_argument("--debug", "-D", action="store_true", help="enable debug logging")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.port is None:
        # a missing port is not treated as an error
        parser.print_usage()
        return 0

    config = Config(host=args.host, port=args.port, root=args.root, workers=args.workers, debug=args.debug)
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server = Server(config)
    try:
        server.run()
    except KeyboardInterrupt:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
