#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import signal
from pathlib import Path
from types import FrameType

from alae_site.server.app import create_server
from alae_site.server.config import SiteConfig


def build_parser(defaults: SiteConfig) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Serve the site pages with security middleware.")
    p.add_argument("--host", default=defaults.host)
    p.add_argument("--port", type=int, default=defaults.port)
    p.add_argument("--views", type=Path, default=defaults.views_dir)
    p.add_argument("--public", type=Path, default=defaults.public_dir)
    p.add_argument("--production", action="store_true", default=defaults.production)
    p.add_argument(
        "--dev",
        action="store_true",
        help="Development routing: unknown pages redirect to /.",
    )
    p.add_argument("--log-level", default="INFO")
    return p


def main(argv: list[str] | None = None) -> int:
    root = Path.cwd().resolve()
    defaults = SiteConfig.from_env(root)
    args = build_parser(defaults).parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    views = (root / args.views).resolve() if not args.views.is_absolute() else args.views
    public = (root / args.public).resolve() if not args.public.is_absolute() else args.public
    cfg = defaults.with_overrides(
        host=args.host,
        port=args.port,
        views_dir=views,
        public_dir=public,
        production=args.production,
        dev_mode=args.dev,
    )

    server = create_server(cfg)

    def _stop(signum: int, frame: FrameType | None) -> None:
        print(f"received {signal.Signals(signum).name}, shutting down")
        raise KeyboardInterrupt

    signal.signal(signal.SIGTERM, _stop)

    url = f"http://{cfg.host}:{server.server_address[1]}/"
    print(f"site server: {url}")
    print(f"environment: {cfg.environment}")
    print(f"serving views: {cfg.views_dir}")
    print(f"serving static: {cfg.public_dir}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
