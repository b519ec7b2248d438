import argparse
import sys
from pathlib import Path

from pagesmith import __version__
import pagesmith.config as cfg_module
from pagesmith.errors import PagesmithError
from pagesmith.generator import SiteGenerator, create_project
from pagesmith.models import Session
from pagesmith.preview.server import PreviewServer
from pagesmith.preview.session import SessionController


def _new(args, cfg, root: Path):
    created = create_project(root)
    for path in created:
        print(f"  created {path.relative_to(root)}")
    print("New website created. Run 'pagesmith run' to preview it.")


def _generate(args, cfg, root: Path):
    generator = SiteGenerator(root, cfg)
    print("Generating site ...", end=" ", flush=True)
    generator.generate()
    print("done.")
    print(f"Site generated in '{cfg_module.get_output_dir(cfg)}/'.")


def _run(args, cfg, root: Path):
    session = Session(
        output_dir=cfg_module.get_output_dir(cfg),
        port=args.port if args.port is not None else cfg_module.get_port(cfg),
        watch_path=args.live_reload,
    )
    controller = SessionController(
        root,
        SiteGenerator(root, cfg),
        supervisor=PreviewServer(bind=cfg_module.get_bind(cfg)),
        interval=cfg_module.get_interval(cfg),
        ready_timeout=cfg_module.get_ready_timeout(cfg),
    )
    controller.run(session)


_COMMANDS = {
    "new": _new,
    "generate": _generate,
    "run": _run,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagesmith",
        description="Generate, preview and live reload a static website",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config", default="config.toml", metavar="PATH",
        help="Path to config.toml (default: config.toml)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # new
    sp_new = subparsers.add_parser("new", help="Set up a new website in the current folder")
    sp_new.add_argument(
        "kind", nargs="?", default="website", choices=["website"],
        help="Kind of project to create (default: website)",
    )

    # generate
    subparsers.add_parser("generate", help="Generate the website in the current folder")

    # run (generate + serve)
    sp_run = subparsers.add_parser(
        "run", help="Generate the website and serve it on localhost until ENTER is pressed",
    )
    sp_run.add_argument(
        "-p", "--port", type=int, metavar="N",
        help="Port to serve on (default: [preview] port in config.toml, or 8000)",
    )
    sp_run.add_argument(
        "--live-reload", metavar="PATH",
        help="Regenerate the website whenever files under this source folder change",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    config_path = Path(args.config)
    root = config_path.resolve().parent
    try:
        cfg = cfg_module.load(config_path)
        _COMMANDS[args.command](args, cfg, root)
    except PagesmithError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
