"""
Command-line interface for Lambda hosting.
Generates entry-point modules and runs an ASGI app as a custom Lambda runtime.
"""

import argparse
import importlib
import sys

from src.logging.hosting import get_logger, setup_logging


def _parse_target(value: str) -> tuple[str, str, str]:
    """'pkg.module:Class.method' -> ('pkg.module', 'Class', 'method')"""
    module, sep, rest = value.partition(":")
    class_name, dot, method = rest.partition(".")
    if not sep or not dot or not module or not class_name or not method:
        raise argparse.ArgumentTypeError(f"Expected module:Class.method, got {value!r}")
    return module, class_name, method


def import_app(path: str):
    """Import an ASGI app from 'module:attribute'."""
    module_name, sep, attr = path.partition(":")
    if not sep or not attr:
        raise ValueError(f"Expected module:attribute, got {path!r}")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ValueError(f"Module {module_name!r} has no attribute {attr!r}")


def cmd_generate(args):
    """Handle generate command."""
    from src.codegen.bootstrap import LambdaFunctionModel, render_module

    startup_module = startup_class = None
    if args.startup:
        startup_module, _, startup_class = args.startup.partition(":")

    models = [
        LambdaFunctionModel(
            module=module,
            class_name=class_name,
            method_name=method,
            using_dependency_injection=args.di,
            startup_module=startup_module,
            startup_class=startup_class or None,
        )
        for module, class_name, method in args.targets
    ]
    source = render_module(models)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(source)
        print(f"Wrote {args.output}")
    else:
        sys.stdout.write(source)


def cmd_serve(args):
    """Handle serve command."""
    from src.config.settings import get_settings
    from src.hosting.server import LambdaRuntimeSupportServer

    setup_logging()
    app = import_app(args.app)

    kwargs = {}
    if args.event_source:
        kwargs["event_source"] = args.event_source
    server = LambdaRuntimeSupportServer.from_settings(app, get_settings(), **kwargs)
    get_logger().info(f"Serving {args.app} for {server.event_source.value} events")
    server.start()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Host ASGI applications on AWS Lambda",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    gen_parser = subparsers.add_parser("generate", help="Generate a Lambda entry-point module")
    gen_parser.add_argument(
        "targets", nargs="+", type=_parse_target,
        help="Lambda functions as module:Class.method",
    )
    gen_parser.add_argument("--di", action="store_true", help="Resolve the Lambda class from a service container")
    gen_parser.add_argument("--startup", help="Startup hook as module:Class (used with --di)")
    gen_parser.add_argument("-o", "--output", help="Write to file instead of stdout")
    gen_parser.set_defaults(func=cmd_generate)

    serve_parser = subparsers.add_parser("serve", help="Run an ASGI app as a custom Lambda runtime")
    serve_parser.add_argument("app", help="ASGI app as module:attribute")
    serve_parser.add_argument(
        "--event-source",
        help="rest_api | http_api_v2 | application_load_balancer (default: LAMBDA_EVENT_SOURCE)",
    )
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    args.func(args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
