"""CLI entry point: run `amdlc [options] <input> <output>` or `python -m amdlc ...`."""

import logging
import sys
from typing import List, Optional


def _expose_setting(value: str):
    if value == "all":
        return True
    if value == "none":
        return False
    if value == "public":
        return "public"
    return [item.strip() for item in value.split(",") if item.strip()]


def _derived_outputs(output: str):
    base = output[:-3] if output.endswith(".js") else output
    return base + ".min.js", base + ".dev.js"


def main(argv: Optional[List[str]] = None) -> int:
    import argparse
    from .compiler.driver import BundleDriver
    from .compiler.options import BuildOptions, load_options_file
    from .shared.errors import BundleError, Reporter

    parser = argparse.ArgumentParser(prog="amdlc", description="Bundle AMD style modules into a single file.")
    parser.add_argument("input", help="Entry module file or glob pattern")
    parser.add_argument("output", help="Output file for the source bundle (.min.js and .dev.js are derived)")
    parser.add_argument("--basedir", required=True, help="Directory module ids are resolved against")
    parser.add_argument("--root-ns", dest="root_ns", help="Root namespace stripped from ids when resolving paths")
    parser.add_argument("--expose", default="public", help="public, all, none or a comma separated list of ids (default: public)")
    parser.add_argument("--version-string", dest="version", help="Value for @@version@@ placeholders")
    parser.add_argument("--release-date", dest="release_date", help="Value for @@releaseDate@@ placeholders")
    parser.add_argument("--force", action="store_true", help="Rebuild even when nothing changed")
    parser.add_argument("--no-compress", dest="compress", action="store_false", help="Beautify the .min.js output")
    parser.add_argument("--config", help="JSON file with additional build options")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debug output")
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    minified, dev = _derived_outputs(args.output)
    reporter = Reporter()
    try:
        settings = load_options_file(args.config) if args.config else {}
        settings.update({
            "from": args.input,
            "baseDir": args.basedir,
            "expose": _expose_setting(args.expose),
            "compress": args.compress,
            "force": args.force,
            "outputSource": args.output,
            "outputMinified": minified,
            "outputDev": dev,
        })
        if args.root_ns:
            settings["rootNS"] = args.root_ns
        if args.version:
            settings["version"] = args.version
        if args.release_date:
            settings["releaseDate"] = args.release_date
        options = BuildOptions.from_dict(settings)
    except BundleError as e:
        reporter.report_exception(e)
        reporter.print_diagnostics()
        return 1

    result = BundleDriver().build(options, reporter)
    if not result.success:
        reporter.print_diagnostics()
        return 1
    if result.skipped:
        print("amdlc: build is up to date", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
