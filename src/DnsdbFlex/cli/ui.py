"""Click CLI interface definitions.

Defines the command-line interface structure, turns options into a query
descriptor plus config overrides, and routes commands to their runners.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv

from DnsdbFlex import SWCLIENT, __version__
from DnsdbFlex.cli.runner import CommandRunner
from DnsdbFlex.config import load_config
from DnsdbFlex.core.query import (
    QueryDescriptor,
    ReturnMode,
    SearchMethod,
    SearchTarget,
    check_descriptor,
)
from DnsdbFlex.core.timefmt import parse_timestamp

_TARGETS = {
    "rrnames": SearchTarget.RRNAMES,
    "n": SearchTarget.RRNAMES,
    "rdata": SearchTarget.RDATA,
    "d": SearchTarget.RDATA,
}
_MODES = {"terse": ReturnMode.TERSE, "t": ReturnMode.TERSE}


@click.group(help="dnsdbflex: regex and glob searches against DNSDB Flex.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    default=None,
    help="Path to YAML config file.",
)
@click.version_option(__version__, prog_name=SWCLIENT)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """CLI entry group.

    Loads environment variables from .env file; the config file itself is
    read by each command once its overrides are known.

    Args:
        ctx: Click context.
        config_path: Optional path to YAML config file.
    """
    load_dotenv()
    ctx.obj = config_path


@cli.command("search")
@click.option("--regex", help="Search with a regular expression.")
@click.option("--glob", "glob_", help="Search with a glob expression.")
@click.option("--exclude", help="Exclude matches of this expression (same method).")
@click.option("--force", is_flag=True, help="Allow globs with a suspicious ending or non-ASCII input.")
@click.option("--mode", default="terse", help="What to return: terse|t.")
@click.option("-s", "--search", "what", default="rrnames", help="rrnames|n or rdata|d.")
@click.option("-t", "--rrtype", help="Restrict results to this rrtype.")
@click.option("-A", "--after", help="Only tuples seen after this time.")
@click.option("-B", "--before", help="Only tuples seen before this time.")
@click.option("-c", "--complete", is_flag=True, help="Tuples must lie entirely inside -A/-B.")
@click.option("-l", "--limit", "query_limit", type=int, default=None, help="Server-side result limit.")
@click.option("-L", "--output-limit", type=int, default=None, help="Client-side output cap.")
@click.option("-O", "--offset", type=int, default=0, help="Skip this many server results.")
@click.option("-j", "json_out", is_flag=True, help="Output JSON lines (default).")
@click.option("-F", "batch_out", is_flag=True, help="Output batch lines.")
@click.option("-T", "dedup_out", is_flag=True, help="Output batch lines, deduplicated by rrtype.")
@click.option("-u", "--system", help="pDNS system to query.")
@click.option("-U", "--insecure", is_flag=True, help="Do not verify TLS certificates.")
@click.option("-4", "ipv4", is_flag=True, help="Connect over IPv4 only.")
@click.option("-6", "ipv6", is_flag=True, help="Connect over IPv6 only.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress warnings.")
@click.option("-d", "--debug", count=True, help="Debug output; repeat for more.")
@click.option("--timeout", type=float, default=None, help="Total time allowed per transfer, in seconds.")
@click.pass_context
def search_cmd(ctx: click.Context, **options: Any) -> None:
    """Run one Flex search and print the results to stdout.

    Args:
        ctx: Click context.
        **options: Parsed command-line options.

    Raises:
        click.UsageError: When the options do not form a valid query.
        click.Abort: When the search fails.
    """
    descriptor = build_descriptor(options)
    try:
        config = load_config(ctx.obj, build_overrides(options))
    except (TypeError, ValueError) as e:
        raise click.UsageError(str(e)) from e

    runner = CommandRunner(config, verbosity=options["debug"])
    ctx.exit(runner.run_search(descriptor, action=ctx.command.name))


def build_descriptor(options: dict[str, Any]) -> QueryDescriptor:
    """Turn search options into a validated query descriptor.

    Raises:
        click.UsageError: When the options do not form a valid query.
    """
    regex, glob_ = options.get("regex"), options.get("glob_")
    if regex is not None and glob_ is not None:
        raise click.UsageError("Cannot specify --glob or --regex more than once")
    if regex is None and glob_ is None:
        raise click.UsageError("Need to provide a --regex or --glob option and its argument")

    target = _TARGETS.get(options.get("what") or "rrnames")
    if target is None:
        raise click.UsageError("Illegal what to search, must be 'rrnames'|'n' or 'rdata'|'d'")
    mode = _MODES.get(options.get("mode") or "terse")
    if mode is None:
        raise click.UsageError("Illegal mode value, must be 'terse'|'t'")

    query_limit = options.get("query_limit")
    if query_limit is not None and query_limit < 0:
        raise click.UsageError("-l must be zero or positive")
    output_limit = options.get("output_limit")
    if output_limit is not None and output_limit <= 0:
        raise click.UsageError("-L must be positive")
    offset = options.get("offset") or 0
    if offset < 0:
        raise click.UsageError("-O must be zero or positive")

    descriptor = QueryDescriptor(
        method=SearchMethod.REGEX if regex is not None else SearchMethod.GLOB,
        value=regex if regex is not None else glob_,
        target=target,
        mode=mode,
        exclude=options.get("exclude"),
        rrtype=options.get("rrtype"),
        after=_timestamp(options.get("after"), "-A"),
        before=_timestamp(options.get("before"), "-B"),
        complete=bool(options.get("complete")),
        query_limit=-1 if query_limit is None else query_limit,
        output_limit=-1 if output_limit is None else output_limit,
        offset=offset,
    )
    try:
        check_descriptor(descriptor, force=bool(options.get("force")))
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    return descriptor


def build_overrides(options: dict[str, Any]) -> dict[str, Any]:
    """Collect config overrides from command-line options.

    Raises:
        click.UsageError: When conflicting flags are combined.
    """
    server: dict[str, Any] = {}
    if options.get("system"):
        server["system"] = options["system"]
    if options.get("insecure"):
        server["verify_tls"] = False
    if options.get("ipv4") and options.get("ipv6"):
        raise click.UsageError("-4 and -6 are mutually exclusive")
    if options.get("ipv4"):
        server["ip_family"] = "ipv4"
    elif options.get("ipv6"):
        server["ip_family"] = "ipv6"
    if options.get("timeout") is not None:
        server["timeout"] = options["timeout"]

    output: dict[str, Any] = {}
    formats = [
        name
        for flag, name in (("json_out", "json"), ("batch_out", "batch"), ("dedup_out", "batch-dedup"))
        if options.get(flag)
    ]
    if len(formats) > 1:
        raise click.UsageError("only one of -j, -F and -T may be given")
    if formats:
        output["format"] = formats[0]
    if options.get("quiet"):
        output["quiet"] = True

    overrides: dict[str, Any] = {}
    if server:
        overrides["server"] = server
    if output:
        overrides["output"] = output
    return overrides


def _timestamp(value: str | None, flag: str) -> int | None:
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise click.UsageError(f"bad {flag} timestamp") from e
