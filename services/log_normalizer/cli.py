"""
Line-oriented front end.

Reads raw records from a file or stdin, writes one JSON event per line and
reports success/error/total counts on stderr. Events can also be forwarded to
a SIEM over syslog and/or HTTP.
"""
import sys
from pathlib import Path
from typing import List, Optional

import typer

from common.logging_config import setup_logging, log_audit_event
from forwarders import ForwardError, HTTPForwarder, SyslogForwarder
from log_normalizer.normalizers import NormalizerError, event_to_json, process

app = typer.Typer(add_completion=False, help="Normalise security logs into canonical events.")


def _parse_headers(values: List[str]) -> dict:
    headers = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--http-header")
        headers[key.strip()] = value.strip()
    return headers


def _open_input(input_file: Optional[Path]):
    # Undecodable bytes are replaced with U+FFFD
    if input_file:
        return open(input_file, "r", encoding="utf-8", errors="replace")
    if hasattr(sys.stdin, "reconfigure"):
        sys.stdin.reconfigure(errors="replace")
    return sys.stdin


def _build_forwarders(syslog_host, syslog_port, syslog_protocol, http_url, http_token, http_headers) -> list:
    forwarders = []
    if syslog_host:
        forwarders.append(SyslogForwarder(syslog_host, syslog_port, syslog_protocol))
    if http_url:
        forwarders.append(HTTPForwarder(http_url, http_token or "", _parse_headers(http_headers)))
    return forwarders


@app.command()
def main(
    input_file: Optional[Path] = typer.Option(
        None, "--input", "-i", exists=True, dir_okay=False, readable=True,
        help="Input log file (default: stdin)",
    ),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", dir_okay=False, help="Output file for events (default: stdout)",
    ),
    indent: Optional[int] = typer.Option(None, "--indent", help="Pretty-print events with this indent"),
    syslog_host: Optional[str] = typer.Option(None, "--syslog-host", envvar="SIEM_SYSLOG_HOST"),
    syslog_port: int = typer.Option(514, "--syslog-port", envvar="SIEM_SYSLOG_PORT"),
    syslog_protocol: str = typer.Option("udp", "--syslog-protocol", envvar="SIEM_SYSLOG_PROTOCOL"),
    http_url: Optional[str] = typer.Option(None, "--http-url", envvar="SIEM_HTTP_URL"),
    http_token: Optional[str] = typer.Option(None, "--http-token", envvar="SIEM_HTTP_TOKEN"),
    http_header: List[str] = typer.Option([], "--http-header", help="Extra HTTP header KEY=VALUE"),
):
    logger = setup_logging('log_normalizer.cli', stream=sys.stderr)

    try:
        forwarders = _build_forwarders(
            syslog_host, syslog_port, syslog_protocol, http_url, http_token, http_header
        )
    except (ForwardError, ValueError) as e:
        typer.echo(f"Error configuring forwarder: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        source = _open_input(input_file)
    except OSError as e:
        for fwd in forwarders:
            fwd.close()
        typer.echo(f"Error opening input file: {e}", err=True)
        raise typer.Exit(code=1)
    try:
        out = open(output_file, "w", encoding="utf-8") if output_file else sys.stdout
    except OSError as e:
        if input_file:
            source.close()
        for fwd in forwarders:
            fwd.close()
        typer.echo(f"Error creating output file: {e}", err=True)
        raise typer.Exit(code=1)

    line_num = success_count = error_count = 0
    try:
        for line in source:
            line_num += 1
            raw = line.rstrip("\r\n")
            if not raw.strip():
                continue

            try:
                event = process(raw)
            except NormalizerError as e:
                typer.echo(f"line {line_num}: {e}", err=True)
                error_count += 1
                continue

            out.write(event_to_json(event, indent=indent) + "\n")

            failed = False
            for fwd in forwarders:
                try:
                    fwd.forward(event)
                except ForwardError as e:
                    typer.echo(f"line {line_num}: forward failed: {e}", err=True)
                    failed = True
            if failed:
                error_count += 1
            else:
                success_count += 1
    except OSError as e:
        typer.echo(f"Error reading input: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        if input_file:
            source.close()
        if output_file:
            out.close()
        else:
            out.flush()
        for fwd in forwarders:
            fwd.close()

    typer.echo("\nProcessing complete:", err=True)
    typer.echo(f"  Success: {success_count}", err=True)
    typer.echo(f"  Errors: {error_count}", err=True)
    typer.echo(f"  Total lines: {line_num}", err=True)

    log_audit_event(logger, 'file_processed',
                    input=str(input_file) if input_file else "stdin",
                    success=success_count,
                    errors=error_count,
                    total=line_num,
                    forwarders=len(forwarders))


if __name__ == "__main__":
    app()
