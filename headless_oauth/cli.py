"""
Command line tools for the OAuth bundle.

Usage:
    headless-oauth check-providers
    headless-oauth serve [--host HOST] [--port PORT]
"""
import argparse
import sys
from typing import Optional, Sequence

from headless_oauth.services.health import ProviderHealthChecker, ProviderHealthStatus

HEADERS = ("Provider", "Status", "Credentials", "Issues")


def _format_credentials(status: ProviderHealthStatus) -> str:
    if not status.credentials or not status.enabled:
        return "-"
    return ", ".join(f"{name}: {'OK' if ok else 'Missing'}" for name, ok in status.credentials.items())


def render_table(statuses: Sequence[ProviderHealthStatus]) -> str:
    rows = [
        (
            status.name[:1].upper() + status.name[1:],
            "Enabled" if status.enabled else "Disabled",
            _format_credentials(status),
            ", ".join(status.issues) or "None",
        )
        for status in statuses
    ]
    widths = [max(len(row[i]) for row in (HEADERS, *rows)) for i in range(len(HEADERS))]
    line = "+-" + "-+-".join("-" * w for w in widths) + "-+"

    def fmt(row):
        return "| " + " | ".join(cell.ljust(w) for cell, w in zip(row, widths)) + " |"

    return "\n".join([line, fmt(HEADERS), line, *(fmt(row) for row in rows), line])


def check_providers(checker: ProviderHealthChecker, out=None) -> int:
    """Print the provider health table; 0 when everything enabled is configured."""
    out = out or sys.stdout
    print("OAuth Provider Health Check", file=out)
    statuses = checker.check_all()
    if not statuses:
        print("[WARNING] No OAuth providers are registered.", file=out)
        return 0
    print(render_table(statuses), file=out)
    if all(status.is_healthy() for status in statuses):
        print("[OK] All enabled OAuth providers are properly configured.", file=out)
        return 0
    print("[ERROR] Some OAuth providers have configuration issues.", file=out)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="headless-oauth", description="OAuth bundle tools")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("check-providers", help="Check the health and configuration of OAuth providers")
    serve = sub.add_parser("serve", help="Run the standalone OAuth API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    if args.command == "check-providers":
        from headless_oauth.bundle import HeadlessOAuthBundle
        from headless_oauth.core.config import get_settings
        from headless_oauth.core.logger import init_logging

        settings = get_settings()
        init_logging(app_settings=settings)
        return check_providers(HeadlessOAuthBundle(settings).health_checker)
    if args.command == "serve":
        import uvicorn

        uvicorn.run("headless_oauth.api.main:create_app", factory=True, host=args.host, port=args.port)
        return 0
    return 2


if __name__ == "__main__":
    sys.exit(main())
