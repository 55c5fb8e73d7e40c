"""
grokstat command line front end

Reads one JSON document from stdin and prints one JSON envelope to stdout:

    {"hosts": ["1.2.3.4:3979"], "protocol": "openttds"}
    {"show-protocols": true}

Optional keys: ``custom-config-path`` points at a TOML protocol file used
instead of the packaged one.
"""
import argparse
import asyncio
import sys
from typing import Any, Dict, Optional, TextIO

import structlog
from pydantic import ValidationError

from grokstat import __version__
from grokstat.engine.query_executor import QueryExecutor
from grokstat.exceptions import GrokstatError
from grokstat.logging import setup_logging
from grokstat.models import CliRequest, JsonResponse
from grokstat.protocol_loader import load_registry

logger = structlog.get_logger()


def form_response(output: Any = None, error: Optional[Exception] = None) -> JsonResponse:
    """Wrap output or an error in the standard envelope."""
    if error is not None:
        return JsonResponse(
            version=__version__,
            status=500,
            message=getattr(error, "message", None) or str(error),
            output={},
            kind=getattr(error, "kind", "error"),
        )
    return JsonResponse(version=__version__, status=200, message="OK", output=output)


def run(request: CliRequest) -> JsonResponse:
    """Execute a parsed request and build its envelope."""
    try:
        registry = load_registry(request.custom_config_path or None)

        if request.show_protocols:
            return form_response({"protocols": registry.infos()})

        if not request.hosts:
            raise GrokstatError("No hosts specified.")
        if not request.hosts[0]:
            raise GrokstatError("Please specify a valid IP.")
        if not request.protocol:
            raise GrokstatError("Please specify the protocol.")

        executor = QueryExecutor(registry)
        result = asyncio.run(executor.query(request.protocol, request.hosts[0]))
    except GrokstatError as exc:
        logger.info("query_failed", kind=exc.kind, error=exc.message, details=exc.details)
        return form_response(error=exc)

    output: Dict[str, Any] = {}
    if result.servers is not None:
        output["servers"] = result.servers
    else:
        output["server_info"] = result.server_info.model_dump()
    return form_response(output)


def read_request(stream: TextIO) -> CliRequest:
    return CliRequest.model_validate_json(stream.readline() or "{}")


def main(argv: Optional[list] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Query a game server; reads a JSON request from stdin",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for stderr output (default: GROKSTAT_LOG_LEVEL or WARNING)",
    )
    args = parser.parse_args(argv)

    setup_logging("grokstat", args.log_level)

    try:
        request = read_request(sys.stdin)
    except ValidationError as exc:
        response = form_response(error=GrokstatError(f"Invalid request: {exc}"))
    else:
        response = run(request)

    print(response.model_dump_json(exclude_none=True))
    return 0 if response.status == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
