"""HTTP service and CLI entry points."""

from __future__ import annotations

import argparse
from typing import Any

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from .config import load_settings
from .credentials import AUTH_HEADER
from .exceptions import Forbidden, NetSessionException, Unauthenticated
from .provider import IncomingRequest, NetworkSessionProvider, SessionProviderChain
from .rights import RightsCap
from .types import SessionInfo

API_PREFIX = "/api/"


def incoming_request(request: Request) -> IncomingRequest:
    return IncomingRequest(
        headers=dict(request.headers),
        ip=request.client.host if request.client else "",
        https=request.url.scheme == "https",
        is_api=request.url.path.startswith(API_PREFIX),
    )


def create_app(provider: NetworkSessionProvider, chain: SessionProviderChain | None = None) -> FastAPI:
    sessions = chain or SessionProviderChain([provider])
    app = FastAPI()

    @app.exception_handler(NetSessionException)
    async def handle_netsession_error(request: Request, exc: NetSessionException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": type(exc).__name__, "message": exc.message},
        )

    async def current_session(request: Request) -> SessionInfo:
        info = sessions.provide_session_info(incoming_request(request))
        if info is None:
            raise Unauthenticated()
        return info

    @app.get("/healthz")
    async def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/metrics")
    async def metrics() -> dict[str, Any]:
        return provider.metrics.to_dict()

    @app.get(API_PREFIX + "whoami")
    async def whoami(session: SessionInfo = Depends(current_session)) -> dict[str, Any]:
        rights = None
        if isinstance(session.provider, NetworkSessionProvider):
            rights = session.provider.get_allowed_user_rights(session)
        if not RightsCap(rights).is_allowed("read"):
            raise Forbidden(message="Session lacks the read right")
        return {
            "username": session.username,
            "session_id": session.session_id,
            "rights": rights,
        }

    return app


def run_server(args: argparse.Namespace) -> None:
    settings = load_settings(args.config)
    provider = NetworkSessionProvider(settings)
    app = create_app(provider)
    config = uvicorn.Config(
        app,
        host=args.host,
        port=args.port,
        log_level="info",
        proxy_headers=args.forwarded_allow_ips is not None,
        forwarded_allow_ips=args.forwarded_allow_ips,
    )
    server = uvicorn.Server(config)
    server.run()


def run_check(args: argparse.Namespace) -> None:
    settings = load_settings(args.config)
    provider = NetworkSessionProvider(settings)
    headers = {AUTH_HEADER: args.header} if args.header is not None else {}
    request = IncomingRequest(headers=headers, ip=args.ip, https=not args.http)
    try:
        info = provider.provide_session_info(request)
    except NetSessionException as exc:
        code = (exc.details or {}).get("code", type(exc).__name__)
        print("DENY:", code)
        return
    if info is None:
        print("PASS")
        return
    print("ALLOW", info.username, info.session_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="netsession", description="NetworkSession authentication")
    sub = parser.add_subparsers(dest="command")

    serve_cmd = sub.add_parser("serve", help="Run the authenticated API service")
    serve_cmd.add_argument("--config", required=True)
    serve_cmd.add_argument("--host", default="127.0.0.1")
    serve_cmd.add_argument("--port", type=int, default=8788)
    serve_cmd.add_argument("--forwarded-allow-ips", default=None,
                           help="Trust X-Forwarded-* headers from these proxy addresses")

    check_cmd = sub.add_parser("check", help="Evaluate a credential against the configuration")
    check_cmd.add_argument("--config", required=True)
    check_cmd.add_argument("--ip", required=True)
    check_cmd.add_argument("--header", help="Full Authorization header value")
    check_cmd.add_argument("--http", action="store_true", help="Simulate a plain http request")

    return parser


def cli_main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "serve":
        run_server(args)
    elif args.command == "check":
        run_check(args)
    else:
        parser.print_help()
