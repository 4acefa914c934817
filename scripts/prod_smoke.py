#!/usr/bin/env python3
"""End-to-end smoke checks against a running game account service."""

from __future__ import annotations

import argparse
import random
import string
import time
from dataclasses import dataclass
from typing import Any

import httpx


@dataclass
class SmokeContext:
    base_url: str
    api_prefix: str
    timeout_seconds: float
    verify_tls: bool
    retries: int
    retry_delay_seconds: float


def _random_suffix(length: int = 6) -> str:
    chars = string.ascii_lowercase + string.digits
    return "".join(random.choice(chars) for _ in range(length))


def _api_url(ctx: SmokeContext, path: str) -> str:
    return f"{ctx.base_url}{ctx.api_prefix}{path}"


def _step(name: str) -> None:
    print(f"\n==> {name}")


def _assert_status(resp: httpx.Response, expected: int, step_name: str) -> None:
    if resp.status_code != expected:
        raise RuntimeError(
            f"{step_name} failed: expected HTTP {expected}, got {resp.status_code}. Body: {resp.text}"
        )


def _request(
    client: httpx.Client,
    ctx: SmokeContext,
    method: str,
    url: str,
    *,
    step_name: str,
    expected_status: int = 200,
    **kwargs: Any,
) -> httpx.Response:
    last_error: Exception | None = None
    for attempt in range(ctx.retries + 1):
        try:
            resp = client.request(method, url, **kwargs)
            if resp.status_code in {502, 503, 504} and attempt < ctx.retries:
                print(f"{step_name}: transient HTTP {resp.status_code}, retrying ({attempt + 1}/{ctx.retries})...")
                time.sleep(ctx.retry_delay_seconds)
                continue
            _assert_status(resp, expected_status, step_name)
            return resp
        except (httpx.ConnectTimeout, httpx.ReadTimeout, httpx.ConnectError, httpx.RemoteProtocolError) as exc:
            last_error = exc
            if attempt >= ctx.retries:
                raise RuntimeError(f"{step_name} request failed: {exc}") from exc
            print(f"{step_name}: transient error ({exc}), retrying ({attempt + 1}/{ctx.retries})...")
            time.sleep(ctx.retry_delay_seconds)
        except httpx.HTTPError as exc:
            raise RuntimeError(f"{step_name} request failed: {exc}") from exc
    if last_error:
        raise RuntimeError(f"{step_name} request failed: {last_error}") from last_error
    raise RuntimeError(f"{step_name} failed unexpectedly.")


def _check_health(client: httpx.Client, ctx: SmokeContext) -> None:
    _step("Health checks")
    for path, expected in (("/healthz", "ok"), ("/readyz", "ready")):
        body = _request(client, ctx, "GET", f"{ctx.base_url}{path}", step_name=f"GET {path}").json()
        if body.get("status") != expected:
            raise RuntimeError(f"{path} status mismatch: expected '{expected}', got '{body.get('status')}'.")
        print(f"{path} -> {body.get('status')}")


def _exercise_economy(client: httpx.Client, ctx: SmokeContext, headers: dict) -> None:
    _step("Game profile and wallet")
    _request(client, ctx, "POST", _api_url(ctx, "/game-profile"), step_name="POST /game-profile", expected_status=201, headers=headers)
    _request(client, ctx, "POST", _api_url(ctx, "/wallet"), step_name="POST /wallet", expected_status=201, headers=headers)

    _step("Earn and spend")
    _request(
        client,
        ctx,
        "POST",
        _api_url(ctx, "/transactions/add"),
        step_name="POST /transactions/add",
        headers=headers,
        json={"currency": "coins", "amount": 100, "description": "smoke grant"},
    )
    spent = _request(
        client,
        ctx,
        "POST",
        _api_url(ctx, "/transactions/spend"),
        step_name="POST /transactions/spend",
        headers=headers,
        json={"currency": "coins", "amount": 40, "description": "smoke purchase"},
    ).json()
    if spent.get("new_balance") != 60:
        raise RuntimeError(f"Unexpected coin balance after spend: {spent.get('new_balance')}")

    history = _request(
        client,
        ctx,
        "GET",
        _api_url(ctx, "/transactions/history"),
        step_name="GET /transactions/history",
        headers=headers,
    ).json()
    print(f"Ledger entries: {history['pagination']['total']}")

    _step("Game session")
    session = _request(
        client,
        ctx,
        "POST",
        _api_url(ctx, "/game-sessions"),
        step_name="POST /game-sessions",
        expected_status=201,
        headers=headers,
        json={"platform": "smoke"},
    ).json()
    _request(
        client,
        ctx,
        "POST",
        _api_url(ctx, f"/game-sessions/{session['id']}/heartbeat"),
        step_name="POST /game-sessions/{id}/heartbeat",
        headers=headers,
        json={"session_data": {"smoke": True}},
    )
    _request(
        client,
        ctx,
        "POST",
        _api_url(ctx, f"/game-sessions/{session['id']}/end"),
        step_name="POST /game-sessions/{id}/end",
        headers=headers,
    )
    print(f"Session {session['id']} started and ended")


def run_smoke(
    *,
    base_url: str,
    api_prefix: str,
    username: str | None,
    password: str | None,
    timeout_seconds: float,
    verify_tls: bool,
    retries: int,
    retry_delay_seconds: float,
    check_economy: bool,
    client: httpx.Client | None = None,
) -> None:
    ctx = SmokeContext(
        base_url=base_url.rstrip("/"),
        api_prefix="/" + api_prefix.strip("/"),
        timeout_seconds=timeout_seconds,
        verify_tls=verify_tls,
        retries=retries,
        retry_delay_seconds=retry_delay_seconds,
    )

    if bool(username) != bool(password):
        raise RuntimeError("--username and --password must be provided together.")
    using_existing_user = bool(username)
    if not using_existing_user:
        username = f"smoke_{int(time.time())}_{_random_suffix()}"
        password = f"SmokePass{_random_suffix(4)}!123"

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=ctx.timeout_seconds, verify=ctx.verify_tls)
    try:
        _check_health(client, ctx)

        if not using_existing_user:
            _step("Register throwaway player")
            _request(
                client,
                ctx,
                "POST",
                _api_url(ctx, "/auth/register"),
                step_name="POST /auth/register",
                expected_status=201,
                json={
                    "username": username,
                    "display_name": "Smoke Player",
                    "email": f"{username}@example.com",
                    "password": password,
                },
            )
            print(f"Registered throwaway player: {username}")

        _step("Login and refresh")
        tokens = _request(
            client,
            ctx,
            "POST",
            _api_url(ctx, "/auth/login"),
            step_name="POST /auth/login",
            json={"username": username, "password": password},
        ).json()
        _request(
            client,
            ctx,
            "POST",
            _api_url(ctx, "/auth/refresh"),
            step_name="POST /auth/refresh",
            json={"refresh_token": tokens["refresh_token"]},
        )
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}
        me = _request(client, ctx, "GET", _api_url(ctx, "/users/me"), step_name="GET /users/me", headers=headers).json()
        print(f"Authenticated as {me.get('username')}")

        # Economy writes need a fresh profile, so they only run for throwaway players.
        if check_economy and not using_existing_user:
            _exercise_economy(client, ctx, headers)

        _step("Logout")
        _request(
            client,
            ctx,
            "POST",
            _api_url(ctx, "/auth/logout"),
            step_name="POST /auth/logout",
            json={"refresh_token": tokens["refresh_token"]},
        )
    finally:
        if owns_client:
            client.close()

    print("\nSUCCESS: smoke checks passed.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run game account service smoke checks.")
    parser.add_argument("--base-url", required=True, help="Service base URL, e.g. https://accounts.example.com")
    parser.add_argument("--api-prefix", default="/api/v1", help="API prefix (default: /api/v1)")
    parser.add_argument("--username", default=None, help="Existing player; if omitted, a throwaway player is registered")
    parser.add_argument("--password", default=None, help="Existing player password")
    parser.add_argument("--timeout", type=float, default=20.0, help="HTTP timeout in seconds")
    parser.add_argument("--retries", type=int, default=3, help="Retries for transient network/5xx errors")
    parser.add_argument("--retry-delay", type=float, default=5.0, help="Delay between retries in seconds")
    parser.add_argument("--insecure", action="store_true", help="Disable TLS certificate verification")
    parser.add_argument("--skip-economy", action="store_true", help="Skip wallet, ledger and session checks")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    run_smoke(
        base_url=args.base_url,
        api_prefix=args.api_prefix,
        username=args.username,
        password=args.password,
        timeout_seconds=args.timeout,
        verify_tls=not args.insecure,
        retries=max(0, args.retries),
        retry_delay_seconds=max(0.0, args.retry_delay),
        check_economy=not args.skip_economy,
    )


if __name__ == "__main__":
    main()
