from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask the PizzaWorld assistant a question from the shell.")
    parser.add_argument(
        "--role",
        required=True,
        choices=["HQ_ADMIN", "STATE_MANAGER", "STORE_MANAGER"],
        help="Role whose data scope the answer is limited to.",
    )
    parser.add_argument("--state", default=None, help="State abbreviation (STATE_MANAGER only).")
    parser.add_argument("--store", default=None, help="Store id (STORE_MANAGER only).")
    parser.add_argument("--session-id", default=None, help="Reuse an existing session id.")
    parser.add_argument(
        "--insights",
        action="store_true",
        help="Print role insights instead of running a chat turn.",
    )
    parser.add_argument("message", nargs="?", default=None, help="Question to ask.")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Environment file path (default: .env).",
    )
    return parser.parse_args()


def run(args: argparse.Namespace) -> Dict[str, Any]:
    from pizzaworld_ai.api.dependencies import get_assistant_service
    from pizzaworld_ai.core.config import get_settings
    from pizzaworld_ai.core.logging import configure_logging
    from pizzaworld_ai.models.scope import parse_role_scope

    configure_logging(get_settings().log_level)
    scope = parse_role_scope(args.role, state_abbr=args.state, store_id=args.store)
    service = get_assistant_service()
    if args.insights:
        return {"insights": [insight.model_dump(by_alias=True) for insight in service.insights(scope)]}

    if not args.message or not args.message.strip():
        raise SystemExit("A message is required unless --insights is given")
    reply = service.chat(args.session_id, args.message, scope)
    return {
        "sessionId": reply.session_id,
        "category": reply.category,
        "source": reply.source,
        "fallbackReason": reply.fallback_reason,
        "message": reply.answer,
    }


def main() -> None:
    args = parse_args()
    load_env_file(args.env_file)
    result = run(args)
    print(json.dumps(result, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
