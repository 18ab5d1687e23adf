#!/usr/bin/env python3

import sys
import json
import shlex
from typing import List, Optional

from pydantic import ValidationError

from models.request import TransactionRequest, status_response, sum_response
from services.result import ErrorKind, Result
from tools.transactions import get_root_rollups, get_type_summary
from logger import get_logger

logger = get_logger()

EXIT_CODES = {
    ErrorKind.NOT_FOUND: 3,
    ErrorKind.INVALID_PARENT: 4,
}

SHELL_HELP = """Commands:
  put ID AMOUNT TYPE [PARENT_ID]   Create or update a transaction
  get ID                           Show a transaction
  type TYPE                        List transaction IDs with a type
  sum ID                           Sum a transaction and its descendants
  help                             Show this help
  quit                             Leave the shell"""


def exit_code_for(kind: ErrorKind) -> int:
    """Map an error kind to the process exit code."""
    return EXIT_CODES.get(kind, 1)


def _fail(result: Result):
    logger.error(result.error.message)
    sys.exit(exit_code_for(result.kind))


def cmd_show(args, services):
    """Show a single transaction as JSON."""
    result = services.transactions.get_by_id(args.transaction_id)
    if not result.ok:
        _fail(result)
    print(json.dumps(result.value.to_dict()))


def cmd_types(args, services):
    """List the IDs of every transaction with a given type."""
    print(json.dumps(services.transactions.ids_by_type(args.type)))


def cmd_sum(args, services):
    """Sum a transaction and all of its descendants."""
    result = services.transactions.calculate_sum(args.transaction_id)
    if not result.ok:
        _fail(result)
    print(json.dumps(sum_response(result.value)))


def cmd_ancestors(args, services):
    """Show the ancestor chain of a transaction, nearest parent first."""
    result = services.transactions.get_ancestors(args.transaction_id)
    if not result.ok:
        _fail(result)

    if not result.value:
        logger.info(f"Transaction {args.transaction_id} is a root.")
        return

    for ancestor in result.value:
        logger.info(f"{ancestor.id} [{ancestor.type}] {ancestor.amount}")


def cmd_tree(args, services):
    """Show a transaction and its descendants as an indented tree."""
    result = services.transactions.get_by_id(args.transaction_id)
    if not result.ok:
        _fail(result)

    for line in render_tree(services, args.transaction_id):
        logger.info(line)


def render_tree(services, transaction_id: int) -> List[str]:
    """Render the subtree rooted at ``transaction_id`` as indented lines.

    Children are listed in ID order under their parent. A node reached twice
    is only rendered the first time.
    """
    lines = []
    visited = set()
    root = services.transactions.get_by_id(transaction_id).unwrap()
    stack = [(root, 0)]
    while stack:
        transaction, depth = stack.pop()
        if transaction.id in visited:
            continue
        visited.add(transaction.id)
        lines.append(
            f"{'  ' * depth}{transaction.id} [{transaction.type}] {transaction.amount}"
        )
        children = services.transactions.get_children(transaction.id)
        for child in reversed(children):
            stack.append((child, depth + 1))
    return lines


def cmd_check(args, services):
    """Check the integrity of the loaded transactions."""
    issues = services.check.check()

    if not issues:
        logger.info("✓ No integrity issues found.")
        return

    logger.info(f"\nFound {len(issues)} issue(s):")
    logger.info("=" * 80)
    for issue in issues:
        logger.info(f"[{issue.severity}] {issue.category}: {issue.message}")
    sys.exit(1)


def cmd_summary(args, services):
    """Show totals by type and the rollup of every root transaction."""
    summary = get_type_summary(services)
    if not summary:
        logger.info("No transactions loaded.")
        return

    logger.info("\nBy type:")
    logger.info("=" * 80)
    for type, data in summary.items():
        logger.info(f"{type:<30} {data['count']:>6}  {data['total']:>16}")

    logger.info("\nRoot rollups:")
    logger.info("=" * 80)
    for root_id, total in get_root_rollups(services).items():
        logger.info(f"{root_id:<30} {total:>24}")


def execute_shell_command(services, line: str) -> Optional[str]:
    """Run one shell command and return the text to show.

    Returns:
        Output text, or None when the shell should exit.
    """
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        return f"error: {e}"

    if not tokens:
        return ""

    command, params = tokens[0].lower(), tokens[1:]

    if command in ("quit", "exit"):
        return None
    if command == "help":
        return SHELL_HELP

    try:
        if command == "put":
            if len(params) not in (3, 4):
                return "usage: put ID AMOUNT TYPE [PARENT_ID]"
            request = TransactionRequest(
                amount=params[1],
                type=params[2],
                parent_id=int(params[3]) if len(params) == 4 else None,
            )
            result = services.transactions.create_or_update(
                int(params[0]), request.amount, request.type, request.parent_id
            )
            return _format_result(result, lambda value: status_response())

        if command == "get":
            if len(params) != 1:
                return "usage: get ID"
            result = services.transactions.get_by_id(int(params[0]))
            return _format_result(result, lambda value: value.to_dict())

        if command == "type":
            if len(params) != 1:
                return "usage: type TYPE"
            return json.dumps(services.transactions.ids_by_type(params[0]))

        if command == "sum":
            if len(params) != 1:
                return "usage: sum ID"
            result = services.transactions.calculate_sum(int(params[0]))
            return _format_result(result, sum_response)
    except ValidationError as e:
        messages = "; ".join(error["msg"] for error in e.errors())
        return f"error: {messages}"
    except ValueError as e:
        return f"error: {e}"

    return f"error: unknown command '{command}' (try 'help')"


def _format_result(result: Result, shape) -> str:
    if not result.ok:
        return f"error ({result.kind.value}): {result.error.message}"
    return json.dumps(shape(result.value))


def cmd_shell(args, services):
    """Run an interactive shell against the loaded transactions."""
    print("\nTransaction Shell")
    print("=" * 80)
    print(SHELL_HELP)

    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            break

        output = execute_shell_command(services, line)
        if output is None:
            break
        if output:
            print(output)


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Query and manage transactions",
        description="Query the transaction hierarchy loaded from a ledger file",
    )

    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    # transactions show
    show_parser = transactions_subparsers.add_parser(
        "show", help="Show a transaction by ID"
    )
    show_parser.add_argument("transaction_id", type=int, help="Transaction ID")
    show_parser.set_defaults(func=cmd_show)

    # transactions types
    types_parser = transactions_subparsers.add_parser(
        "types", help="List transaction IDs with a given type"
    )
    types_parser.add_argument("type", help="Transaction type (e.g., cars)")
    types_parser.set_defaults(func=cmd_types)

    # transactions sum
    sum_parser = transactions_subparsers.add_parser(
        "sum",
        help="Sum a transaction and all of its descendants",
        epilog="""
Examples:
  python -m cli --ledger ledger.yaml transactions sum 10
        """,
    )
    sum_parser.add_argument("transaction_id", type=int, help="Transaction ID")
    sum_parser.set_defaults(func=cmd_sum)

    # transactions tree
    tree_parser = transactions_subparsers.add_parser(
        "tree", help="Show a transaction and its descendants"
    )
    tree_parser.add_argument("transaction_id", type=int, help="Transaction ID")
    tree_parser.set_defaults(func=cmd_tree)

    # transactions ancestors
    ancestors_parser = transactions_subparsers.add_parser(
        "ancestors", help="Show the ancestor chain of a transaction"
    )
    ancestors_parser.add_argument("transaction_id", type=int, help="Transaction ID")
    ancestors_parser.set_defaults(func=cmd_ancestors)

    # transactions check
    check_parser = transactions_subparsers.add_parser(
        "check", help="Check hierarchy and index integrity"
    )
    check_parser.set_defaults(func=cmd_check)

    # transactions summary
    summary_parser = transactions_subparsers.add_parser(
        "summary", help="Show totals by type and root rollups"
    )
    summary_parser.set_defaults(func=cmd_summary)

    # transactions shell
    shell_parser = transactions_subparsers.add_parser(
        "shell", help="Interactive shell for writes and queries"
    )
    shell_parser.set_defaults(func=cmd_shell)
