"""CLI Main Entry Point"""

import logging
import sys

from pushscript.config import Config, load_config, load_environment, resolve_provider_and_model
from pushscript.git import DiffProcessor, GitError, GitRepo, ProcessedDiff, StagedChanges
from pushscript.llm import LLMError, get_client, validate_commit_message
from pushscript.output import (
    Spinner, bold, colorize_commit_type, dim, info,
    print_error, print_info, print_rule, print_success, print_warning,
)
from pushscript.prompts import PromptBuilder, PromptConfig

from pushscript.cli.args import parse_args
from pushscript.cli.commands import (
    display_config, run_init_config, run_install_completion, run_patterns, run_scan, scan_and_report,
)
from pushscript.cli.utils import clean_commit_message, confirm, simple_commit_message

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 2
EXIT_INTERRUPTED = 130

MAX_FILES_SHOWN = 8


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _display_file_list(processed: ProcessedDiff, max_shown: int = MAX_FILES_SHOWN) -> None:
    """Show which files go into the message, collapsing long lists."""
    if not processed.file_details:
        return
    print(bold("Staged changes:"))
    shown = processed.file_details[:max_shown]
    remaining = len(processed.file_details) - len(shown)
    for path, additions, deletions in shown:
        print(dim(f"  {path} (+{additions} -{deletions})"))
    if remaining > 0:
        print(dim(f"  ... and {remaining} more files"))
    if processed.filtered_files > 0:
        print(dim(f"  {processed.filtered_files} noise files filtered"))


def _display_message(message: str) -> None:
    """Commit message between horizontal rules, type prefix colored."""
    width = max((len(line) for line in message.split('\n')), default=40)
    subject, _, body = colorize_commit_type(message).partition('\n')
    print()
    print_rule(width)
    print(bold(subject))
    if body:
        print(body)
    print_rule(width)


def _secret_gate(repo: GitRepo, files, config: Config, verbose: bool) -> bool:
    """Scan staged files; on blocking findings the user must confirm.

    Declining (or interrupting) unstages everything so nothing half-done
    is left in the index.
    """
    result = scan_and_report(files, config, verbose)
    if not result.should_block:
        return True

    try:
        proceed = confirm("Continue with commit despite detected secrets?", default=False)
    except KeyboardInterrupt:
        repo.unstage_all()
        raise

    if not proceed:
        repo.unstage_all()
        print_warning("Commit cancelled. All changes have been unstaged.")
    return proceed


def _generate_message(args, config: Config, changes: StagedChanges) -> str:
    """Ask the LLM for a message, falling back to a locally built one."""
    processed = DiffProcessor().process(changes)
    _display_file_list(processed)

    prompt = PromptBuilder().build(processed, PromptConfig(
        hint=args.hint,
        forced_type=args.type,
        file_count=processed.total_files,
        style=config.style,
        include_body=config.include_body,
        max_subject_length=config.max_subject_length,
    ))
    logger.debug(f"Prompt: ~{len(prompt) // 4} tokens ({len(prompt)} chars)")

    provider, model = resolve_provider_and_model(args.provider, args.model, config)
    try:
        client = get_client(provider=provider, model=model)
        with Spinner(f"Generating commit message with {client.name}..."):
            response = client.generate(prompt)
        print_info(f"Message generated by {info(client.name)}")
        logger.debug(f"Response: {response.tokens_used} tokens from {response.model}")
    except LLMError as e:
        print_warning(f"LLM unavailable: {str(e).splitlines()[0]}")
        print_info("Using a generated summary instead")
        return simple_commit_message(changes)

    message = clean_commit_message(response.content)
    is_valid, error = validate_commit_message(message)
    if not is_valid:
        print_warning(f"LLM message rejected ({error}); using a generated summary")
        return simple_commit_message(changes)
    return message


def commit_flow(args, config: Config, repo: GitRepo) -> int:
    """Stage everything, scan, write the message and commit."""
    if not repo.status():
        print_warning("No changes to commit. Working tree clean.")
        return EXIT_OK

    print_info("Staging changes...")
    repo.stage_all()

    changes = repo.get_staged_changes()
    if changes.is_empty:
        print_warning("No changes to commit after staging.")
        return EXIT_OK

    if config.scan_secrets and not args.no_scan:
        if not _secret_gate(repo, repo.read_staged_files(), config, args.verbose):
            return EXIT_CANCELLED
    else:
        print_warning("Secret scan skipped")

    message = args.message or _generate_message(args, config, changes)
    _display_message(message)

    print_info("Creating commit...")
    repo.commit(message)
    print_success("Commit created")
    return EXIT_OK


def push_flow(args, config: Config, repo: GitRepo) -> int:
    """Commit, then push to the requested or default branch."""
    branch = args.branch or config.default_branch
    if not args.branch:
        print_info(f"No branch specified, defaulting to: {branch}")

    exit_code = commit_flow(args, config, repo)
    if exit_code != EXIT_OK:
        return exit_code

    current = repo.current_branch()
    if current != branch:
        print_warning(f"On branch {current}: pushing local {branch}, which does not contain this commit")

    try:
        if repo.is_up_to_date():
            print_warning("Branch is already up to date with remote. Nothing to push.")
            return EXIT_OK
    except GitError:
        print_warning("Unable to check branch status, will attempt to push...")

    if config.confirm_push and not args.yes:
        if not confirm(f"Push to {bold(branch)}?", default=True):
            print_warning("Push cancelled. The commit was created locally.")
            return EXIT_CANCELLED

    print_info(f"Pushing to {branch}...")
    repo.push(branch)
    print_success(f"Pushed to {branch}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    if args.install_completion:
        return run_install_completion()

    load_environment()

    if args.display_config:
        return display_config()
    if args.init_config:
        return run_init_config()
    if args.command == 'patterns':
        return run_patterns()
    if args.command == 'scan':
        return run_scan(args.verbose)

    config = load_config()
    if args.style:
        config.style = args.style
    if args.no_body:
        config.include_body = False

    try:
        repo = GitRepo()
        if args.command == 'commit':
            return commit_flow(args, config, repo)
        return push_flow(args, config, repo)
    except GitError as e:
        print_error(str(e))
        return EXIT_FAILED
    except KeyboardInterrupt:
        print()
        print_warning("Aborted.")
        return EXIT_INTERRUPTED


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
