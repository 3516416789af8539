"""CLI Argument Parsing"""

import argparse

import argcomplete

from pushscript import COMMIT_TYPE_NAMES, __version__
from pushscript.config import VALID_PROVIDERS

COMMANDS = ('commit', 'push', 'scan', 'patterns')
BRANCH_SHORTCUTS = ('main', 'dev')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pushscript',
        description='Stage, scan for secrets, commit with an AI message, and push',
        epilog=(
            'Examples:\n'
            '  pushscript                      commit and push to the default branch\n'
            '  pushscript "fix: typo" dev      commit with a message and push to dev\n'
            '  pushscript commit               commit only\n'
            '  pushscript scan                 scan staged files for secrets'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('words', nargs='*', metavar='[command] [message] [branch]',
                        help=f"Command ({', '.join(COMMANDS)}), commit message and target branch")

    # Branch shortcuts
    branch = parser.add_mutually_exclusive_group()
    branch.add_argument('--main', dest='branch_flag', action='store_const', const='main', help='Push to main')
    branch.add_argument('--dev', dest='branch_flag', action='store_const', const='dev', help='Push to dev')

    # Generation options
    parser.add_argument('--hint', type=str, metavar='TEXT', help='Add context: --hint "fixing the login bug"')
    parser.add_argument('-t', '--type', type=str, choices=COMMIT_TYPE_NAMES, help='Force commit type')
    parser.add_argument('-s', '--style', type=str, choices=['conventional', 'simple', 'detailed'], help='Commit message style')
    parser.add_argument('--no-body', action='store_true', help='Generate subject line only')

    # LLM options
    parser.add_argument('-p', '--provider', type=str, choices=sorted(VALID_PROVIDERS), help='LLM provider')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')

    # Workflow options
    parser.add_argument('--no-scan', action='store_true', help='Skip the secret scan')
    parser.add_argument('-y', '--yes', action='store_true', help='Push without asking for confirmation')
    parser.add_argument('--verbose', action='store_true', help='Show debug logging and finding details')

    # Setup/config
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--init-config', action='store_true', help='Write a default .pushscript.json here')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def interpret_words(words: list[str]) -> tuple[str, str | None, str | None]:
    """Split free positional words into (command, message, branch).

    A leading command word selects the command; 'main' and 'dev' always
    mean a branch; the first other word is the message, the next the branch.
    """
    command = 'push'
    message = None
    branch = None

    if words and words[0] in COMMANDS:
        command, words = words[0], words[1:]

    for word in words:
        if word in BRANCH_SHORTCUTS:
            branch = word
        elif message is None:
            message = word
        elif branch is None:
            branch = word

    return command, message, branch


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)

    args.command, args.message, branch = interpret_words(args.words)
    args.branch = args.branch_flag or branch
    return args
