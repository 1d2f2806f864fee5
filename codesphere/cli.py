import argparse
import atexit
import readline
from datetime import datetime

from rich.console import Console
from rich.syntax import Syntax

from . import config, journal
from .commands import COMMANDS, Session, process_input
from .config import BOLD, CYAN, DIM, GRAY, GREEN, MAGENTA, RED, RESET, YELLOW
from .errors import CodesphereError

EXIT_WORDS = ("/exit", "/quit", "exit", "quit")

console = Console()


def ts():
    return datetime.now().strftime("%H:%M:%S")


def banner():
    print(f"""
{BOLD}{CYAN}┌────────────────────────────────────────┐
│                                        │
│  {GREEN}C O D E S P H E R E{CYAN}                   │
│  {RESET}{CYAN}v{config.VERSION}                                 │
│                                        │
│  {DIM}Type {GREEN}/help{RESET}{CYAN}{DIM} for available commands{RESET}{BOLD}{CYAN}      │
│                                        │
└────────────────────────────────────────┘{RESET}
""")


def backend_status():
    if config.api_enabled():
        return f"{GREEN}✓{RESET} {DIM}Completion API: {config.MODEL} @ {config.API_URL}{RESET}"
    return f"{YELLOW}!{RESET} {DIM}CODESPHERE_API_KEY not set, using template generation{RESET}"


def setup_readline():
    try:
        readline.read_history_file(config.READLINE_FILE)
    except (FileNotFoundError, OSError):
        pass
    atexit.register(readline.write_history_file, config.READLINE_FILE)

    completions = sorted("/" + c for c in COMMANDS)

    def complete(text, state):
        hits = [c for c in completions if c.startswith(text)]
        return hits[state] if state < len(hits) else None

    readline.set_completer_delims(" \t\n")
    readline.set_completer(complete)
    readline.parse_and_bind("tab: complete")


def render(reply):
    if reply.language and config.RENDER:
        console.print(Syntax(reply.text, reply.language, theme="monokai", word_wrap=True))
    else:
        print(reply.text)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="codesphere",
        description="Codesphere - Interactive Coding Assistant",
        epilog="Run codesphere and type /help for available commands.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"v{config.VERSION}")
    return parser.parse_args(argv)


def handle_line(session, line):
    """Process one input line; returns the rendered reply or None."""
    try:
        reply = process_input(session, line)
    except (CodesphereError, OSError) as e:
        print(f"{RED}Error:{RESET} {e}")
        return None
    if reply is None:
        return None

    print()
    render(reply)
    print()
    journal.add_to_history(line, reply.text)
    journal.update_session(line, reply.text)
    journal.log_interaction("user", line)
    journal.log_interaction("assistant", reply.text)
    return reply


def loop(session):
    while True:
        try:
            line = input(f"{BOLD}{GREEN}codesphere{RESET}{BOLD}>{RESET} {GRAY}[{ts()}]{RESET} ").strip()
        except KeyboardInterrupt:
            print(f"\n{DIM}To exit, type /exit{RESET}")
            continue
        except EOFError:
            break

        if not line:
            continue
        if line in EXIT_WORDS:
            break

        try:
            handle_line(session, line)
        except KeyboardInterrupt:
            print(f"\n{YELLOW}[Generation aborted by user]{RESET}")
    print(f"{MAGENTA}Goodbye!{RESET}")


def main(argv=None):
    parse_args(argv)
    config.init_dirs()
    journal.init_audit_files()
    setup_readline()

    banner()
    print(backend_status())
    print(f"{GREEN}Ready to generate code!{RESET} Type your description and press Enter.")
    print(f"Type {BOLD}/models{RESET} to see available AI models\n")

    loop(Session())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
