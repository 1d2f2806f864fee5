"""Slash-command handling and the per-input dispatcher."""

import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.syntax import Syntax

from . import backend, config, journal
from .config import BOLD, CYAN, DIM, GREEN, MAGENTA, RED, RESET
from .errors import CommandError
from .memory import DEFAULT_COMPACT_KEEP, SessionMemory

COMMANDS = {
    "help": ("/help", "Show available commands"),
    "exit": ("/exit", "Exit the CLI"),
    "clear": ("/clear", "Clear the terminal screen"),
    "ls": ("/ls [directory]", "List files in directory"),
    "cat": ("/cat <filename>", "Display file contents"),
    "edit": ("/edit <filename>", "Edit or create a file"),
    "search": ("/search <pattern> [file-pattern]", "Search file contents"),
    "find": ("/find <pattern>", "Find files by name pattern"),
    "save": ("/save <filename>", "Save generated code to a file"),
    "run": ("/run <command>", "Execute a shell command"),
    "cd": ("/cd <directory>", "Change directory"),
    "pwd": ("/pwd", "Show current working directory"),
    "version": ("/version", "Show Codesphere version"),
    "about": ("/about", "Show information about Codesphere"),
    "models": ("/models", "List available AI models for code generation"),
    "context": ("/context", "Show current conversation context in memory"),
    "compact": ("/compact [n]", f"Keep only the last n exchanges in memory (default {DEFAULT_COMPACT_KEEP})"),
    "create": ("/create <filename> <description>", "Create a file with generated code from description"),
}

EDITORS = ["code", "vim", "nano", "gedit", "notepad"]
SKIP_DIRS = {".git", "node_modules", "__pycache__", ".venv"}


@dataclass(frozen=True)
class Reply:
    """Text to show the user; ``language`` selects syntax highlighting."""

    text: str
    language: Optional[str] = None


def _ask(msg):
    try:
        return input(msg).strip().lower() == "y"
    except EOFError:
        print()
        return False


class Session:
    """State shared by the command handlers for one running CLI."""

    def __init__(self, memory=None, confirm=None):
        self.memory = memory if memory is not None else SessionMemory()
        self.last_output = ""
        self.confirm = confirm or _ask


def help_text():
    lines = [f"\n{BOLD}{CYAN}Available Commands:{RESET}\n"]
    for usage, description in COMMANDS.values():
        lines.append(f"{BOLD}{GREEN}{usage}{RESET}\n  {description}\n")
    return "\n".join(lines)


def about_text():
    return (f"Codesphere v{config.VERSION}\n\n"
            "A lightweight, terminal-based coding assistant that helps you generate code, "
            "navigate files, and work efficiently from the command line.")


def context_text(memory):
    info = [f"{CYAN}{BOLD}Memory Context:{RESET}"]
    exchanges = memory.exchanges
    if not exchanges:
        info.append(f"{DIM}No conversation history yet.{RESET}")
    else:
        info.append(f"{len(exchanges)} conversation exchanges in memory.\n")
        for i, e in enumerate(exchanges, 1):
            info.append(f"{CYAN}[{i}] {e.timestamp.strftime('%H:%M:%S')}{RESET}")
            info.append(f"{GREEN}User:{RESET} {_preview(e.prompt, 60)}")
            info.append(f"{MAGENTA}Response:{RESET} {_preview(e.response, 60)}\n")

    files = memory.file_records
    if files:
        info.append(f"\n{len(files)} generated files in memory:")
        for i, f in enumerate(files, 1):
            info.append(f"{GREEN}[{i}] {f.path}{RESET} - {_preview(f.source_prompt, 40)}")
    return "\n".join(info)


def _preview(text, n):
    return text[:n] + ("..." if len(text) > n else "")


def list_dir(target):
    path = Path(target or ".")
    if not path.is_dir():
        raise CommandError(f"Not a directory: {path}")
    rows = []
    for entry in sorted(path.iterdir(), key=lambda p: p.name):
        st = entry.stat()
        kind = "d" if entry.is_dir() else "-"
        rows.append(f"{kind} {st.st_size:>10}  {entry.name}{'/' if entry.is_dir() else ''}")
    return "\n".join(rows) or f"{DIM}(empty){RESET}"


def read_file(name):
    if not name:
        raise CommandError("Please specify a file to view")
    path = Path(name)
    if not path.is_file():
        raise CommandError(f"File not found: {name}")
    return path.read_text(encoding="utf-8", errors="replace")


def open_in_editor(name):
    if not name:
        raise CommandError("Please specify a file to edit")
    path = Path(name)
    if not path.exists():
        path.write_text("", encoding="utf-8")

    candidates = [os.environ["EDITOR"]] if os.environ.get("EDITOR") else []
    for editor in candidates + EDITORS:
        exe = shutil.which(editor)
        if exe:
            subprocess.call([exe, str(path)])
            return f"Opened {path} for editing."
    raise CommandError(f"No suitable editor found. Please install one of: {', '.join(EDITORS)}")


def _walk_files(root, file_pattern):
    try:
        paths = sorted(Path(root).rglob(file_pattern))
    except (NotImplementedError, ValueError) as e:
        raise CommandError(f"Only relative patterns are supported: {file_pattern}") from e
    for p in paths:
        if p.is_file() and not SKIP_DIRS.intersection(p.parts):
            yield p


def search_files(pattern, file_pattern="*", root="."):
    try:
        rx = re.compile(pattern)
    except re.error:
        rx = re.compile(re.escape(pattern))

    hits = []
    for p in _walk_files(root, file_pattern):
        try:
            with open(p, encoding="utf-8") as f:
                for n, line in enumerate(f, 1):
                    if rx.search(line):
                        hits.append(f"{p}:{n}:{line.rstrip()}")
        except (UnicodeDecodeError, OSError):
            continue
    return "\n".join(hits) or "No matches found"


def find_files(pattern, root="."):
    return "\n".join(str(p) for p in _walk_files(root, pattern)) or "No files found"


def run_shell(cmd, confirm):
    if not cmd:
        raise CommandError("Please specify a command to run")
    print(f"{RED}{BOLD}EXECUTE:{RESET} {cmd}")
    if not confirm("Confirm? (y/N) > "):
        return f"{DIM}[aborted]{RESET}"
    proc = subprocess.run(cmd, shell=True, capture_output=True, text=True)
    journal.log_interaction("exec", f"$ {cmd}\n(exit {proc.returncode})")
    return proc.stdout or proc.stderr or f"{DIM}(exit {proc.returncode}, no output){RESET}"


def change_dir(target):
    target = target or str(Path.home())
    try:
        os.chdir(target)
    except OSError as e:
        raise CommandError(str(e)) from e
    return f"Changed directory to {os.getcwd()}"


def create_file(session, args):
    if len(args) < 2:
        raise CommandError(
            "Usage: /create <filename> <description>\n"
            "Example: /create server.js create a simple express server")
    filename, description = args[0], " ".join(args[1:])
    language = backend.guess_language(f"{filename} {description}")
    print(f"{CYAN}Creating file with {language} code for: {description}{RESET}")

    code = backend.generate_code(description, session.memory, language=language)
    Path(filename).write_text(code, encoding="utf-8")
    session.memory.record_file(filename, code, description)
    session.last_output = code

    lines = code.split("\n")
    preview = "\n".join(lines[:5]) + ("\n..." if len(lines) > 5 else "")
    return f"{GREEN}File {filename} created successfully.{RESET}\n\n{DIM}Preview:{RESET}\n{preview}"


def save_output(session, filename):
    if not filename:
        raise CommandError("Please provide a filename to save to")
    if not session.last_output:
        raise CommandError("No output to save")
    Path(filename).write_text(session.last_output, encoding="utf-8")
    session.memory.record_file(filename, session.last_output, "Saved from last output")
    return f"Saved output to {filename}"


def compact_memory(memory, args):
    keep = DEFAULT_COMPACT_KEEP
    if args:
        try:
            keep = int(args[0])
        except ValueError:
            raise CommandError("Usage: /compact [n]") from None
    dropped = memory.compact(keep)
    return f"{GREEN}[memory compacted: dropped {dropped}, kept {len(memory.exchanges)}]{RESET}"


def handle_command(session, line):
    """Run one slash-command and return its Reply, or None if it printed directly."""
    parts = line[1:].split()
    if not parts:
        raise CommandError("Empty command. Type /help for available commands.")
    cmd, args = parts[0], parts[1:]
    rest = " ".join(args)

    if cmd == "help":
        return Reply(help_text())
    if cmd == "clear":
        print("\033[2J\033[H", end="", flush=True)
        return None
    if cmd == "version":
        return Reply(f"Codesphere v{config.VERSION}")
    if cmd == "about":
        return Reply(about_text())
    if cmd == "models":
        return Reply(backend.model_status_lines())
    if cmd == "context":
        return Reply(context_text(session.memory))
    if cmd == "compact":
        return Reply(compact_memory(session.memory, args))
    if cmd == "create":
        return Reply(create_file(session, args))
    if cmd == "save":
        return Reply(save_output(session, rest))
    if cmd == "ls":
        return Reply(list_dir(rest))
    if cmd == "cat":
        return Reply(read_file(rest), language=Syntax.guess_lexer(rest))
    if cmd == "edit":
        return Reply(open_in_editor(rest))
    if cmd == "search":
        if not args:
            raise CommandError("Please specify a pattern to search for")
        return Reply(search_files(args[0], " ".join(args[1:]) or "*"))
    if cmd == "find":
        if not args:
            raise CommandError("Please specify a pattern to find")
        return Reply(find_files(rest))
    if cmd == "run":
        return Reply(run_shell(rest, session.confirm))
    if cmd == "cd":
        return Reply(change_dir(rest))
    if cmd == "pwd":
        return Reply(os.getcwd())

    return Reply(f"{RED}Unknown command: /{cmd}. Type /help for available commands.{RESET}")


def process_input(session, line):
    line = line.strip()
    if not line:
        return None
    if line.startswith("/"):
        return handle_command(session, line)

    language = backend.guess_language(line)
    code = backend.generate_code(line, session.memory, language=language)
    session.last_output = code
    print(f"{GREEN}Tip: Use /create {backend.suggest_filename(line, language)} {line} to save this as a file{RESET}")
    return Reply(code, language=language)
