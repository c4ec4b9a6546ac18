"""Custom completer for the uploader CLI with file and option autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, CONFIG_KEYS


class UploadCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - File path completion for the 'upload' command, relative to the working directory
    - Option key completion for the 'set' command
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        current_word = "" if is_typing_new_token else tokens[-1]

        if command == "set":
            position = len(tokens) if is_typing_new_token else len(tokens) - 1
            if position == 1:
                yield from self._complete_config_keys(current_word)
            return

        if command != "upload":
            return
        previous = tokens[-1] if is_typing_new_token else tokens[-2]
        if previous == "--meta":
            return

        already_typed = set(tokens[1:])
        if not is_typing_new_token:
            already_typed.discard(current_word)

        yield from self._complete_paths(current_word, already_typed)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_config_keys(self, partial: str) -> Iterable[Completion]:
        """Complete configuration keys matching the partial input."""
        for key in CONFIG_KEYS:
            if key.startswith(partial.lower()):
                yield Completion(key, start_position=-len(partial))

    def _complete_paths(self, partial: str, exclude: set) -> Iterable[Completion]:
        """
        Complete file and directory paths relative to the working directory.

        Directories are offered with a trailing '/' so completion can descend.
        """
        directory_part, _, name_part = partial.rpartition("/")
        base = Path.cwd() / directory_part if directory_part else Path.cwd()

        if not base.is_dir():
            return

        prefix = f"{directory_part}/" if directory_part else ""
        for item in sorted(base.iterdir()):
            if not item.name.lower().startswith(name_part.lower()):
                continue
            candidate = f"{prefix}{item.name}"
            if item.is_dir():
                candidate += "/"
            elif candidate in exclude:
                continue
            yield Completion(candidate, start_position=-len(partial))
