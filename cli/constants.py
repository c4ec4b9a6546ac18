"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

from client.config import ALLOWED_OPTIONS

COMMANDS = ["upload", "config", "set", "clear", "exit", "help"]

CONFIG_KEYS = list(ALLOWED_OPTIONS)

STYLE = Style.from_dict(
    {
        "prompt": "#2E9BF4 bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;46;155;244m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
   ___ _             _     _   _      _              _
  / __| |_ _  _ _ _ | |__ | | | |_ __| |___  __ _ __| |
 | (__| ' \\ || | ' \\| / / | |_| | '_ \\ / _ \\/ _` / _` |
  \\___|_||_\\_,_|_||_|_\\_\\  \\___/| .__/_\\___/\\__,_\\__,_|
                                |_|
{RESET}"""

WELCOME_TITLE = "Chunk Uploader CLI - sequential chunked file uploads"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "upload> "

HELP_TEXT = """Available commands:
  upload file-list [--meta field=value]   Upload files (in chunks when use_chunks is true)
  config                                  Show current configuration
  set <key> <value>                       Change one configuration option and save it
  clear                                   Clear screen and redisplay welcome message
  help                                    Show this help
  exit                                    Exit REPL

Configuration keys:
  url, headers, timeout, user, password, cross_domain, with_credentials,
  xsrf_cookie_name, xsrf_header_name, response_type, query_params,
  chunk_size (multiple of 1024), add_checksum, use_chunks
Examples:
  set use_chunks true
  set chunk_size 2097152
  upload report.pdf photos/img1.png
  upload backup.tar --meta owner=alice
  upload data.csv --meta 'tags={"kind": "csv"}'"""
