"""Interactive shell for WD Bridge (wdbridge)."""

import argparse
import os
import sys

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from wdbridge.core.client import WDClient
from wdbridge.core.config import ENV_HOST, load_settings
from wdbridge.core.errors import WDBridgeError
from wdbridge.services.download import WDDownloader
from wdbridge.services.upload import WDUploader
from wdbridge.utils.helpers import format_path, list_local_entries, validate_path_exists
from wdbridge.utils.progress import (
    ConsoleReporter,
    auth_failed,
    auth_success,
    display_entries,
    display_operation_summary,
    only_relative_path,
    path_not_found,
)

console = Console()

HELP_TEXT = [
    ("help", "display this menu"),
    ("exit", "exit from the shell"),
    ("clear", "clear the screen"),
    ("ls", "list the entries of the current remote directory"),
    ("auth", "authenticate to the device"),
    ("auth -a", "authenticate with the credentials from the settings"),
    ("mkdir [folder name]", "create a folder in the current remote directory"),
    ("rm [entry name]", "remove an entry from the current remote directory"),
    ("cd [path]", "change the current remote directory"),
    ("upload [local path]", "upload a file or folder to the current remote directory"),
    ("download [remote name]", "download a file or folder from the current remote directory"),
    ("stats", "show a summary of the transfers made so far"),
    ("l pwd", "print the local working directory"),
    ("l cd [local path]", "change the local working directory"),
    ("l ls [path]", "list a local folder, the local working directory if not given"),
]


def display_header():
    """Display the application header."""
    console.print(
        Panel(
            "[bold blue]WD Bridge (wdbridge)[/bold blue]\n"
            "[dim]Browse and transfer files on a WD cloud device. Type 'help' for commands.[/dim]",
            border_style="blue",
            padding=(1, 2),
        )
    )


class Shell:
    """Line-based command shell on top of a WDClient."""

    def __init__(self, client, settings, local_dir=None, reporter=None):
        self.client = client
        self.settings = settings
        self.local_dir = local_dir or os.getcwd()
        self.reporter = reporter or ConsoleReporter()
        self.uploader = WDUploader(client, self.reporter)
        self.downloader = WDDownloader(client, self.reporter)
        self.cwd_cache = None

    def run(self):
        """Read and execute commands until 'exit' or end of input."""
        while True:
            try:
                command = console.input("> ")
            except (EOFError, KeyboardInterrupt):
                console.print()
                break

            if not self.execute(command.strip()):
                break

    def execute(self, command):
        """Execute one command line; returns False when the shell should stop."""
        if command == "exit":
            return False

        try:
            self._dispatch(command)
        except (WDBridgeError, OSError) as e:
            console.print(f"[red]❌ {escape(str(e))}[/red]", highlight=False)
        return True

    def _dispatch(self, command):
        if not command:
            return
        if command == "auth":
            username = Prompt.ask("Username", console=console)
            password = Prompt.ask("Password", password=True, console=console)
            self.authenticate(username, password)
        elif command == "auth -a":
            self.authenticate(self.settings.username, self.settings.password)
        elif command == "ls":
            self.cwd_cache = self.client.list_files()
            display_entries(self.cwd_cache)
        elif command == "clear":
            console.clear()
        elif command == "help":
            for usage, description in HELP_TEXT:
                console.print(f"[bold]{escape(usage)}[/bold] - {description}", highlight=False)
        elif command == "stats":
            display_operation_summary(self.client.stats)
        elif command.startswith("cd "):
            self.change_directory(command[3:])
        elif command.startswith("mkdir "):
            self.make_directory(command[6:])
        elif command.startswith("rm "):
            self.remove(command[3:])
        elif command.startswith("upload "):
            self.upload(command[7:])
        elif command.startswith("download "):
            self.download(command[9:])
        elif command.startswith("l "):
            self.local_command(command[2:])
        else:
            console.print(f"[yellow]Unknown command: {escape(command)}[/yellow]")

    def authenticate(self, username, password):
        if not username or not password:
            auth_failed()
            return False
        if self.client.authenticate(username, password):
            auth_success()
            return True
        auth_failed()
        return False

    def _find_entry(self, name, directories_only=False):
        if self.cwd_cache is None:
            self.cwd_cache = self.client.list_files()
        for entry in self.cwd_cache:
            if entry.name == name and (entry.is_dir or not directories_only):
                return entry
        return None

    def _seek_and_enter(self, folder_name):
        """Find a child folder by name and enter it."""
        target = self._find_entry(folder_name, directories_only=True)
        self.cwd_cache = None
        if target is None:
            path_not_found(folder_name)
            return False
        self.client.enter_directory(target.id)
        return True

    def change_directory(self, path):
        if path == "/":
            self.client.set_path(None)
            self.cwd_cache = None
            return

        if "/" not in path:
            if path == "..":
                self.client.enter_parent_directory()
                self.cwd_cache = None
            else:
                self._seek_and_enter(path)
            return

        entered = 0
        for index, part in enumerate(path.split("/")):
            if part == "":
                # Leading slash means root; trailing slashes are ignored
                if index == 0:
                    self.client.set_path(None)
                    self.cwd_cache = None
            elif part == "..":
                self.client.enter_parent_directory()
                self.cwd_cache = None
            elif part == ".":
                continue
            elif self._seek_and_enter(part):
                entered += 1
            else:
                self.client.remove_path_stack_entries(entered)
                break

    def make_directory(self, name):
        if "/" in name:
            only_relative_path()
            return
        self.client.create_directory(name)
        self.cwd_cache = None

    def remove(self, name):
        if "/" in name:
            only_relative_path()
            return
        target = self._find_entry(name)
        if target is None:
            path_not_found(name)
            return
        self.client.remove_entry(target.id)
        self.cwd_cache = None

    def upload(self, local_path):
        full_path = format_path(local_path, self.local_dir)
        path_type = validate_path_exists(full_path)
        if path_type is None:
            path_not_found(full_path)
            return

        if path_type == "directory":
            results = self.uploader.upload_folder(full_path)
            failed = [result for result in results if not result.success]
            console.print(
                f"[cyan]Uploaded {len(results) - len(failed)} of {len(results)} files[/cyan]"
            )
        else:
            self._transfer_single(
                os.path.basename(full_path),
                "upload",
                lambda callback: self.uploader.upload_file(full_path, callback),
            )
        self.cwd_cache = None

    def download(self, name):
        if "/" in name:
            only_relative_path()
            return
        target = self._find_entry(name)
        if target is None:
            path_not_found(name)
            return

        local_path = os.path.join(self.local_dir, target.name)
        if target.is_dir:
            results = self.downloader.download_folder(target.id, local_path)
            failed = [result for result in results if not result.success]
            console.print(
                f"[cyan]Downloaded {len(results) - len(failed)} of {len(results)} files[/cyan]"
            )
        else:
            self._transfer_single(
                target.name,
                "download",
                lambda callback: self.downloader.download_file(
                    target.id, local_path, callback
                ),
                local_path,
            )

    def _transfer_single(self, name, action, transfer, saved_path=None):
        self.reporter.file_started(name, action)
        try:
            transfer(lambda progress: self.reporter.file_progress(name, progress))
        except (WDBridgeError, OSError) as e:
            self.reporter.file_failed(name, e)
            return False
        self.reporter.file_done(name, saved_path)
        return True

    def local_command(self, command):
        if command == "pwd":
            console.print(
                f"The current local working directory is: {self.local_dir}",
                markup=False,
                highlight=False,
            )
        elif command.startswith("cd "):
            full_path = format_path(command[3:], self.local_dir)
            if validate_path_exists(full_path) == "directory":
                self.local_dir = full_path
            else:
                path_not_found(full_path)
        elif command.startswith("ls"):
            full_path = self.local_dir
            if len(command) > 2:
                full_path = format_path(command[3:], self.local_dir)
            if validate_path_exists(full_path) == "directory":
                display_entries(list_local_entries(full_path))
            else:
                path_not_found(full_path)
        else:
            console.print(f"[yellow]Unknown local command: {escape(command)}[/yellow]")


def create_argument_parser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="WD Bridge (wdbridge) - Interactive shell for a WD cloud storage device.",
        epilog="""
        Credentials and the device host are read from a JSON settings file
        (keys: user, pass, wdHost) and can be overridden with the WDC_USERNAME,
        WDC_PASSWORD and WDC_HOST environment variables.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-s", "--settings", default=None, help="Path of the JSON settings file."
    )
    parser.add_argument(
        "--host", default=None, help="Device host, overrides the settings."
    )
    parser.add_argument(
        "-a",
        "--auto-auth",
        action="store_true",
        help="Authenticate with the stored credentials on start-up.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show API debug messages."
    )
    return parser


def main(argv=None):
    """Main function to handle command-line arguments and start the shell."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except (ValueError, OSError) as e:
        console.print(f"❌ [bold red]ERROR: {e}")
        sys.exit(1)

    if args.host:
        settings.host = args.host
    if not settings.host:
        console.print(
            f"❌ [bold red]ERROR: No device host configured. Use --host or {ENV_HOST}."
        )
        sys.exit(1)

    display_header()

    client = WDClient(settings.host)
    if args.verbose:
        client.enable_api_messages()

    shell = Shell(client, settings)
    if args.auto_auth:
        shell.authenticate(settings.username, settings.password)

    shell.run()


if __name__ == "__main__":
    main()
