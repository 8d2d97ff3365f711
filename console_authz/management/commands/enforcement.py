"""
Django management command for interactive console enforcement testing.

This command provides an interactive mode for testing authorization requests
with two operational modes:

1. **Database mode (default)**: Uses ConsoleEnforcer with policies from the database

2. **File mode**: Uses a custom Casbin enforcer with policies from files
   - Activated when --policy-file-path and --model-file-path are provided

Example usage:
    python manage.py enforcement
    python manage.py enforcement -m /path/to/model.conf -p /path/to/console.policy

Example test input:
    >>> 888 /api/createApi POST
    ✓ ALLOWED: 888 /api/createApi POST
    >>> 9528 /api/deleteApi POST
    ✗ DENIED: 9528 /api/deleteApi POST
"""

import argparse
import os

from casbin import Enforcer
from casbin.util.log import disabled_logging
from django.core.management.base import BaseCommand, CommandError

from console_authz import api
from console_authz.engine.enforcer import ConsoleEnforcer


class Command(BaseCommand):
    """
    Django management command for interactive console enforcement testing.

    1. Database mode (default): Uses ConsoleEnforcer with policies from the database.

    2. File mode: Uses a custom Casbin enforcer with policies from files.
       Activated when both --policy-file-path and --model-file-path are provided.
    """

    help = (
        "Interactive mode for testing console policies. By default, uses "
        "ConsoleEnforcer with policies from the database. Use --policy-file-path and "
        "--model-file-path to test with custom files instead. "
        "Format: authority path method."
    )

    def __init__(self, *args, **kwargs):
        """Initialize the command with required attributes."""
        super().__init__(*args, **kwargs)
        self._custom_enforcer = None

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Add command-line arguments to the argument parser.

        Args:
            parser (argparse.ArgumentParser): The Django argument parser instance to configure.
        """
        parser.add_argument(
            "-p",
            "--policy-file-path",
            type=str,
            default=None,
            help="Path to the Casbin policy CSV file. Switches to file mode together with --model-file-path.",
        )
        parser.add_argument(
            "-m",
            "--model-file-path",
            type=str,
            default=None,
            help="Path to the Casbin model configuration file. Switches to file mode together with --policy-file-path.",
        )

    def handle(self, *args, **options):
        """Pick the operational mode from the arguments and start the interactive shell."""
        policy_file_path = options["policy_file_path"]
        model_file_path = options["model_file_path"]

        if policy_file_path is not None and model_file_path is not None:
            self._handle_file_mode(policy_file_path, model_file_path)
        else:
            self._handle_database_mode()

    def _handle_database_mode(self) -> None:
        """Handle enforcement testing using ConsoleEnforcer with database policies.

        Raises:
            CommandError: If the enforcer is unavailable or policy loading fails.
        """
        try:
            enforcer = ConsoleEnforcer.get_enforcer()
            if enforcer is None:
                raise CommandError("Casbin enforcer is not available")
            ConsoleEnforcer.load_policy()
            disabled_logging()

            self.stdout.write(self.style.SUCCESS("Casbin Interactive Enforcement (Database Mode)"))
            self.stdout.write("Using ConsoleEnforcer with policies from database")
            self.stdout.write("")

            self._display_loaded_policies(enforcer)
            self._run_interactive_mode()
        except CommandError:
            raise
        except Exception as e:
            raise CommandError(f"Error creating Casbin enforcer: {str(e)}") from e

    def _handle_file_mode(self, policy_file_path: str, model_file_path: str) -> None:
        """Handle enforcement testing using a custom Enforcer with file-based policies.

        Args:
            policy_file_path (str): Path to the policy CSV file.
            model_file_path (str): Path to the model configuration file.

        Raises:
            CommandError: If required files are not found or enforcer creation fails.
        """
        if not os.path.isfile(model_file_path):
            raise CommandError(f"Model file not found: {model_file_path}")
        if not os.path.isfile(policy_file_path):
            raise CommandError(f"Policy file not found: {policy_file_path}")

        try:
            enforcer = Enforcer(model_file_path, policy_file_path)

            self.stdout.write(self.style.SUCCESS("Casbin Interactive Enforcement (File Mode)"))
            self.stdout.write(f"Model file: {model_file_path}")
            self.stdout.write(f"Policy file: {policy_file_path}")
            self.stdout.write("")

            self._custom_enforcer = enforcer
            self._display_loaded_policies(enforcer)
            self._run_interactive_mode()
        except Exception as e:
            raise CommandError(f"Error creating Casbin enforcer: {str(e)}") from e

    def _display_loaded_policies(self, enforcer: Enforcer) -> None:
        """Display how many policies the enforcer holds."""
        policies = enforcer.get_policy()
        authorities = {policy[0] for policy in policies}

        self.stdout.write(f"✓ Loaded {len(policies)} policies")
        self.stdout.write(f"✓ Loaded {len(authorities)} authorities")
        self.stdout.write("")

    def _run_interactive_mode(self) -> None:
        """Start the interactive enforcement testing shell.

        Note:
            Exit the interactive mode with 'quit', Ctrl+C or Ctrl+D.
        """
        self.stdout.write(self.style.SUCCESS("Interactive Mode"))
        self.stdout.write("Enter 'quit', 'exit', or 'q' to exit the interactive mode.")
        self.stdout.write("")
        self.stdout.write("Format: authority path method")
        self.stdout.write("Example: 888 /api/createApi POST")
        self.stdout.write("")

        while True:
            try:
                user_input = input("Enter enforcement test: ").strip()

                if not user_input:
                    continue

                if user_input.lower() in ["quit", "exit", "q"]:
                    break

                self._test_interactive_request(user_input)
            except (KeyboardInterrupt, EOFError):
                self.stdout.write(self.style.ERROR("Exiting interactive mode..."))
                break

    def _test_interactive_request(self, user_input: str) -> None:
        """Parse one 'authority path method' line and print the decision.

        Args:
            user_input (str): The user's input string.
        """
        parts = user_input.split()
        if len(parts) != 3:
            self.stdout.write(self.style.ERROR(f"✗ Invalid format. Expected 3 parts, got {len(parts)}"))
            self.stdout.write("Format: authority path method")
            return

        authority, path, method = parts
        method = method.upper()

        if self._custom_enforcer is not None:
            result = self._custom_enforcer.enforce(authority, path, method)
        else:
            result = api.is_allowed(authority, path, method)

        if result:
            self.stdout.write(self.style.SUCCESS(f"✓ ALLOWED: {authority} {path} {method}"))
        else:
            self.stdout.write(self.style.ERROR(f"✗ DENIED: {authority} {path} {method}"))
