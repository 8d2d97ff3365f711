"""Django management command to load console policies into the database.

The command supports:
- Specifying the path to the Casbin policy file. Default is 'console_authz/engine/config/console.policy'.
- Specifying the Casbin model configuration file. Default is 'console_authz/engine/config/model.conf'.
- Optionally clearing the existing policies of every authority before loading new ones.
"""

import os

import casbin
import click
from django.core.management.base import BaseCommand, CommandError

from console_authz import ROOT_DIRECTORY
from console_authz import api
from console_authz.api.data import PolicyIndex
from console_authz.engine.enforcer import ConsoleEnforcer
from console_authz.engine.utils import migrate_policy_between_enforcers


class Command(BaseCommand):
    """Django management command to load policies into the ``casbin_rule`` table.

    Policies are added through the console enforcer, so they take effect
    immediately in this process and are picked up by the others.

    Example Usage:
        python manage.py load_policies --policy-file-path /path/to/console.policy
        python manage.py load_policies --clear-existing
        python manage.py load_policies
    """

    help = "Load policies from a Casbin policy file into the console database."

    def add_arguments(self, parser) -> None:
        """Add command-line arguments to the argument parser.

        Args:
            parser: The Django argument parser instance to configure.
        """
        parser.add_argument(
            "--policy-file-path",
            type=str,
            default=None,
            help="Path to the Casbin policy file (CSV lines: p, <authority>, <path>, <method>)",
        )
        parser.add_argument(
            "--model-file-path",
            type=str,
            default=None,
            help="Path to the Casbin model configuration file",
        )
        parser.add_argument(
            "--clear-existing",
            action="store_true",
            help="Flag to clear existing policies before loading new ones",
        )

    def handle(self, *args, **options):
        """Execute the policy loading command.

        Raises:
            CommandError: If a file is missing or the enforcer is unavailable.
        """
        policy_file_path = options["policy_file_path"] or os.path.join(
            ROOT_DIRECTORY, "engine", "config", "console.policy"
        )
        model_file_path = options["model_file_path"] or os.path.join(ROOT_DIRECTORY, "engine", "config", "model.conf")

        if not os.path.isfile(policy_file_path):
            raise CommandError(f"Policy file not found: {policy_file_path}")
        if not os.path.isfile(model_file_path):
            raise CommandError(f"Model file not found: {model_file_path}")

        target_enforcer = ConsoleEnforcer.get_enforcer()
        if target_enforcer is None:
            raise CommandError("Casbin enforcer is not available")

        if options.get("clear_existing"):
            target_enforcer.load_policy()
            if click.confirm(
                click.style(
                    "Do you want to delete the existing policies of every authority?",
                    fg="yellow",
                    bold=True,
                ),
                default=False,
            ):
                self._delete_existing_policies(target_enforcer)

        source_enforcer = casbin.Enforcer(model_file_path, policy_file_path)
        added = migrate_policy_between_enforcers(source_enforcer, target_enforcer)
        ConsoleEnforcer.mark_policy_changed()

        self.stdout.write(self.style.SUCCESS(f"Loaded {added} policies from {policy_file_path}"))

    def _delete_existing_policies(self, target_enforcer):
        """Delete the policies of every authority known to the target enforcer.

        Args:
            target_enforcer: The Casbin enforcer instance to delete policies from.
        """
        for authority in target_enforcer.get_all_subjects():
            if api.clear_casbin(PolicyIndex.AUTHORITY.value, authority):
                click.echo(f"Deleted policies of authority: {authority}")
