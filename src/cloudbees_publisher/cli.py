"""
Command line entry point.

A build server calls `cloudbees-publisher deploy` as a post-build step with
the artifact manifest the build recorded.
"""
import argparse
import logging
import sys
from typing import List, Optional

from .accounts import AccountRegistry, AccountStore, AccountStoreError
from .artifacts import ArtifactManifestError, load_artifact_groups
from .bees_client_mock import get_bees_client
from .config_defaults import get_setting
from .models import Account, DeploymentSettings
from .publisher import DEFAULT_DESCRIPTION, DEFAULT_ENVIRONMENT, BuildLog, WarPublisher
from .validation import ValidationService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _setup_logging() -> None:
    level = (get_setting('LOG_LEVEL', 'INFO') or 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def _load_registry(args) -> AccountRegistry:
    return AccountRegistry.from_store(AccountStore(args.accounts_file))


def cmd_deploy(args) -> int:
    registry = _load_registry(args)
    groups = load_artifact_groups(args.artifacts)

    settings = DeploymentSettings(account_name=args.account, application_id=args.application_id)
    publisher = WarPublisher(
        registry,
        get_bees_client(),
        environment=args.environment,
        description=args.description,
    )
    outcome = publisher.deploy(settings, groups, BuildLog(sys.stdout))

    if not outcome.success:
        logger.error(f"Deployment failed ({outcome.status.value}): {outcome.message}")
        return EXIT_FAILED
    return EXIT_OK


def cmd_accounts(args) -> int:
    registry = _load_registry(args)

    if args.add:
        name, api_key, secret_key = args.add
        registry.add(Account(name=name, api_key=api_key, secret_key=secret_key))
        registry.store.save(registry.all())
        print(f"Added account {name}")
        return EXIT_OK

    default = registry.lookup(None)
    for account in registry.all():
        marker = " (default)" if account is default else ""
        print(f"{account.name}{marker}")
    return EXIT_OK


def cmd_check(args) -> int:
    registry = _load_registry(args)
    service = ValidationService(registry, get_bees_client())

    if args.application_id is not None:
        result = service.check_application_id(args.application_id, args.account)
    else:
        account = registry.lookup(args.account)
        api_key = args.api_key or (account.api_key if account else None)
        secret_key = args.secret_key or (account.secret_key if account else None)
        result = service.check_connectivity(api_key, secret_key)

    if result.is_ok:
        print("OK")
        return EXIT_OK
    print(f"ERROR: {result.message}")
    return EXIT_FAILED


def cmd_serve(args) -> int:
    from .app import create_app

    app = create_app(accounts_path=args.accounts_file)
    app.run(host=args.host, port=args.port)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudbees-publisher",
        description="Deploy a build's war artifact to CloudBees",
    )
    parser.add_argument(
        "--accounts-file",
        default=get_setting('CLOUDBEES_ACCOUNTS_FILE', 'cloudbees_accounts.yaml'),
        help="YAML file holding the configured accounts",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy = subparsers.add_parser("deploy", help="Deploy the war artifact of a build")
    deploy.add_argument("--artifacts", required=True, help="Artifact manifest (JSON or YAML)")
    deploy.add_argument("--application-id", required=True, help="Target application id")
    deploy.add_argument("--account", default=None, help="Account name (default: first configured)")
    deploy.add_argument("--environment",
                        default=get_setting('CLOUDBEES_ENVIRONMENT', DEFAULT_ENVIRONMENT))
    deploy.add_argument("--description",
                        default=get_setting('CLOUDBEES_DESCRIPTION', DEFAULT_DESCRIPTION))
    deploy.set_defaults(func=cmd_deploy)

    accounts = subparsers.add_parser("accounts", help="List or add configured accounts")
    accounts.add_argument("--add", nargs=3, metavar=("NAME", "API_KEY", "SECRET_KEY"),
                          help="Append an account and save")
    accounts.set_defaults(func=cmd_accounts)

    check = subparsers.add_parser("check", help="Check credentials or an application id")
    check.add_argument("--account", default=None)
    check.add_argument("--api-key", default=None)
    check.add_argument("--secret-key", default=None)
    check.add_argument("--application-id", default=None)
    check.set_defaults(func=cmd_check)

    serve = subparsers.add_parser("serve", help="Run the configuration UI backend")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    _setup_logging()
    args = build_parser().parse_args(argv)

    try:
        return args.func(args)
    except (AccountStoreError, ArtifactManifestError) as e:
        logger.error(str(e))
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
