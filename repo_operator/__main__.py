"""Run the repository operator.

Configuration comes from the environment (see ``RepositoryServiceClient.from_env``);
``WATCH_NAMESPACE`` restricts the watch to one namespace.
"""

import argparse
import logging
import os

from repo_operator.client import RepositoryServiceClient
from repo_operator.controller import Controller, RepositoryReconciler
from repo_operator.logging import configure_logging, get_logger
from repo_operator.store import KubernetesStore


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="repo-operator",
        description="Provision artifact repositories for Repository resources.",
    )
    parser.add_argument(
        "--namespace",
        default=os.environ.get("WATCH_NAMESPACE") or None,
        help="Only watch Repositories in this namespace (default: all namespaces)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for operator loggers",
    )
    args = parser.parse_args(argv)

    configure_logging(level=getattr(logging, args.log_level))
    logger = get_logger()

    service = RepositoryServiceClient.from_env()
    store = KubernetesStore.from_env()
    reconciler = RepositoryReconciler(store, service, repository_url=service.base_url)

    logger.info(f"Starting repo-operator against {service.base_url}")
    with service:
        Controller(reconciler, namespace=args.namespace).run()


if __name__ == "__main__":
    main()
