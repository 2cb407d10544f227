#!/usr/bin/env python
"""
Search the repository and optionally download the results.

Usage:
    python scripts/query_repository.py --help
    python scripts/query_repository.py "title:*soil*" --rows 5 --sort "dateUploaded desc"
    python scripts/query_repository.py "title:*soil*" --rows 5 --download --dest downloads
    python scripts/query_repository.py --package resource_map_doi:10.18739/A2RZ6X --dest downloads

Connection settings come from REPOSITORY_* environment variables (or .env).
"""

import argparse
import logging
import sys
from typing import Optional

from geotutor.models import RepositorySettings, SolrQuery
from geotutor.repository import (
    RepositoryClient,
    RepositoryError,
    download_package,
    download_query_results,
)


def print_results(client: RepositoryClient, query: SolrQuery, max_results: Optional[int]) -> None:
    """Print one line per hit: identifier, title, resource maps."""
    count = 0
    for doc in client.iter_query(query, max_results=max_results):
        count += 1
        packages = ", ".join(doc.resource_map) or "-"
        print(f"{doc.identifier}\t{doc.title or ''}\t{packages}")
    print(f"{count} result(s)", file=sys.stderr)


def main() -> int:
    parser = argparse.ArgumentParser(description="Query the repository's Solr index")
    parser.add_argument("q", nargs="?", default="*:*", help="Solr query (default: *:*)")
    parser.add_argument("--rows", type=int, default=10, help="Page size")
    parser.add_argument("--max-results", type=int, default=None, help="Stop after N hits")
    parser.add_argument(
        "--fl",
        default="identifier,title,resourceMap",
        help="Comma separated field list",
    )
    parser.add_argument("--sort", default=None, help="Sort clause, e.g. 'dateUploaded desc'")
    parser.add_argument("--fq", action="append", default=[], help="Filter query (repeatable)")
    parser.add_argument("--download", action="store_true", help="Download every hit")
    parser.add_argument("--package", default=None, help="Download a data package by resource map PID")
    parser.add_argument("--dest", default=None, help="Download directory")
    parser.add_argument("--overwrite", action="store_true", help="Re-download existing files")
    parser.add_argument("--keep-going", action="store_true", help="Continue past failed downloads")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = RepositorySettings()
    dest = args.dest or settings.download_dir

    try:
        query = SolrQuery(q=args.q, rows=args.rows, fl=args.fl, sort=args.sort, fq=args.fq)
    except ValueError as e:
        print(f"Invalid query: {e}", file=sys.stderr)
        return 2

    with RepositoryClient.from_settings(settings) as client:
        try:
            if args.package:
                report = download_package(
                    client,
                    args.package,
                    dest,
                    overwrite=args.overwrite,
                    continue_on_error=args.keep_going,
                )
            elif args.download:
                report = download_query_results(
                    client,
                    query,
                    dest,
                    max_results=args.max_results,
                    overwrite=args.overwrite,
                    continue_on_error=args.keep_going,
                )
            else:
                print_results(client, query, args.max_results)
                return 0
        except RepositoryError as e:
            print(f"Repository request failed: {e}", file=sys.stderr)
            return 1

    for record in report.records:
        status = "skipped" if record.skipped else ("ok" if record.success else f"FAILED: {record.error}")
        print(f"{record.identifier}\t{record.path or '-'}\t{status}")
    print(
        f"{len(report.succeeded)} ok, {len(report.failed)} failed, {report.total_bytes} bytes",
        file=sys.stderr,
    )
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
