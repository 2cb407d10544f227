"""
Searching and downloading from a data repository
================================================

DataONE-style repositories index metadata from many member nodes in a
single Solr search index, and serve the data objects themselves from the
member node that holds them. This tutorial shows how to:

* build a Solr query (``q``, ``rows``, ``fl``, ``sort``)
* page through results
* follow resource maps to the files of a data package
* download objects one at a time

Endpoints come from ``REPOSITORY_BASE_URL`` / ``REPOSITORY_NODE_URL`` (or a
``.env`` file). A ``REPOSITORY_TOKEN`` is only needed for private content.
"""
# %%
import logging

from geotutor.models import RepositorySettings, SolrQuery
from geotutor.repository import (
    RepositoryClient,
    download_objects,
    download_package,
    download_query_results,
)

logging.basicConfig(level=logging.INFO)

settings = RepositorySettings()
client = RepositoryClient.from_settings(settings)
client.describe()

# %%
# Querying
# --------
#
# ``q`` is a Solr query expression; ``fl`` picks the returned fields and
# ``sort`` orders the hits. Here: the five most recent metadata records
# with "soil" in the title.

query = SolrQuery(
    q="title:*soil* AND formatType:METADATA",
    rows=5,
    fl=["identifier", "title", "resourceMap"],
    sort="dateUploaded desc",
)
result = client.query(query)
print(f"{result.num_found} records match")
for doc in result.docs:
    print(doc.identifier, "|", doc.title)

# %%
# Every hit lists the resource maps (data packages) it belongs to:

result.resource_maps

# %%
# Paging
# ------
#
# ``rows`` is a page size. ``iter_query`` requests one page after another
# and stops at ``max_results``.

titles = [doc.title for doc in client.iter_query(query, page_size=10, max_results=25)]
len(titles)

# %%
# Data packages
# -------------
#
# A resource map aggregates the metadata document and the data files of a
# package.

package_id = result.resource_maps[0]
package = client.get_resource_map(package_id)
print("metadata:", package.metadata_identifiers)
print("data:", package.data_identifiers)

# %%
# Downloading
# -----------
#
# Downloads are a plain loop, one object at a time. Files that already
# exist are skipped, so rerunning a cell resumes where it stopped.

report = download_package(client, package_id, settings.download_dir)
for record in report.records:
    print(record.identifier, record.path, record.size_bytes)

# %%
# Individual objects can be fetched by identifier too, and a whole search can
# be downloaded in one call. With ``continue_on_error`` failures are recorded
# instead of raised.

download_objects(client, package.metadata_identifiers, settings.download_dir)

report = download_query_results(
    client,
    SolrQuery(q="title:*soil* AND formatType:DATA", rows=3),
    settings.download_dir,
    max_results=3,
    continue_on_error=True,
)
print(f"{len(report.succeeded)} downloaded, {len(report.failed)} failed, {report.total_bytes} bytes")

# %%

client.close()
