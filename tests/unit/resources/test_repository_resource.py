"""Unit tests for RepositoryResource."""

import importlib
from unittest.mock import MagicMock, patch

import pytest
from dagster import build_resources

from geotutor.models import RepositorySettings, SolrDocument
from services.dagster.tutorial_pipelines.resources import RepositoryResource

CLIENT_PATH = "services.dagster.tutorial_pipelines.resources.repository_resource.RepositoryClient"


def test_defaults():
    resource = RepositoryResource()
    assert resource.base_url == "https://cn.dataone.org/cn/v2"
    assert resource.node_url is None
    assert resource.timeout == 30.0
    assert resource.download_dir == "downloads"


def test_get_client_passes_configuration():
    resource = RepositoryResource(
        base_url="https://cn.example.org/cn/v2",
        node_url="https://mn.example.org/mn/v2",
        token="secret",
        timeout=5.0,
    )
    with patch(CLIENT_PATH) as mock_client_cls:
        client = resource.get_client()

    mock_client_cls.assert_called_once_with(
        base_url="https://cn.example.org/cn/v2",
        node_url="https://mn.example.org/mn/v2",
        token="secret",
        timeout=5.0,
    )
    assert client is mock_client_cls.return_value


def test_get_client_treats_empty_strings_as_unset():
    """Test that empty env values (e.g. REPOSITORY_TOKEN=) become None."""
    resource = RepositoryResource(node_url="", token="")
    with patch(CLIENT_PATH) as mock_client_cls:
        resource.get_client()

    kwargs = mock_client_cls.call_args.kwargs
    assert kwargs["node_url"] is None
    assert kwargs["token"] is None


def test_real_client_urls():
    resource = RepositoryResource(base_url="https://cn.example.org/cn/v2/")
    with resource.get_client() as client:
        assert client.search_url == "https://cn.example.org/cn/v2/query/solr/"
        assert client.node_url == "https://cn.example.org/cn/v2"
        assert "Authorization" not in client.session.headers


# =============================================================================
# Test: from_settings and Definitions
# =============================================================================

REPOSITORY_ENV = (
    "REPOSITORY_BASE_URL",
    "REPOSITORY_NODE_URL",
    "REPOSITORY_TOKEN",
    "REPOSITORY_TIMEOUT",
    "REPOSITORY_DOWNLOAD_DIR",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in REPOSITORY_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_from_settings_copies_values(clean_env):
    clean_env.setenv("REPOSITORY_TIMEOUT", "12")
    clean_env.setenv("REPOSITORY_DOWNLOAD_DIR", "/tmp/pkgs")

    resource = RepositoryResource.from_settings(RepositorySettings(_env_file=None))

    assert resource.base_url == "https://cn.dataone.org/cn/v2"
    assert resource.node_url == "https://arcticdata.io/metacat/d1/mn/v2"
    assert resource.token is None
    assert resource.timeout == 12.0
    assert resource.download_dir == "/tmp/pkgs"


def test_from_settings_token_from_environment(clean_env):
    clean_env.setenv("REPOSITORY_TOKEN", "secret")

    resource = RepositoryResource.from_settings(RepositorySettings(_env_file=None))

    with build_resources({"repository": resource}) as resources:
        assert resources.repository.token == "secret"


def test_definitions_load_without_repository_env(clean_env, tmp_path):
    """Test that the download job runs with no REPOSITORY_* variables set."""
    clean_env.chdir(tmp_path)
    clean_env.setenv("REPOSITORY_DOWNLOAD_DIR", str(tmp_path / "env_dl"))
    definitions = importlib.reload(importlib.import_module("services.dagster.tutorial_pipelines.definitions"))

    client = MagicMock()
    client.__enter__.return_value = client
    client.__exit__.return_value = False
    client.iter_query.return_value = iter([SolrDocument(identifier="urn:uuid:aaa")])
    client.stream_object.return_value = 4
    run_config = {
        "ops": {
            "search_repository": {
                "inputs": {"search_config": {"value": {"query": {"q": "*:*"}}}}
            }
        }
    }

    with patch(CLIENT_PATH, return_value=client) as mock_client_cls:
        result = definitions.defs.get_job_def("repository_download_job").execute_in_process(run_config=run_config)

    assert result.success
    kwargs = mock_client_cls.call_args.kwargs
    assert kwargs["base_url"] == "https://cn.dataone.org/cn/v2"
    assert kwargs["token"] is None
    assert kwargs["timeout"] == 30.0
    download_info = result.output_for_node("download_search_results", "download_info")
    assert download_info["dest_dir"] == str(tmp_path / "env_dl")
    assert download_info["downloaded"] == 1
