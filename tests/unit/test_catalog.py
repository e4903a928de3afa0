"""Unit tests for the build catalog client."""

import asyncio

import httpx
import pytest

from hapdeploy.catalog import (
    BuildCatalogClient,
    BuildQuery,
    BuildRecord,
    CatalogError,
)

BASE = 'https://ci.example.com/api'


def _record(build_id, **overrides):
    record = {
        'id': build_id,
        'appName': 'demo',
        'buildType': 'debug',
        'branch': 'main',
        'buildTime': '2024-05-01 10:00:00',
        'buildNumber': str(100 + build_id),
        'downloadUrl': f'/files/demo-{build_id}.zip',
        'fileName': f'demo-{build_id}.zip',
    }
    record.update(overrides)
    return record


class CatalogServer:
    """MockTransport handler emulating the catalog endpoints."""

    def __init__(self, records=None, download_base='https://dl.example.com/'):
        self.records = records or []
        self.download_base = download_base
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == '/api/harmony/build/query':
            params = request.url.params
            page = int(params.get('page', 1))
            size = int(params.get('pageSize', 10))
            rows = [r for r in self.records if r['appName'] == params.get('appName', r['appName'])]
            chunk = rows[(page - 1) * size:page * size]
            return httpx.Response(200, json={'data': {'records': chunk, 'total': len(rows)}})
        if request.url.path == '/api/config/getConfigByName':
            return httpx.Response(200, json={'data': {'value': {'url': self.download_base}}})
        return httpx.Response(404)


def _client(handler):
    return BuildCatalogClient(BASE + '/', transport=httpx.MockTransport(handler))


class TestBuildQuery:

    def test_params_are_camel_case_and_skip_none(self):
        query = BuildQuery(app_name='demo', branch=None, page=2, page_size=20)
        assert query.to_params() == {'appName': 'demo', 'page': '2', 'pageSize': '20'}

    def test_empty_query(self):
        assert BuildQuery().to_params() == {}


class TestBuildRecord:

    def test_from_api_maps_fields(self):
        record = BuildRecord.from_api(_record(7))
        assert record.id == 7
        assert record.app_name == 'demo'
        assert record.build_number == '107'
        assert record.download_url == '/files/demo-7.zip'
        assert record.file_path == ''

    def test_from_api_requires_id(self):
        with pytest.raises(CatalogError, match='valid id'):
            BuildRecord.from_api({'appName': 'demo'})

    @pytest.mark.parametrize('base, url, expected', [
        ('https://dl.example.com/', '/files/a.zip', 'https://dl.example.com/files/a.zip'),
        ('https://dl.example.com', 'files/a.zip', 'https://dl.example.com/files/a.zip'),
        ('', 'https://other.example.com/a.hap', 'https://other.example.com/a.hap'),
    ])
    def test_resolve_download_url(self, base, url, expected):
        record = BuildRecord(id=1, download_url=url)
        assert record.resolve_download_url(base) == expected

    def test_resolve_without_url(self):
        with pytest.raises(CatalogError, match='no download URL'):
            BuildRecord(id=1).resolve_download_url('https://dl.example.com')

    def test_resolve_relative_without_base(self):
        with pytest.raises(CatalogError, match='No download base'):
            BuildRecord(id=1, download_url='/files/a.zip').resolve_download_url('')


class TestBuildCatalogClient:

    def test_query_builds(self):
        server = CatalogServer([_record(1), _record(2), _record(3, appName='other')])

        page = asyncio.run(_client(server).query_builds(BuildQuery(app_name='demo', page=1, page_size=10)))

        assert [r.id for r in page.records] == [1, 2]
        assert page.total == 2
        request = server.requests[0]
        assert request.url.path == '/api/harmony/build/query'
        assert request.url.params['appName'] == 'demo'

    def test_get_download_base(self):
        server = CatalogServer(download_base='https://dl.example.com/root')

        base = asyncio.run(_client(server).get_download_base('harmony-hdc-server'))

        assert base == 'https://dl.example.com/root'
        assert server.requests[0].url.params['configName'] == 'harmony-hdc-server'

    def test_get_download_base_missing_value(self):
        def handler(request):
            return httpx.Response(200, json={'data': {}})

        assert asyncio.run(_client(handler).get_download_base()) == ''

    def test_find_build_walks_pages(self):
        server = CatalogServer([_record(i) for i in range(1, 8)])

        record = asyncio.run(_client(server).find_build(6, BuildQuery(page_size=3)))

        assert record is not None and record.id == 6
        assert [r.url.params['page'] for r in server.requests] == ['1', '2']

    def test_find_build_not_found(self):
        server = CatalogServer([_record(i) for i in range(1, 5)])

        assert asyncio.run(_client(server).find_build(99, BuildQuery(page_size=3))) is None
        assert len(server.requests) == 2

    def test_http_error_status(self):
        def handler(request):
            return httpx.Response(503)

        with pytest.raises(CatalogError, match='503'):
            asyncio.run(_client(handler).query_builds())

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError('connection refused', request=request)

        with pytest.raises(CatalogError, match='connection refused'):
            asyncio.run(_client(handler).query_builds())

    def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, content=b'<html>oops</html>')

        with pytest.raises(CatalogError, match='Invalid JSON'):
            asyncio.run(_client(handler).query_builds())

    def test_non_object_payload(self):
        def handler(request):
            return httpx.Response(200, json=[1, 2, 3])

        with pytest.raises(CatalogError, match='Unexpected response'):
            asyncio.run(_client(handler).query_builds())

    @pytest.mark.parametrize('body, message', [
        ({'data': ['not', 'a', 'mapping']}, 'Unexpected response data'),
        ({'data': {'records': {'id': 1}, 'total': 1}}, 'Unexpected build records'),
        ({'data': {'records': [], 'total': 'many'}}, 'Unexpected build total'),
    ])
    def test_malformed_build_listing(self, body, message):
        def handler(request):
            return httpx.Response(200, json=body)

        with pytest.raises(CatalogError, match=message):
            asyncio.run(_client(handler).query_builds())

    def test_malformed_config_lookup(self):
        def handler(request):
            return httpx.Response(200, json={'data': 'https://dl.example.com'})

        with pytest.raises(CatalogError, match='Unexpected response data'):
            asyncio.run(_client(handler).get_download_base())
