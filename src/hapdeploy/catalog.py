"""
Build catalog client.

Lists CI builds published by the build server so a user can pick one to
deploy, and resolves the base URL their relative download paths hang off.

Endpoints:
    GET {base}/harmony/build/query            -> {"data": {"records": [...], "total": N}}
    GET {base}/config/getConfigByName         -> {"data": {"value": {"url": "..."}}}
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

BUILD_QUERY_PATH = '/harmony/build/query'
CONFIG_LOOKUP_PATH = '/config/getConfigByName'
DEFAULT_DOWNLOAD_CONFIG_NAME = 'harmony-hdc-server'
DEFAULT_CATALOG_TIMEOUT = 30.0


class CatalogError(Exception):
    """Raised when the build catalog cannot be queried."""
    pass


@dataclass
class BuildQuery:
    """Filters and paging for a build listing. None fields are not sent."""
    app_name: Optional[str] = None
    build_type: Optional[str] = None
    branch: Optional[str] = None
    page: Optional[int] = None
    page_size: Optional[int] = None

    def to_params(self) -> Dict[str, str]:
        params = {
            'appName': self.app_name,
            'buildType': self.build_type,
            'branch': self.branch,
            'page': self.page,
            'pageSize': self.page_size,
        }
        return {key: str(value) for key, value in params.items() if value is not None}


@dataclass
class BuildRecord:
    """One published build."""
    id: int
    app_name: str = ''
    build_type: str = ''
    branch: str = ''
    build_time: str = ''
    build_number: str = ''
    download_url: str = ''
    file_path: str = ''
    file_name: str = ''
    created_at: str = ''

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "BuildRecord":
        try:
            build_id = int(payload['id'])
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Build record without a valid id: {payload!r}") from e
        return cls(
            id=build_id,
            app_name=str(payload.get('appName') or ''),
            build_type=str(payload.get('buildType') or ''),
            branch=str(payload.get('branch') or ''),
            build_time=str(payload.get('buildTime') or ''),
            build_number=str(payload.get('buildNumber') or ''),
            download_url=str(payload.get('downloadUrl') or ''),
            file_path=str(payload.get('filePath') or ''),
            file_name=str(payload.get('fileName') or ''),
            created_at=str(payload.get('createdAt') or ''),
        )

    def resolve_download_url(self, download_base: str) -> str:
        """Join the download base and this record's (usually relative) URL."""
        if not self.download_url:
            raise CatalogError(f"Build {self.id} has no download URL")
        if self.download_url.startswith(('http://', 'https://')):
            return self.download_url
        if not download_base:
            raise CatalogError(f"No download base URL configured for build {self.id}")
        return download_base.rstrip('/') + '/' + self.download_url.lstrip('/')


@dataclass
class BuildPage:
    records: List[BuildRecord] = field(default_factory=list)
    total: int = 0


def _data_section(payload: Dict[str, Any], path: str) -> Dict[str, Any]:
    data = payload.get('data') or {}
    if not isinstance(data, dict):
        raise CatalogError(f"Unexpected response data from {path}: {data!r}")
    return data

class BuildCatalogClient:
    """
    Async client for the build catalog server.

    Args:
        base_url: Catalog server root, e.g. "https://builds.example.com"
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_CATALOG_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport

    async def _get_json(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, params=params, headers={'Accept': 'application/json'})
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise CatalogError(
                f"Request failed: {e.response.status_code} {e.response.reason_phrase} ({url})"
            ) from e
        except httpx.HTTPError as e:
            raise CatalogError(f"Request failed: {e} ({url})") from e
        except ValueError as e:
            raise CatalogError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(payload, dict):
            raise CatalogError(f"Unexpected response from {url}: {payload!r}")
        return payload

    async def query_builds(self, query: Optional[BuildQuery] = None) -> BuildPage:
        """List builds matching ``query``."""
        payload = await self._get_json(BUILD_QUERY_PATH, (query or BuildQuery()).to_params())
        data = _data_section(payload, BUILD_QUERY_PATH)
        records = data.get('records') or []
        if not isinstance(records, list):
            raise CatalogError(f"Unexpected build records from {BUILD_QUERY_PATH}: {records!r}")
        try:
            total = int(data.get('total') or 0)
        except (TypeError, ValueError) as e:
            raise CatalogError(f"Unexpected build total from {BUILD_QUERY_PATH}: {data.get('total')!r}") from e
        return BuildPage(
            records=[BuildRecord.from_api(record) for record in records],
            total=total
        )

    async def get_download_base(self, config_name: str = DEFAULT_DOWNLOAD_CONFIG_NAME) -> str:
        """Return the download base URL stored under ``config_name`` ('' if unset)."""
        payload = await self._get_json(CONFIG_LOOKUP_PATH, {'configName': config_name})
        value = _data_section(payload, CONFIG_LOOKUP_PATH).get('value') or {}
        if not isinstance(value, dict):
            return ''
        return str(value.get('url') or '')

    async def find_build(self, build_id: int, query: Optional[BuildQuery] = None) -> Optional[BuildRecord]:
        """Walk the listing page by page until the build with ``build_id`` shows up."""
        base = query or BuildQuery()
        page_size = base.page_size or 50
        page = 1
        seen = 0
        while True:
            result = await self.query_builds(BuildQuery(
                app_name=base.app_name,
                build_type=base.build_type,
                branch=base.branch,
                page=page,
                page_size=page_size
            ))
            for record in result.records:
                if record.id == build_id:
                    return record
            seen += len(result.records)
            if not result.records or seen >= result.total:
                return None
            page += 1
