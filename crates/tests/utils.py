"""
Shared fixtures for the crates test suite.
"""
import io
import json
import tarfile
from pathlib import Path
from unittest.mock import Mock

import requests


def make_crate_archive(name, version, files):
    """
    Build a .crate archive (gzip tarball) in memory.

    Args:
        name: Crate name
        version: Crate version
        files: Mapping of relative path -> text content

    Returns:
        bytes: Archive extracting to <name>-<version>/
    """
    buffer = io.BytesIO()
    root = f"{name}-{version}"
    with tarfile.open(fileobj=buffer, mode='w:gz') as tar:
        for relative, content in files.items():
            data = content.encode('utf-8')
            info = tarfile.TarInfo(f"{root}/{relative}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def cargo_toml(name, version, extra=''):
    return f'[package]\nname = "{name}"\nversion = "{version}"\n{extra}'


def write_index_file(root, name, versions):
    """Write a crates.io-index style file for name under root/<prefix>/"""
    directory = Path(root) / name[:2] / name[2:4]
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    lines = [json.dumps({'name': name, 'vers': v, 'deps': [], 'cksum': '0', 'yanked': False})
             for v in versions]
    path.write_text('\n'.join(lines) + '\n')
    return path


class FakeArtifactStore:
    """
    Stand-in for requests.Session serving .crate archives by URL.

    Unknown URLs answer 404. Every requested URL is recorded in ``requested``.
    """

    def __init__(self, artifact_host='https://static.test/crates'):
        self.artifact_host = artifact_host
        self.archives = {}
        self.requested = []

    def add(self, name, version, files):
        url = f"{self.artifact_host}/{name}/{name}-{version}.crate"
        self.archives[url] = make_crate_archive(name, version, files)

    def get(self, url, stream=False, **kwargs):
        self.requested.append(url)
        response = Mock()
        if url not in self.archives:
            response.status_code = 404
            response.raise_for_status.side_effect = requests.HTTPError(f"404 for {url}")
            return response
        data = self.archives[url]
        response.status_code = 200
        response.raise_for_status.return_value = None
        response.iter_content.side_effect = lambda chunk_size=1: iter([data])
        return response


def json_response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code}")
    else:
        response.raise_for_status.return_value = None
    return response
